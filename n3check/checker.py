# =====================================================================================
# The proof checker
# =====================================================================================
#
# Checker.check() starts at the document's r:Proof step and re-derives, step by
# step, what each one is entitled to claim:
#
#   Premise      allowed by the policy?
#   Inference    rule antecedent (with bindings applied) found in the evidence?
#   Conjunction  union of the components.
#   Fact         log:includes test, or a registered built-in.
#   Conclusion   {S} log:supports {D}: derive D assuming only S.
#   Extraction   declared formula found in the source step's result.
#
# Results are memoized per (step, policy). The same step checked under another
# policy is checked again: a premise that was fine inside a discharged
# assumption must not leak out of it. Failures raise immediately and are never
# stored.

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Set, Tuple

from .builtins import BuiltinError, BuiltinRegistry
from .entail import DEFAULT_ENTAILMENT_BUDGET, entails
from .errors import InvalidProof, LogicalFallacy, PolicyViolation
from .graph import Graph
from .policy import Assumption, Policy
from .reasons import (
    REASON_CLASSES,
    Conclusion,
    Conjunction,
    Extraction,
    Fact,
    Inference,
    Premise,
    Reason,
    find_root,
    gives_formula,
    read_reason,
)
from .terms import (
    EMPTY,
    LOG_INCLUDES,
    Formula,
    Literal,
    Term,
    is_log_implies,
    merge,
)
from .unify import apply_subst_formula

logger = logging.getLogger(__name__)

MemoKey = Tuple[Term, Policy]


class _Frame:
    """A step on the work stack, waiting for its dependencies."""

    __slots__ = ("key", "step", "level", "deps", "next")

    def __init__(self, key: MemoKey, step: Reason, level: int, deps: List[MemoKey]) -> None:
        self.key = key
        self.step = step
        self.level = level
        self.deps = deps
        self.next = 0


class Checker:
    """
    Verifier for one proof document.

    The document is never modified. A Checker is meant for a single thread;
    run separate instances to check in parallel (policies and built-in
    registries may be shared).
    """

    # Method checking each kind of step, given the results of its dependencies.
    HANDLERS: Dict[type, str] = {
        Premise: "_check_premise",
        Inference: "_check_gmp",
        Conjunction: "_check_conjunction",
        Fact: "_check_builtin",
        Conclusion: "_check_supports",
        Extraction: "_check_extraction",
    }

    def __init__(
        self,
        proof: Graph,
        builtins: Optional[BuiltinRegistry] = None,
        budget: int = DEFAULT_ENTAILMENT_BUDGET,
    ) -> None:
        self.store = proof
        self.builtins = builtins if builtins is not None else BuiltinRegistry()
        self.budget = budget
        self.checked: Dict[MemoKey, Formula] = {}
        self._reasons: Dict[Term, Reason] = {}
        self._in_progress: Set[MemoKey] = set()
        self._handlers: Dict[type, Callable[[Reason, Policy, List[Formula]], Formula]] = {
            kind: getattr(self, name) for kind, name in self.HANDLERS.items()
        }

    # ---------------------------------------------------------------------------------
    # Entry points
    # ---------------------------------------------------------------------------------

    def conjecture(self) -> Tuple[Term, Formula]:
        """The root step and the overall conclusion it claims."""
        root = find_root(self.store)
        return root, gives_formula(self.store, root)

    def check(self, policy: Policy) -> Formula:
        """
        Verify the proof from its root step and return what it establishes.

        The result is not compared with the root's declared conclusion; use
        verify() for that.
        """
        root, _claimed = self.conjecture()
        return self.resolve(root, policy)

    def verify(self, policy: Policy) -> Formula:
        """check(), then require the result to entail the declared conclusion."""
        root, claimed = self.conjecture()
        result = self.resolve(root, policy)
        if not self._entails(result, claimed):
            raise LogicalFallacy(
                "Proof does not establish its declared conclusion", step=root
            )
        return result

    def resolve(self, reason: Term, policy: Policy) -> Formula:
        """
        The formula step `reason` establishes under `policy`.

        Steps are visited depth-first with an explicit stack: a step is checked
        once all the steps it depends on have results, so proof depth is not
        limited by the interpreter's recursion limit.
        """
        key = (reason, policy)
        if key in self.checked:
            return self.checked[key]

        stack = [self._enter(key, 0)]
        try:
            while stack:
                frame = stack[-1]
                if frame.next < len(frame.deps):
                    dep = frame.deps[frame.next]
                    frame.next += 1
                    if dep in self.checked:
                        continue
                    if dep in self._in_progress:
                        raise InvalidProof(f"Circular reference to {dep[0]}", step=dep[0])
                    stack.append(self._enter(dep, frame.level + 1))
                    continue

                stack.pop()
                self._in_progress.discard(frame.key)
                inputs = [self.checked[dep] for dep in frame.deps]
                handler = self._handlers[type(frame.step)]
                self.checked[frame.key] = handler(frame.step, frame.key[1], inputs)
        finally:
            for frame in stack:
                self._in_progress.discard(frame.key)

        return self.checked[key]

    def _enter(self, key: MemoKey, level: int) -> _Frame:
        reason, policy = key
        step = self.reason(reason)
        logger.debug("%s%s %s", "  " * level, type(step).__name__, reason)
        self._in_progress.add(key)
        return _Frame(key, step, level, self._dependencies(step, policy))

    def _dependencies(self, step: Reason, policy: Policy) -> List[MemoKey]:
        # Which (step, policy) results a step needs, in the order it uses them.
        if isinstance(step, Inference):
            return [(e, policy) for e in step.evidence] + [(step.rule, policy)]
        if isinstance(step, Conjunction):
            return [(c, policy) for c in step.components]
        if isinstance(step, Conclusion):
            return [(step.because, Assumption(step.source, self.budget))]
        if isinstance(step, Extraction):
            return [(step.because, policy)]
        return []

    def reason(self, reason: Term) -> Reason:
        step = self._reasons.get(reason)
        if step is None:
            step = read_reason(self.store, reason)
            self._reasons[reason] = step
        return step

    def _entails(self, have: Formula, want: Formula) -> bool:
        return entails(have, want, self.budget)

    # ---------------------------------------------------------------------------------
    # One method per kind of step
    # ---------------------------------------------------------------------------------

    def _check_premise(self, step: Premise, policy: Policy, inputs: List[Formula]) -> Formula:
        if not policy.assumes(step.gives):
            raise PolicyViolation(f"I cannot assume {step.gives}", step=step.id)
        return step.gives

    def _check_gmp(self, step: Inference, policy: Policy, inputs: List[Formula]) -> Formula:
        *evidence, rule = inputs

        antecedent, consequent = self._implication(rule, step.id)
        bindings = dict(step.bindings)
        antecedent = apply_subst_formula(antecedent, bindings)
        consequent = apply_subst_formula(consequent, bindings)

        if not self._entails(merge(evidence), antecedent):
            raise LogicalFallacy(
                "Can't find antecedent in evidence",
                step=step.id,
                details={"antecedent": antecedent},
            )
        return consequent

    @staticmethod
    def _implication(rule: Formula, step: Term) -> Tuple[Formula, Formula]:
        implies = [tr for tr in rule if is_log_implies(tr.p)]
        if not implies:
            raise InvalidProof("Rule has no log:implies predicate", step=step)
        if len(implies) > 1:
            raise InvalidProof("Rule has more than one log:implies statement", step=step)
        tr = implies[0]

        # `true => { ... }` is a rule with an empty antecedent.
        antecedent = EMPTY if tr.s == Literal("true") else tr.s
        if not isinstance(antecedent, Formula) or not isinstance(tr.o, Formula):
            raise InvalidProof("log:implies must relate two formulas", step=step)
        return antecedent, tr.o

    def _check_conjunction(
        self, step: Conjunction, policy: Policy, inputs: List[Formula]
    ) -> Formula:
        return merge(inputs)

    def _check_builtin(self, step: Fact, policy: Policy, inputs: List[Formula]) -> Formula:
        subject, predicate, obj = step.statement

        if predicate == LOG_INCLUDES:
            if not isinstance(subject, Formula) or not isinstance(obj, Formula):
                raise InvalidProof("log:includes must relate two formulas", step=step.id)
            if not self._entails(subject, obj):
                raise LogicalFallacy("Include test failed", step=step.id)
            return step.gives

        evaluator = self.builtins.get(predicate)
        if evaluator is None:
            raise PolicyViolation(
                f"Claimed as fact, but {predicate} is not a built-in", step=step.id
            )
        try:
            holds = evaluator(subject, obj)
        except BuiltinError as e:
            raise LogicalFallacy(
                f"Built-in {predicate} could not be evaluated: {e}", step=step.id
            ) from e
        if not holds:
            raise LogicalFallacy("Built-in fact does not give correct results", step=step.id)
        return step.gives

    def _check_supports(
        self, step: Conclusion, policy: Policy, inputs: List[Formula]
    ) -> Formula:
        # Derived under Assumption(step.source); see _dependencies().
        (nested,) = inputs
        if not self._entails(nested, step.derived):
            raise LogicalFallacy("Conclusion not supported by its derivation", step=step.id)
        return step.gives

    def _check_extraction(
        self, step: Extraction, policy: Policy, inputs: List[Formula]
    ) -> Formula:
        (source,) = inputs
        if not self._entails(source, step.gives):
            raise LogicalFallacy("Extraction not included in formula", step=step.id)
        return step.gives


if set(Checker.HANDLERS) != set(REASON_CLASSES.values()):
    raise RuntimeError("Checker.HANDLERS does not cover every kind of step")
