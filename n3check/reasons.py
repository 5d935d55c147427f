# =====================================================================================
# Proof steps ("reasons")
# =====================================================================================
#
# A proof document describes each step with `reason:` statements:
#
#   <#lemma1> a r:Inference ;
#       r:gives { :Socrates a :Mortal } ;
#       r:evidence ( <#lemma2> ) ;
#       r:rule <#lemma3> ;
#       r:binding [ r:variable ?x ; r:boundTo :Socrates ] .
#
# read_reason() turns those statements into one of the dataclasses below, one
# per step kind, raising InvalidProof whenever a required edge is missing. The
# checker only ever sees well-shaped steps.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from .errors import InvalidProof
from .graph import Graph
from .terms import (
    Formula,
    ListTerm,
    LOG_SUPPORTS,
    RDF_TYPE,
    REASON_NS,
    Iri,
    Term,
    Triple,
)


def r(local: str) -> Iri:
    return Iri(REASON_NS + local)


PROOF = r("Proof")
GIVES = r("gives")
EVIDENCE = r("evidence")
RULE = r("rule")
BINDING = r("binding")
VARIABLE = r("variable")
BOUND_TO = r("boundTo")
COMPONENT = r("component")
BECAUSE = r("because")


class ReasonKind(Enum):
    PREMISE = REASON_NS + "Premise"
    INFERENCE = REASON_NS + "Inference"
    CONJUNCTION = REASON_NS + "Conjunction"
    FACT = REASON_NS + "Fact"
    CONCLUSION = REASON_NS + "Conclusion"
    EXTRACTION = REASON_NS + "Extraction"

    @property
    def iri(self) -> Iri:
        return Iri(self.value)

    @classmethod
    def from_term(cls, t: Term) -> Optional["ReasonKind"]:
        if isinstance(t, Iri):
            for kind in cls:
                if kind.value == t.value:
                    return kind
        return None


@dataclass(frozen=True)
class Premise:
    id: Term
    gives: Formula


@dataclass(frozen=True)
class Inference:
    id: Term
    gives: Formula
    evidence: Tuple[Term, ...]
    rule: Term
    bindings: Tuple[Tuple[Term, Term], ...]


@dataclass(frozen=True)
class Conjunction:
    id: Term
    gives: Formula
    components: Tuple[Term, ...]


@dataclass(frozen=True)
class Fact:
    id: Term
    gives: Formula
    statement: Triple


@dataclass(frozen=True)
class Conclusion:
    id: Term
    gives: Formula
    because: Term
    source: Formula
    derived: Formula


@dataclass(frozen=True)
class Extraction:
    id: Term
    gives: Formula
    because: Term


Reason = Union[Premise, Inference, Conjunction, Fact, Conclusion, Extraction]

# Which dataclass each kind is read into; checked against the enum at import.
REASON_CLASSES = {
    ReasonKind.PREMISE: Premise,
    ReasonKind.INFERENCE: Inference,
    ReasonKind.CONJUNCTION: Conjunction,
    ReasonKind.FACT: Fact,
    ReasonKind.CONCLUSION: Conclusion,
    ReasonKind.EXTRACTION: Extraction,
}
if set(REASON_CLASSES) != set(ReasonKind):
    raise RuntimeError("REASON_CLASSES does not cover every ReasonKind")


# =====================================================================================
# Reading steps out of the graph
# =====================================================================================

def _one(graph: Graph, subject: Term, predicate: Iri, what: str) -> Term:
    objs = graph.objects(subject, predicate)
    if not objs:
        raise InvalidProof(f"No {what} given for {subject}", step=subject)
    if len(objs) > 1:
        raise InvalidProof(f"More than one {what} given for {subject}", step=subject)
    return objs[0]


def _refs(graph: Graph, subject: Term, predicate: Iri) -> Tuple[Term, ...]:
    """Step references, given as repeated edges, as an N3 list, or both."""
    out: List[Term] = []
    for o in graph.objects(subject, predicate):
        if isinstance(o, ListTerm):
            out.extend(o.elems)
        else:
            out.append(o)
    return tuple(out)


def reason_kind(graph: Graph, step: Term) -> ReasonKind:
    """
    The kind of a step. `r:Proof` only marks the root and may sit next to
    the real kind; any other type the checker does not know is ignored.
    """
    types = graph.objects(step, RDF_TYPE)
    if not types:
        raise InvalidProof(f"{step} does not have the type of any reason", step=step)
    kinds = {k for k in (ReasonKind.from_term(t) for t in types) if k is not None}
    if not kinds:
        names = ", ".join(str(t) for t in types)
        raise InvalidProof(f"Unknown reason type: {names}", step=step)
    if len(kinds) > 1:
        names = ", ".join(sorted(k.name for k in kinds))
        raise InvalidProof(f"{step} has more than one reason type: {names}", step=step)
    return kinds.pop()


def gives_formula(graph: Graph, step: Term) -> Formula:
    given = _one(graph, step, GIVES, "r:gives formula")
    if not isinstance(given, Formula):
        raise InvalidProof(f"r:gives of {step} is not a formula: {given}", step=step)
    return given


def _bindings(graph: Graph, step: Term) -> Tuple[Tuple[Term, Term], ...]:
    out = []
    for node in graph.objects(step, BINDING):
        variable = _one(graph, node, VARIABLE, "variable")
        value = _one(graph, node, BOUND_TO, "bound value")
        out.append((variable, value))
    return tuple(out)


def read_reason(graph: Graph, step: Term) -> Reason:
    """Read the step named `step` into its typed form."""
    kind = reason_kind(graph, step)
    gives = gives_formula(graph, step)

    if kind is ReasonKind.PREMISE:
        return Premise(step, gives)

    if kind is ReasonKind.INFERENCE:
        rule = _one(graph, step, RULE, "rule")
        return Inference(step, gives, _refs(graph, step, EVIDENCE), rule, _bindings(graph, step))

    if kind is ReasonKind.CONJUNCTION:
        return Conjunction(step, gives, _refs(graph, step, COMPONENT))

    if kind is ReasonKind.FACT:
        return Fact(step, gives, gives.single(step))

    if kind is ReasonKind.CONCLUSION:
        tr = gives.single(step)
        if tr.p != LOG_SUPPORTS:
            raise InvalidProof("Supports step is not a log:supports", step=step)
        if not isinstance(tr.s, Formula) or not isinstance(tr.o, Formula):
            raise InvalidProof("log:supports must relate two formulas", step=step)
        because = _one(graph, step, BECAUSE, "source step")
        return Conclusion(step, gives, because, tr.s, tr.o)

    if kind is ReasonKind.EXTRACTION:
        return Extraction(step, gives, _one(graph, step, BECAUSE, "source step"))

    raise InvalidProof(f"Unknown reason type: {kind}", step=step)


def find_root(graph: Graph) -> Term:
    """The identifier of the document's single `r:Proof` step."""
    roots = [tr.s for tr in graph.match(None, RDF_TYPE, PROOF)]
    if not roots:
        raise InvalidProof("no main :Proof step")
    if len(roots) > 1:
        raise InvalidProof(f"{len(roots)} :Proof steps, expected exactly one")
    return roots[0]
