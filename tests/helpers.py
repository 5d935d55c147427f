"""
Helpers for building proof documents in tests without going through N3 text.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from n3check.graph import Graph
from n3check.reasons import (
    BECAUSE,
    BINDING,
    BOUND_TO,
    COMPONENT,
    EVIDENCE,
    GIVES,
    PROOF,
    RULE,
    VARIABLE,
    ReasonKind,
)
from n3check.terms import (
    LOG_IMPLIES,
    RDF_TYPE,
    Blank,
    Formula,
    Iri,
    ListTerm,
    Term,
    Triple,
    Var,
)

EX = "http://example.org/#"


def ex(name: str) -> Iri:
    return Iri(EX + name)


def t(s: Term, p: Term, o: Term) -> Triple:
    return Triple(s, p, o)


def f(*triples: Triple) -> Formula:
    return Formula.of(triples)


def rule(antecedent: Formula, consequent: Formula) -> Formula:
    return f(t(antecedent, LOG_IMPLIES, consequent))


# The syllogism used throughout the tests.
X = Var("x")
SOCRATES = ex("Socrates")
PLATO = ex("Plato")
HUMAN = ex("Human")
MORTAL = ex("Mortal")
MORTALITY_RULE = rule(f(t(X, RDF_TYPE, HUMAN)), f(t(X, RDF_TYPE, MORTAL)))


class ProofBuilder:
    """Accumulates `reason:` statements for a proof document."""

    def __init__(self) -> None:
        self.triples: List[Triple] = []
        self._bindings = 0

    def _step(self, name: str, kind: ReasonKind, gives: Formula) -> Iri:
        step = ex(name)
        self.triples.append(t(step, RDF_TYPE, kind.iri))
        self.triples.append(t(step, GIVES, gives))
        return step

    def premise(self, name: str, gives: Formula) -> Iri:
        return self._step(name, ReasonKind.PREMISE, gives)

    def inference(
        self,
        name: str,
        gives: Formula,
        evidence: Sequence[Term],
        rule: Optional[Term] = None,
        bindings: Iterable[Tuple[Term, Term]] = (),
    ) -> Iri:
        step = self._step(name, ReasonKind.INFERENCE, gives)
        self.triples.append(t(step, EVIDENCE, ListTerm(tuple(evidence))))
        if rule is not None:
            self.triples.append(t(step, RULE, rule))
        for variable, value in bindings:
            self._bindings += 1
            node = Blank(f"_:binding{self._bindings}")
            self.triples.append(t(step, BINDING, node))
            self.triples.append(t(node, VARIABLE, variable))
            self.triples.append(t(node, BOUND_TO, value))
        return step

    def conjunction(self, name: str, gives: Formula, components: Sequence[Term]) -> Iri:
        step = self._step(name, ReasonKind.CONJUNCTION, gives)
        for c in components:
            self.triples.append(t(step, COMPONENT, c))
        return step

    def fact(self, name: str, gives: Formula) -> Iri:
        return self._step(name, ReasonKind.FACT, gives)

    def conclusion(self, name: str, gives: Formula, because: Term) -> Iri:
        step = self._step(name, ReasonKind.CONCLUSION, gives)
        self.triples.append(t(step, BECAUSE, because))
        return step

    def extraction(self, name: str, gives: Formula, because: Term) -> Iri:
        step = self._step(name, ReasonKind.EXTRACTION, gives)
        self.triples.append(t(step, BECAUSE, because))
        return step

    def mark_root(self, step: Iri) -> Iri:
        self.triples.append(t(step, RDF_TYPE, PROOF))
        return step

    def graph(self) -> Graph:
        return Graph(self.triples)


def syllogism(bound_to: Term = SOCRATES) -> Tuple[ProofBuilder, Iri]:
    """p1 (premise), p2 (rule premise), i1 (inference) binding ?x to `bound_to`."""
    b = ProofBuilder()
    p1 = b.premise("p1", f(t(SOCRATES, RDF_TYPE, HUMAN)))
    p2 = b.premise("p2", MORTALITY_RULE)
    i1 = b.inference(
        "i1",
        f(t(bound_to, RDF_TYPE, MORTAL)),
        evidence=[p1],
        rule=p2,
        bindings=[(X, bound_to)],
    )
    return b, i1
