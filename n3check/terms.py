# =====================================================================================
# Terms, triples and formulas
# =====================================================================================
#
# Everything the checker reasons about is built from these immutable values.
# Equality is structural everywhere, so two formulas parsed from different places
# (or rebuilt by substitution) compare equal as soon as they hold the same triples.

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

from .errors import InvalidProof


# ==============================================================================
# Namespace constants
# ==============================================================================
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS_NS = "http://www.w3.org/2000/01/rdf-schema#"
XSD_NS = "http://www.w3.org/2001/XMLSchema#"
LOG_NS = "http://www.w3.org/2000/10/swap/log#"
MATH_NS = "http://www.w3.org/2000/10/swap/math#"
STRING_NS = "http://www.w3.org/2000/10/swap/string#"
LIST_NS = "http://www.w3.org/2000/10/swap/list#"
REASON_NS = "http://www.w3.org/2000/10/swap/reason#"


# =====================================================================================
# Term hierarchy
# =====================================================================================

# A term is anything that can sit in subject, predicate or object position.
# Variables and blank nodes are the "placeholders": inside a formula that is
# being tested for entailment they may stand for any term.


@dataclass(frozen=True)
class Term:
    """Base class; concrete subclasses hold the actual data."""

    @property
    def is_placeholder(self) -> bool:
        return False


@dataclass(frozen=True)
class Iri(Term):
    value: str

    def __str__(self) -> str:
        return f"<{self.value}>"


@dataclass(frozen=True)
class Literal(Term):
    # Raw lexical form, e.g. "foo", 12, true,
    # or "\"1944-08-21\"^^<http://www.w3.org/2001/XMLSchema#date>"
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Var(Term):
    # Variable name *without* the leading '?'
    name: str

    @property
    def is_placeholder(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"?{self.name}"


@dataclass(frozen=True)
class Blank(Term):
    # Blank node label including the "_:" prefix, like _:b1
    label: str

    @property
    def is_placeholder(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class ListTerm(Term):
    # Proper closed list: (a b c)
    elems: Tuple[Term, ...]

    def __str__(self) -> str:
        return "(" + " ".join(str(e) for e in self.elems) + ")"


@dataclass(frozen=True)
class Triple:
    s: Term
    p: Term
    o: Term

    def __iter__(self) -> Iterator[Term]:
        return iter((self.s, self.p, self.o))

    def __str__(self) -> str:
        return f"{self.s} {self.p} {self.o} ."


@dataclass(frozen=True)
class Formula(Term):
    """
    A quoted formula `{ ... }`: a conjunction of triples.

    The triples form a set, so order is irrelevant and duplicates collapse.
    A formula is also a Term, which is how `{ A } log:implies { B }` and
    `{ S } log:supports { D }` nest formulas inside statements.
    """

    triples: FrozenSet[Triple] = frozenset()

    @staticmethod
    def of(triples: Iterable[Triple]) -> "Formula":
        return Formula(frozenset(triples))

    def __len__(self) -> int:
        return len(self.triples)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self.triples)

    def __contains__(self, tr: object) -> bool:
        return tr in self.triples

    def __bool__(self) -> bool:
        return bool(self.triples)

    def union(self, *others: "Formula") -> "Formula":
        merged = set(self.triples)
        for other in others:
            merged.update(other.triples)
        return Formula(frozenset(merged))

    def single(self, step: Optional[Term] = None) -> Triple:
        """Return the only triple of an atomic formula."""
        if len(self.triples) != 1:
            raise InvalidProof(
                f"Expected atomic formula, got {len(self.triples)} statements",
                step=step,
            )
        return next(iter(self.triples))

    def __str__(self) -> str:
        inner = " ".join(str(tr) for tr in sorted(self.triples, key=str))
        return "{ " + inner + " }" if inner else "{}"


EMPTY = Formula()


def merge(formulas: Iterable[Formula]) -> Formula:
    """Union of any number of formulas; the empty conjunction is `{}`."""
    return EMPTY.union(*formulas)


# =====================================================================================
# Small helpers about special terms
# =====================================================================================

def iri(ns: str, local: str) -> Iri:
    return Iri(ns + local)


RDF_TYPE = iri(RDF_NS, "type")
LOG_IMPLIES = iri(LOG_NS, "implies")
LOG_INCLUDES = iri(LOG_NS, "includes")
LOG_SUPPORTS = iri(LOG_NS, "supports")


def is_rdf_type_pred(p: Term) -> bool:
    return p == RDF_TYPE


def is_log_implies(p: Term) -> bool:
    return p == LOG_IMPLIES


def is_ground_term(t: Term) -> bool:
    """
    Is a term free of placeholders (variables and blank nodes)?
    """
    if t.is_placeholder:
        return False
    if isinstance(t, ListTerm):
        return all(is_ground_term(e) for e in t.elems)
    if isinstance(t, Formula):
        return all(is_ground_triple(tr) for tr in t.triples)
    return True


def is_ground_triple(tr: Triple) -> bool:
    return is_ground_term(tr.s) and is_ground_term(tr.p) and is_ground_term(tr.o)
