"""
Indexed triple store.

A proof document is loaded once and then queried many times, because shared
sub-proofs are referenced from several places. Every triple is indexed by
subject, predicate and object so that a pattern query only scans the smallest
bucket that can possibly contain its answers.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional

from .terms import Formula, Term, Triple


class Graph:
    """Read-only set of triples with `match(s?, p?, o?)` pattern queries."""

    def __init__(self, triples: Iterable[Triple] = ()) -> None:
        self._triples: List[Triple] = []
        self._seen = set()
        self._by_s: Dict[Term, List[Triple]] = defaultdict(list)
        self._by_p: Dict[Term, List[Triple]] = defaultdict(list)
        self._by_o: Dict[Term, List[Triple]] = defaultdict(list)
        for tr in triples:
            self._add(tr)

    @staticmethod
    def from_formula(formula: Formula) -> "Graph":
        return Graph(formula.triples)

    def _add(self, tr: Triple) -> None:
        if tr in self._seen:
            return
        self._seen.add(tr)
        self._triples.append(tr)
        self._by_s[tr.s].append(tr)
        self._by_p[tr.p].append(tr)
        self._by_o[tr.o].append(tr)

    def __len__(self) -> int:
        return len(self._triples)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._triples)

    def __contains__(self, tr: object) -> bool:
        return tr in self._seen

    def _bucket(
        self,
        s: Optional[Term],
        p: Optional[Term],
        o: Optional[Term],
    ) -> List[Triple]:
        # Smallest index bucket among the bound positions.
        buckets = []
        if s is not None:
            buckets.append(self._by_s.get(s, []))
        if p is not None:
            buckets.append(self._by_p.get(p, []))
        if o is not None:
            buckets.append(self._by_o.get(o, []))
        if not buckets:
            return self._triples
        return min(buckets, key=len)

    def match(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
    ) -> List[Triple]:
        """All triples matching the pattern; None is a wildcard."""
        out: List[Triple] = []
        for tr in self._bucket(subject, predicate, object):
            if subject is not None and tr.s != subject:
                continue
            if predicate is not None and tr.p != predicate:
                continue
            if object is not None and tr.o != object:
                continue
            out.append(tr)
        return out

    def count(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
    ) -> int:
        """Upper bound on the number of matches, read straight off the indices."""
        return len(self._bucket(subject, predicate, object))

    def objects(self, subject: Term, predicate: Term) -> List[Term]:
        return [tr.o for tr in self.match(subject, predicate, None)]

    def to_formula(self) -> Formula:
        return Formula.of(self._triples)
