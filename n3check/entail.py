# =====================================================================================
# Entailment between formulas
# =====================================================================================
#
# entails(have, want) asks: can every triple pattern of `want` be found in `have`
# under ONE consistent assignment of want's placeholders (variables and blank
# nodes)? This is subgraph matching, so we search with backtracking:
#
#   1) Ground patterns are plain membership tests and are checked up front.
#   2) The remaining patterns are solved depth-first. At each level we pick the
#      pattern with the fewest candidate triples under the current bindings
#      (most-constrained first), try each candidate, and go deeper.
#   3) Lists match element-wise; quoted formulas match as nested sub-problems
#      that share the outer bindings.
#
# Formulas come from untrusted proofs, so the search is metered: each candidate
# triple tried costs one unit of a budget. entails() reads running out as "not
# entailed"; search() raises BudgetExhausted instead, for callers (negation)
# that must not mistake "gave up" for "no match".

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .graph import Graph
from .terms import Formula, ListTerm, Term, Triple, is_ground_term, is_ground_triple
from .unify import Subst, apply_subst_formula

logger = logging.getLogger(__name__)

# Default number of candidate matches one entailment test may try.
DEFAULT_ENTAILMENT_BUDGET = 100_000


class BudgetExhausted(Exception):
    """The search tried more candidates than it was allowed to."""


class SearchBudget:
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.spent = 0

    def charge(self, units: int = 1) -> None:
        self.spent += units
        if self.spent > self.limit:
            raise BudgetExhausted(f"entailment search exceeded {self.limit} steps")


class Matcher:
    """
    Backtracking pattern matcher.

    One Matcher serves one top-level entailment test; nested formula matches
    reuse its budget and its cache of indexed graphs.
    """

    def __init__(self, budget: SearchBudget) -> None:
        self.budget = budget
        self._graphs: Dict[Formula, Graph] = {}

    def graph(self, f: Formula) -> Graph:
        g = self._graphs.get(f)
        if g is None:
            g = Graph.from_formula(f)
            self._graphs[f] = g
        return g

    # ---------------------------------------------------------------------------------
    # Terms
    # ---------------------------------------------------------------------------------

    def match_term(self, pat: Term, val: Term, subst: Subst) -> Iterator[Subst]:
        if pat.is_placeholder:
            bound = subst.get(pat)
            if bound is None:
                s2 = dict(subst)
                s2[pat] = val
                yield s2
            elif bound == val:
                yield subst
            return

        if isinstance(pat, ListTerm):
            if isinstance(val, ListTerm) and len(pat.elems) == len(val.elems):
                yield from self._match_seq(pat.elems, val.elems, subst)
            return

        if isinstance(pat, Formula):
            if not isinstance(val, Formula):
                return
            if is_ground_term(pat):
                if pat == val:
                    yield subst
                return
            # A quoted pattern must describe the whole quoted formula, not a part.
            # Two pattern statements may land on the same fact, so equal sizes
            # are not enough: the bound pattern has to be the formula itself.
            if len(pat) != len(val):
                return
            for s2 in self.solve(list(pat.triples), self.graph(val), subst):
                if apply_subst_formula(pat, s2) == val:
                    yield s2
            return

        # Iri, Literal: exact match (lexical form and datatype).
        if pat == val:
            yield subst

    def _match_seq(
        self, pats: Sequence[Term], vals: Sequence[Term], subst: Subst
    ) -> Iterator[Subst]:
        if not pats:
            yield subst
            return
        for s2 in self.match_term(pats[0], vals[0], subst):
            yield from self._match_seq(pats[1:], vals[1:], s2)

    def match_triple(self, pat: Triple, fact: Triple, subst: Subst) -> Iterator[Subst]:
        for s1 in self.match_term(pat.s, fact.s, subst):
            for s2 in self.match_term(pat.p, fact.p, s1):
                yield from self.match_term(pat.o, fact.o, s2)

    # ---------------------------------------------------------------------------------
    # Conjunctions of patterns
    # ---------------------------------------------------------------------------------

    @staticmethod
    def _key(t: Term, subst: Subst) -> Optional[Term]:
        # Index key for a pattern position, or None when it must be a wildcard.
        if t.is_placeholder:
            return subst.get(t)
        if is_ground_term(t):
            return t
        return None

    def _keys(
        self, pat: Triple, subst: Subst
    ) -> Tuple[Optional[Term], Optional[Term], Optional[Term]]:
        return (
            self._key(pat.s, subst),
            self._key(pat.p, subst),
            self._key(pat.o, subst),
        )

    def _expand(
        self, patterns: List[Triple], have: Graph, subst: Subst
    ) -> Iterator[Tuple[List[Triple], Subst]]:
        # Choosing the pattern reads bucket sizes off the indices and is free;
        # only the facts actually tried are charged.
        best_i = -1
        best_size = -1
        for i, pat in enumerate(patterns):
            size = have.count(*self._keys(pat, subst))
            if best_i < 0 or size < best_size:
                best_i, best_size = i, size
                if not size:
                    return

        pat = patterns[best_i]
        rest = patterns[:best_i] + patterns[best_i + 1 :]
        for fact in have.match(*self._keys(pat, subst)):
            self.budget.charge()
            for s2 in self.match_triple(pat, fact, subst):
                yield rest, s2

    def solve(
        self, patterns: List[Triple], have: Graph, subst: Subst
    ) -> Iterator[Subst]:
        """
        Yield every substitution under which all patterns occur in `have`.

        Depth-first with an explicit stack so that long conjunctions do not
        run into the interpreter's recursion limit.
        """
        if not patterns:
            yield subst
            return

        stack = [self._expand(patterns, have, subst)]
        while stack:
            try:
                rest, s2 = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue
            if not rest:
                yield s2
            else:
                stack.append(self._expand(rest, have, s2))


def search(
    have: Formula,
    want: Formula,
    budget: Optional[int] = None,
) -> Optional[Subst]:
    """
    Return one binding of want's placeholders under which every triple of
    `want` is in `have`, or None if there is none.

    Raises BudgetExhausted when the search gives up before deciding.
    """
    if not want:
        return {}
    if not have:
        return None

    graph = Graph.from_formula(have)
    patterns: List[Triple] = []
    for tr in want:
        if is_ground_triple(tr):
            if tr not in graph:
                return None
        else:
            patterns.append(tr)

    limit = DEFAULT_ENTAILMENT_BUDGET if budget is None else budget
    matcher = Matcher(SearchBudget(limit))
    for subst in matcher.solve(patterns, graph, {}):
        return subst
    return None


def find_match(
    have: Formula,
    want: Formula,
    budget: Optional[int] = None,
) -> Optional[Subst]:
    """Like search(), but a search that runs out of budget answers None."""
    try:
        return search(have, want, budget)
    except BudgetExhausted as e:
        logger.warning(
            "Giving up on entailment of %d statements by %d statements: %s",
            len(want),
            len(have),
            e,
        )
    return None


def entails(have: Formula, want: Formula, budget: Optional[int] = None) -> bool:
    """Does `have` justify `want`? See the module comment for the rules."""
    return find_match(have, want, budget) is not None
