"""
Tests for formula entailment.

These tests verify:
1. The algebraic properties: reflexivity, empty formulas, monotonicity
2. Placeholders bind consistently across the whole formula
3. Statement order never changes the answer
4. Lists and quoted formulas match structurally
5. Adversarial searches stop at the budget and answer "not entailed"
"""

import itertools
import logging

import pytest

from n3check.entail import BudgetExhausted, entails, find_match, search
from n3check.terms import EMPTY, RDF_TYPE, Blank, Formula, ListTerm, Literal, Var

from helpers import HUMAN, MORTAL, MORTALITY_RULE, PLATO, SOCRATES, ex, f, t


P, Q, R = ex("p"), ex("q"), ex("r")
A, B, C, D = ex("a"), ex("b"), ex("c"), ex("d")

SAMPLES = [
    EMPTY,
    f(t(A, P, B)),
    f(t(A, P, B), t(C, Q, D)),
    f(t(Blank("_:x"), P, B), t(Blank("_:x"), Q, Var("v"))),
    MORTALITY_RULE,
]


def clique(nodes, edge):
    return Formula.of(t(a, edge, b) for a, b in itertools.permutations(nodes, 2))


# =============================================================================
# PROPERTIES
# =============================================================================

class TestProperties:
    """Reflexivity, empty formulas and monotonicity."""

    @pytest.mark.parametrize("g", SAMPLES)
    def test_reflexive(self, g):
        assert entails(g, g)

    def test_reflexive_on_large_formula(self):
        g = Formula.of(t(Blank(f"_:b{i}"), P, ex(f"o{i}")) for i in range(500))
        assert entails(g, g)
        # One unit per statement: picking the next pattern is not charged.
        assert entails(g, g, budget=len(g))

    @pytest.mark.parametrize("g", SAMPLES)
    def test_anything_entails_empty(self, g):
        assert entails(g, EMPTY)

    @pytest.mark.parametrize("g", SAMPLES)
    def test_empty_entails_only_empty(self, g):
        assert entails(EMPTY, g) == (len(g) == 0)

    def test_monotone_in_first_argument(self):
        have = f(t(A, P, B))
        want = f(t(Var("s"), P, B))
        assert entails(have, want)
        bigger = have.union(f(t(C, P, D), t(A, Q, C)))
        assert entails(bigger, want)

    def test_missing_ground_statement(self):
        assert not entails(f(t(A, P, B)), f(t(A, P, B), t(C, Q, D)))


# =============================================================================
# PLACEHOLDERS
# =============================================================================

class TestPlaceholders:
    """Variables and blank nodes in the wanted formula."""

    def test_variable_binds_to_any_term(self):
        assert entails(f(t(SOCRATES, RDF_TYPE, HUMAN)), f(t(Var("who"), RDF_TYPE, HUMAN)))

    def test_blank_node_is_existential(self):
        assert entails(f(t(SOCRATES, RDF_TYPE, HUMAN)), f(t(Blank("_:x"), RDF_TYPE, HUMAN)))

    def test_binding_is_global_across_statements(self):
        have = f(t(SOCRATES, RDF_TYPE, HUMAN), t(PLATO, RDF_TYPE, MORTAL))
        want = f(t(Var("x"), RDF_TYPE, HUMAN), t(Var("x"), RDF_TYPE, MORTAL))
        assert not entails(have, want)

        have = have.union(f(t(SOCRATES, RDF_TYPE, MORTAL)))
        assert entails(have, want)

    def test_search_backtracks(self):
        # Only ?y = :c leads on to a :q statement.
        have = f(t(A, P, B), t(A, P, C), t(C, Q, D))
        want = f(t(Var("x"), P, Var("y")), t(Var("y"), Q, Var("z")))
        subst = find_match(have, want)
        assert subst == {Var("x"): A, Var("y"): C, Var("z"): D}

    def test_two_placeholders_may_share_a_value(self):
        have = f(t(A, P, A))
        assert entails(have, f(t(Var("x"), P, Var("y"))))

    def test_placeholders_in_have_are_plain_terms(self):
        # Only the wanted side is searched; a variable in `have` is not a wildcard.
        have = f(t(Var("x"), P, B))
        assert not entails(have, f(t(A, P, B)))

    def test_order_independent(self):
        have_triples = [t(A, P, B), t(B, P, C), t(C, Q, D), t(A, R, D)]
        want_triples = [t(Var("x"), P, Var("y")), t(Var("y"), P, Var("z")), t(Var("z"), Q, D)]
        expected = entails(Formula.of(have_triples), Formula.of(want_triples))
        assert expected
        for perm in itertools.permutations(want_triples):
            assert entails(Formula.of(reversed(have_triples)), Formula.of(perm)) == expected


# =============================================================================
# STRUCTURED TERMS
# =============================================================================

class TestStructuredTerms:
    """Literals, lists and nested formulas."""

    def test_literal_datatype_must_match(self):
        typed = Literal('"1"^^<http://www.w3.org/2001/XMLSchema#integer>')
        plain = Literal('"1"')
        assert not entails(f(t(A, P, typed)), f(t(A, P, plain)))
        assert entails(f(t(A, P, typed)), f(t(A, P, typed)))

    def test_list_matches_elementwise(self):
        have = f(t(ListTerm((A, B)), P, C))
        assert entails(have, f(t(ListTerm((Var("h"), B)), P, C)))
        assert not entails(have, f(t(ListTerm((Var("h"),)), P, C)))

    def test_nested_formula_with_placeholders(self):
        have = f(t(SOCRATES, ex("says"), f(t(PLATO, RDF_TYPE, HUMAN))))
        want = f(t(Var("who"), ex("says"), f(t(Var("other"), RDF_TYPE, HUMAN))))
        assert entails(have, want)

    def test_nested_formula_must_match_whole(self):
        have = f(t(SOCRATES, ex("says"), f(t(PLATO, RDF_TYPE, HUMAN), t(PLATO, P, A))))
        want = f(t(SOCRATES, ex("says"), f(t(Var("other"), RDF_TYPE, HUMAN))))
        assert not entails(have, want)

    def test_nested_patterns_may_not_share_a_fact(self):
        # Both patterns fit :b :p :a, but then the quoted formulas differ.
        have = f(t(A, ex("says"), f(t(B, P, A), t(C, Q, D))))
        want = f(t(A, ex("says"), f(t(Var("x"), P, A), t(Var("y"), P, A))))
        assert not entails(have, want)

        have = f(t(A, ex("says"), f(t(B, P, A), t(C, P, A))))
        assert entails(have, want)

    def test_nested_bindings_shared_with_outer(self):
        have = f(
            t(SOCRATES, ex("says"), f(t(PLATO, RDF_TYPE, HUMAN))),
            t(SOCRATES, RDF_TYPE, HUMAN),
        )
        want = f(
            t(Var("a"), ex("says"), f(t(Var("a"), RDF_TYPE, HUMAN))),
        )
        assert not entails(have, want)

    def test_rule_entails_itself(self):
        assert entails(MORTALITY_RULE.union(f(t(A, P, B))), MORTALITY_RULE)


# =============================================================================
# BUDGET
# =============================================================================

class TestBudget:
    """Untrusted input must not cause unbounded search."""

    def test_exhausted_budget_fails_closed(self, caplog):
        # Seven mutually linked placeholders cannot fit into six nodes, and
        # proving that takes a lot of backtracking.
        nodes = [ex(f"n{i}") for i in range(6)]
        have = clique(nodes, P)
        want = clique([Var(f"v{i}") for i in range(7)], P)

        with caplog.at_level(logging.WARNING, logger="n3check.entail"):
            assert not entails(have, want, budget=200)
        assert "Giving up" in caplog.text

    def test_satisfiable_search_within_default_budget(self):
        nodes = [ex(f"n{i}") for i in range(6)]
        have = clique(nodes, P)
        want = clique([Var(f"v{i}") for i in range(4)], P)
        assert entails(have, want)

    def test_zero_budget_only_decides_ground_formulas(self):
        have = f(t(A, P, B), t(C, Q, D))
        assert entails(have, f(t(A, P, B)), budget=0)
        assert not entails(have, f(t(A, P, Var("x"))), budget=0)

    def test_search_tells_exhaustion_from_no_match(self):
        nodes = [ex(f"n{i}") for i in range(6)]
        have = clique(nodes, P)
        want = clique([Var(f"v{i}") for i in range(7)], P)

        with pytest.raises(BudgetExhausted):
            search(have, want, budget=200)
        assert search(f(t(A, P, B)), f(t(Var("x"), Q, B)), budget=0) is None
