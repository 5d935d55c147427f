# =====================================================================================
# Substitution
# =====================================================================================
#
# A binding maps a placeholder term (a Var or a Blank) to the term it stands for.
# Inference steps carry an explicit binding list that is applied to both halves
# of the rule; the entailment search (entail.py) builds the same kind of map
# while it matches patterns.

from __future__ import annotations

from typing import Dict, Mapping

from .terms import Formula, ListTerm, Term, Triple

# Substitution mapping placeholder term -> bound term.
Subst = Dict[Term, Term]


def apply_subst_term(t: Term, s: Mapping[Term, Term]) -> Term:
    """
    Apply substitution to a term.

    Replacement is one step, term for term: a bound value is inserted as is
    and is not itself rewritten again. Lists and quoted formulas are
    rebuilt with their members substituted.
    """
    bound = s.get(t)
    if bound is not None:
        return bound

    if isinstance(t, ListTerm):
        return ListTerm(tuple(apply_subst_term(e, s) for e in t.elems))

    if isinstance(t, Formula):
        return apply_subst_formula(t, s)

    # Iri, Literal, unbound Var / Blank
    return t


def apply_subst_triple(tr: Triple, s: Mapping[Term, Term]) -> Triple:
    # Each position is looked up independently.
    return Triple(
        apply_subst_term(tr.s, s),
        apply_subst_term(tr.p, s),
        apply_subst_term(tr.o, s),
    )


def apply_subst_formula(f: Formula, s: Mapping[Term, Term]) -> Formula:
    if not s:
        return f
    return Formula.of(apply_subst_triple(tr, s) for tr in f.triples)

