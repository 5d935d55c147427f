"""
n3check: a checker for Notation3 proofs.

A proof document (as produced by N3 reasoners, or by a language model asked to
write one) says that a conclusion follows from premises through a chain of
`reason:` steps. The Checker re-derives every step and either returns the
formula the proof establishes or raises InvalidProof.

    from n3check import AllPremises, Checker, parse_n3

    checker = Checker(parse_n3(text))
    formula = checker.check(AllPremises())
"""

__version__ = "0.1.0"

from n3check.builtins import BuiltinError, BuiltinRegistry, standard_builtins
from n3check.checker import Checker
from n3check.entail import (
    DEFAULT_ENTAILMENT_BUDGET,
    BudgetExhausted,
    entails,
    find_match,
    search,
)
from n3check.errors import (
    InvalidProof,
    LogicalFallacy,
    N3CheckError,
    N3SyntaxError,
    PolicyViolation,
)
from n3check.graph import Graph
from n3check.parser import load_proof, parse_n3
from n3check.policy import AllPremises, Assumption, Policy
from n3check.terms import Blank, Formula, Iri, ListTerm, Literal, Term, Triple, Var
from n3check.writer import formula_to_n3

__all__ = [
    # Checking
    "Checker",
    "Policy",
    "AllPremises",
    "Assumption",
    "BuiltinRegistry",
    "BuiltinError",
    "standard_builtins",
    "entails",
    "find_match",
    "search",
    "BudgetExhausted",
    "DEFAULT_ENTAILMENT_BUDGET",
    # Model
    "Term",
    "Iri",
    "Literal",
    "Var",
    "Blank",
    "ListTerm",
    "Formula",
    "Triple",
    "Graph",
    # Loading and printing
    "parse_n3",
    "load_proof",
    "formula_to_n3",
    # Errors
    "N3CheckError",
    "N3SyntaxError",
    "InvalidProof",
    "PolicyViolation",
    "LogicalFallacy",
]
