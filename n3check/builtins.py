# =====================================================================================
# BUILTINS
# =====================================================================================
#
# A Fact step claims a single statement whose truth is decided by a procedure
# rather than by further proof steps. The procedures live in a registry keyed by
# predicate IRI; the embedding application decides which ones it trusts.
#
# An evaluator receives the statement's subject and object and answers True when
# the statement holds. Arguments it cannot make sense of (a string where a number
# is needed, a list of the wrong length, ...) raise BuiltinError with a detail.
#
# `standard_builtins()` offers the usual N3 math/string/list/log relations in
# ground-checking form: a proof only ever presents finished facts, so
# there is nothing left to bind and every evaluator is a yes/no test.

from __future__ import annotations

import math
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from .entail import BudgetExhausted, search
from .terms import (
    Formula,
    Iri,
    ListTerm,
    Literal,
    LIST_NS,
    LOG_NS,
    MATH_NS,
    STRING_NS,
    Term,
)

Evaluator = Callable[[Term, Term], bool]
Number = Union[int, float]


class BuiltinError(Exception):
    """An evaluator could not decide its statement."""


def _as_key(predicate: Union[Term, str]) -> Term:
    return Iri(predicate) if isinstance(predicate, str) else predicate


class BuiltinRegistry:
    """Mapping from predicate to evaluator."""

    def __init__(self) -> None:
        self._table: Dict[Term, Evaluator] = {}

    def register(
        self,
        predicate: Union[Term, str],
        evaluator: Optional[Evaluator] = None,
    ):
        """
        Register `evaluator` for `predicate`, replacing any previous one.

        Without an evaluator this returns a decorator:

            @registry.register("http://example.org/ns#isEven")
            def is_even(s, o): ...
        """
        key = _as_key(predicate)
        if evaluator is None:
            def decorator(fn: Evaluator) -> Evaluator:
                self._table[key] = fn
                return fn
            return decorator
        self._table[key] = evaluator
        return evaluator

    def get(self, predicate: Union[Term, str]) -> Optional[Evaluator]:
        return self._table.get(_as_key(predicate))

    def __contains__(self, predicate: object) -> bool:
        if isinstance(predicate, (Term, str)):
            return _as_key(predicate) in self._table
        return False

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[Term]:
        return iter(self._table)

    def copy(self) -> "BuiltinRegistry":
        out = BuiltinRegistry()
        out._table.update(self._table)
        return out


# ----- literal helpers ----------------------------------------------------------------

def literal_parts(lit: str) -> Tuple[str, Optional[str]]:
    """
    Split a literal like `"foo"^^<xsd:string>` into (lex, datatypeIRI).
    """
    if "^^" in lit:
        idx = lit.index("^^")
        lex = lit[:idx]
        dt = lit[idx + 2 :].strip()
        if dt.startswith("<") and dt.endswith(">"):
            dt = dt[1:-1]
        return lex, dt
    return lit, None


def strip_quotes(lex: str) -> str:
    # "chat"@fr -> chat
    end = lex.rfind('"')
    if lex.startswith('"') and end > 0:
        return lex[1:end]
    return lex


def literal_text(t: Term) -> Optional[str]:
    if not isinstance(t, Literal):
        return None
    lex, _dt = literal_parts(t.value)
    return strip_quotes(lex)


def parse_int_literal(t: Term) -> Optional[int]:
    """
    Parse a literal as an arbitrary-precision integer if it looks like
    a plain decimal integer (optionally with a leading '-').
    """
    lex = literal_text(t)
    if not lex:
        return None
    digits = lex[1:] if lex.startswith("-") else lex
    if digits and all(c.isdigit() for c in digits):
        return int(lex, 10)
    return None


def parse_number_literal(t: Term) -> Optional[Number]:
    """
    Integers stay exact; anything else numeric-looking becomes a float.
    """
    i = parse_int_literal(t)
    if i is not None:
        return i
    lex = literal_text(t)
    if lex is None or lex in ("true", "false"):
        return None
    try:
        return float(lex)
    except ValueError:
        return None


def _number(t: Term) -> Number:
    n = parse_number_literal(t)
    if n is None:
        raise BuiltinError(f"not a number: {t}")
    return n


def _numbers(t: Term, arity: Optional[int] = None) -> List[Number]:
    if not isinstance(t, ListTerm):
        raise BuiltinError(f"expected a list of numbers, got {t}")
    if arity is not None and len(t.elems) != arity:
        raise BuiltinError(f"expected {arity} arguments, got {len(t.elems)}")
    if arity is None and len(t.elems) < 2:
        raise BuiltinError("expected at least 2 arguments")
    return [_number(e) for e in t.elems]


def _same_number(result: Number, claimed: Term) -> bool:
    c = _number(claimed)
    if isinstance(result, int) and isinstance(c, int):
        return result == c
    return math.isclose(float(result), float(c), rel_tol=1e-12, abs_tol=0.0)


def _text(t: Term) -> str:
    s = literal_text(t)
    if s is None:
        raise BuiltinError(f"not a string literal: {t}")
    return s


def _pair(s: Term, o: Term) -> Tuple[Number, Number]:
    # Binary form `A rel B`, or list form `(A B) rel true`.
    if isinstance(s, ListTerm):
        a, b = _numbers(s, 2)
        return a, b
    return _number(s), _number(o)


# =====================================================================================
# Standard library
# =====================================================================================

_STANDARD: Dict[str, Evaluator] = {}


def _standard(predicate: str) -> Callable[[Evaluator], Evaluator]:
    def decorator(fn: Evaluator) -> Evaluator:
        _STANDARD[predicate] = fn
        return fn
    return decorator


# -------------------------------------------------------------------------
# math: comparisons (binary OR list form)
# -------------------------------------------------------------------------

@_standard(MATH_NS + "greaterThan")
def math_greater_than(s: Term, o: Term) -> bool:
    a, b = _pair(s, o)
    return a > b


@_standard(MATH_NS + "lessThan")
def math_less_than(s: Term, o: Term) -> bool:
    a, b = _pair(s, o)
    return a < b


@_standard(MATH_NS + "notLessThan")
def math_not_less_than(s: Term, o: Term) -> bool:
    a, b = _pair(s, o)
    return a >= b


@_standard(MATH_NS + "notGreaterThan")
def math_not_greater_than(s: Term, o: Term) -> bool:
    a, b = _pair(s, o)
    return a <= b


@_standard(MATH_NS + "equalTo")
def math_equal_to(s: Term, o: Term) -> bool:
    a, b = _pair(s, o)
    return a == b


@_standard(MATH_NS + "notEqualTo")
def math_not_equal_to(s: Term, o: Term) -> bool:
    a, b = _pair(s, o)
    return a != b


# -------------------------------------------------------------------------
# math: arithmetic, `(a b ...) math:op result`
# -------------------------------------------------------------------------

@_standard(MATH_NS + "sum")
def math_sum(s: Term, o: Term) -> bool:
    return _same_number(sum(_numbers(s)), o)


@_standard(MATH_NS + "product")
def math_product(s: Term, o: Term) -> bool:
    total: Number = 1
    for v in _numbers(s):
        total *= v
    return _same_number(total, o)


@_standard(MATH_NS + "difference")
def math_difference(s: Term, o: Term) -> bool:
    a, b = _numbers(s, 2)
    return _same_number(a - b, o)


@_standard(MATH_NS + "quotient")
def math_quotient(s: Term, o: Term) -> bool:
    a, b = _numbers(s, 2)
    if b == 0:
        raise BuiltinError("division by zero")
    return _same_number(a / b, o)


@_standard(MATH_NS + "negation")
def math_negation(s: Term, o: Term) -> bool:
    return _same_number(-_number(s), o)


@_standard(MATH_NS + "absoluteValue")
def math_absolute_value(s: Term, o: Term) -> bool:
    return _same_number(abs(_number(s)), o)


# -------------------------------------------------------------------------
# string:
# -------------------------------------------------------------------------

@_standard(STRING_NS + "concatenation")
def string_concatenation(s: Term, o: Term) -> bool:
    if not isinstance(s, ListTerm):
        raise BuiltinError(f"expected a list of strings, got {s}")
    return "".join(_text(e) for e in s.elems) == _text(o)


@_standard(STRING_NS + "contains")
def string_contains(s: Term, o: Term) -> bool:
    return _text(o) in _text(s)


@_standard(STRING_NS + "startsWith")
def string_starts_with(s: Term, o: Term) -> bool:
    return _text(s).startswith(_text(o))


@_standard(STRING_NS + "endsWith")
def string_ends_with(s: Term, o: Term) -> bool:
    return _text(s).endswith(_text(o))


# -------------------------------------------------------------------------
# list:
# -------------------------------------------------------------------------

@_standard(LIST_NS + "member")
def list_member(s: Term, o: Term) -> bool:
    if not isinstance(s, ListTerm):
        raise BuiltinError(f"expected a list, got {s}")
    return o in s.elems


@_standard(LIST_NS + "in")
def list_in(s: Term, o: Term) -> bool:
    return list_member(o, s)


@_standard(LIST_NS + "length")
def list_length(s: Term, o: Term) -> bool:
    if not isinstance(s, ListTerm):
        raise BuiltinError(f"expected a list, got {s}")
    return _same_number(len(s.elems), o)


# -------------------------------------------------------------------------
# log:
# -------------------------------------------------------------------------

@_standard(LOG_NS + "equalTo")
def log_equal_to(s: Term, o: Term) -> bool:
    return s == o


@_standard(LOG_NS + "notEqualTo")
def log_not_equal_to(s: Term, o: Term) -> bool:
    return s != o


def not_includes(budget: Optional[int] = None) -> Evaluator:
    """
    log:notIncludes, scoped negation: the quoted formula `s` does not contain
    pattern `o`.

    A search that runs out of `budget` has not shown anything, so it raises
    BuiltinError rather than answering True.
    """
    def log_not_includes(s: Term, o: Term) -> bool:
        if not isinstance(s, Formula) or not isinstance(o, Formula):
            raise BuiltinError("log:notIncludes relates two quoted formulas")
        try:
            return search(s, o, budget) is None
        except BudgetExhausted as e:
            raise BuiltinError(f"could not decide inclusion: {e}") from e
    return log_not_includes


def standard_builtins(budget: Optional[int] = None) -> BuiltinRegistry:
    """
    A fresh registry holding every standard built-in.

    `budget` bounds the entailment search of log:notIncludes; pass the
    Checker's budget so both give up at the same point.
    """
    registry = BuiltinRegistry()
    for predicate, fn in _STANDARD.items():
        registry.register(predicate, fn)
    registry.register(LOG_NS + "notIncludes", not_includes(budget))
    return registry
