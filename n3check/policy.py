"""
Premise policies.

A policy is the trust boundary of a check: it decides which bare premises may
be taken for granted and which source documents may be believed at all.
Policies are immutable values. They compare and hash by content, which lets
the checker keep separate memo entries for the same step checked under
different assumptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, Optional

from .entail import entails
from .terms import Formula, Term


class Policy(ABC):
    """What a proof may assume without further justification."""

    @abstractmethod
    def assumes(self, formula: Formula) -> bool:
        """May `formula` be accepted as a premise?"""

    @abstractmethod
    def document_ok(self, source: Term) -> bool:
        """May statements read from document `source` be trusted?"""


@dataclass(frozen=True)
class AllPremises(Policy):
    """
    Accept any premise.

    Documents are only trusted when listed in `trusted_documents`; a
    single-document proof never asks.
    """

    trusted_documents: FrozenSet[Term] = frozenset()

    def assumes(self, formula: Formula) -> bool:
        return True

    def document_ok(self, source: Term) -> bool:
        return source in self.trusted_documents


@dataclass(frozen=True)
class Assumption(Policy):
    """
    Accept only what follows from one given premise formula.

    Used while checking a `log:supports` conclusion: the nested derivation may
    assume its source formula and nothing else.
    """

    premise: Formula
    budget: Optional[int] = None

    def assumes(self, formula: Formula) -> bool:
        return entails(self.premise, formula, self.budget)

    def document_ok(self, source: Term) -> bool:
        return False
