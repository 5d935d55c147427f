"""
n3check exception hierarchy.

All exceptions inherit from N3CheckError for easy catching. A failed check is
always one of three kinds of InvalidProof:

- InvalidProof itself: the document is not shaped like a proof.
- PolicyViolation: a step is coherent but the policy does not allow it.
- LogicalFallacy: a step's justification does not hold.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class N3CheckError(Exception):
    """Base exception for all n3check errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class N3SyntaxError(N3CheckError, ValueError):
    """Raised when a Notation3 document cannot be lexed or parsed"""
    pass


class InvalidProof(N3CheckError):
    """
    Raised when a proof document is malformed.

    `step` is the identifier of the innermost step that failed, when known.
    """

    kind = "invalid proof"

    def __init__(
        self,
        message: str,
        step: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.step = step

    def __str__(self) -> str:
        text = super().__str__()
        if self.step is not None:
            return f"{text} [step {self.step}]"
        return text


class PolicyViolation(InvalidProof):
    """Raised when the policy refuses a premise or an unbacked fact"""

    kind = "policy violation"


class LogicalFallacy(InvalidProof):
    """Raised when a step's claimed justification does not hold"""

    kind = "logical fallacy"
