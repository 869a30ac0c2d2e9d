"""Error taxonomy for the assessment and plan engine."""

from __future__ import annotations

from typing import Any, Dict, List


class PrakritiError(Exception):
    """Base class. ``context`` holds the offending identifiers and values."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: Dict[str, Any] = context


class ValidationError(PrakritiError, ValueError):
    """Malformed or incomplete response set. Recoverable: ask for re-submission."""

    def __init__(self, message: str, *, errors: List[Dict[str, Any]] | None = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.errors: List[Dict[str, Any]] = list(errors or [])


class DegenerateInputError(PrakritiError):
    """Grand total of weights is zero. Only raised by strict aggregation."""


class UnknownCategoryError(PrakritiError, LookupError):
    """Category outside the declared enumeration. Config-integrity failure, never retried."""


class InvalidDurationError(PrakritiError, ValueError):
    """Requested plan duration outside 1..52 weeks."""


__all__ = [
    "PrakritiError",
    "ValidationError",
    "DegenerateInputError",
    "UnknownCategoryError",
    "InvalidDurationError",
]
