"""Exceptions raised by the glucose statistics library."""
from __future__ import annotations


class EmptyInputError(ValueError):
    """Raised when a computation that needs readings receives none."""


class NoReadingsInRangeError(EmptyInputError):
    """Raised when a timestamp filter leaves no readings to work with."""


class InvalidGlucoseError(ValueError):
    """Raised when an average glucose is outside the convertible range."""


class InvalidA1CError(ValueError):
    """Raised when an A1C value is outside the convertible range."""


__all__ = [
    "EmptyInputError",
    "InvalidA1CError",
    "InvalidGlucoseError",
    "NoReadingsInRangeError",
]
