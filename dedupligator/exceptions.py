"""
Exception hierarchy for Dedupligator.

Only InvalidInputError and ModelInitializationError abort a run. A
ScanCancelledError marks a cancelled run. ComparisonError is created for a
single failing pair and never escapes the finder.
"""

from __future__ import annotations


class DedupligatorError(Exception):
    """Base class for all Dedupligator errors."""


class InvalidInputError(DedupligatorError, ValueError):
    """Raised when the root path or a scan parameter is unusable."""


class ScanCancelledError(DedupligatorError):
    """Raised when a cancellation token is observed during a run."""

    def __init__(self, message: str = "Scan was cancelled"):
        super().__init__(message)


class ComparisonError(DedupligatorError):
    """A pairwise comparison failed (I/O or decode error)."""

    def __init__(self, first: str, second: str, cause: BaseException):
        self.first = first
        self.second = second
        self.cause = cause
        super().__init__(f"Failed to compare {first} and {second}: {cause}")


class ModelInitializationError(DedupligatorError):
    """Raised when the embedding model cannot be loaded."""


__all__ = [
    'DedupligatorError',
    'InvalidInputError',
    'ScanCancelledError',
    'ComparisonError',
    'ModelInitializationError',
]
