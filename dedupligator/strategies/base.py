"""
Match strategy interface.

A match strategy decides which files are duplicates. It provides a cheap
grouping key used to pre-partition candidates and a pairwise predicate run
inside each partition.
"""

from __future__ import annotations

from enum import Enum
from typing import Hashable, Protocol, runtime_checkable

from ..exceptions import InvalidInputError
from ..models import CandidateFile


class StrategyKind(str, Enum):
    """
    Duplicate-detection policies a caller can select.

    Attributes:
        EXACT: Byte-identical files (SHA-256 content hash)
        PERCEPTUAL: Near-duplicates by perceptual hash Hamming distance
        NEURAL: Near-duplicates by embedding cosine similarity
    """
    EXACT = 'exact'
    PERCEPTUAL = 'perceptual'
    NEURAL = 'neural'

    @classmethod
    def parse(cls, value: 'str | StrategyKind') -> 'StrategyKind':
        """Convert a user-supplied name to a StrategyKind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ', '.join(kind.value for kind in cls)
            raise InvalidInputError(
                f"Unknown strategy '{value}'. Choose one of: {choices}"
            ) from None


@runtime_checkable
class MatchStrategy(Protocol):
    """Capability set every strategy implements."""

    #: Short name recorded on the duplicate groups this strategy produces
    match_type: str

    @property
    def requires_pre_grouping(self) -> bool:
        """False means every file lands in one group (quadratic comparison)."""
        ...

    def grouping_key(self, file: CandidateFile) -> Hashable:
        """Cheap key; files can only match when their keys are equal."""
        ...

    def are_duplicates(self, file1: CandidateFile, file2: CandidateFile) -> bool:
        """Pairwise predicate. May raise on unreadable files."""
        ...

    def clear_cache(self) -> None:
        """Drop cached per-file data to bound memory across runs."""
        ...


__all__ = ['StrategyKind', 'MatchStrategy']
