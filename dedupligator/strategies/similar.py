"""
Similar-image strategy: near-duplicates by perceptual hash.
"""

from __future__ import annotations

from typing import Optional

from ..cache import LRUCache, make_cache_key
from ..config import DEFAULT_THRESHOLD, PHASH_BITS
from ..exceptions import InvalidInputError
from ..models import CandidateFile
from ..scanner.grouping import create_group_key_for_file
from ..scanner.hashing import calculate_phash_file, hamming_distance
from .base import StrategyKind


class SimilarImageStrategy:
    """
    Buckets files with the rough grouper and matches them when their 64-bit
    perceptual hashes differ in at most ``threshold`` bits.

    Args:
        threshold: Maximum Hamming distance (0-64, lower = stricter)
        cache: Optional cache for perceptual hashes
    """

    match_type = StrategyKind.PERCEPTUAL.value
    requires_pre_grouping = True

    def __init__(self, threshold: int = DEFAULT_THRESHOLD, cache: Optional[LRUCache] = None):
        if not 0 <= threshold <= PHASH_BITS:
            raise InvalidInputError(f"Threshold must be between 0 and {PHASH_BITS}")
        self.threshold = threshold
        self.cache = cache if cache is not None else LRUCache()

    def grouping_key(self, file: CandidateFile) -> str:
        return create_group_key_for_file(file.path)

    def perceptual_hash(self, file: CandidateFile) -> int:
        """Cached perceptual hash. Raises if the image cannot be decoded."""
        return self.cache.get_or_compute(
            make_cache_key(file), lambda _key: calculate_phash_file(file.path)
        )

    def distance(self, file1: CandidateFile, file2: CandidateFile) -> int:
        return hamming_distance(self.perceptual_hash(file1), self.perceptual_hash(file2))

    def are_duplicates(self, file1: CandidateFile, file2: CandidateFile) -> bool:
        return self.distance(file1, file2) <= self.threshold

    def clear_cache(self) -> None:
        self.cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self.cache)

    def __repr__(self):
        return f"SimilarImageStrategy(threshold={self.threshold})"


__all__ = ['SimilarImageStrategy']
