"""
Exact-match strategy: byte-identical files.
"""

from __future__ import annotations

from typing import Optional

from ..cache import LRUCache, make_cache_key
from ..models import CandidateFile
from ..scanner.hashing import calculate_file_hash
from .base import StrategyKind


class ExactMatchStrategy:
    """
    Groups files by byte length and compares SHA-256 content hashes.

    Equal length is guaranteed by the grouping step and is not re-checked
    here. Digests are cached under (path, size, mtime), so a modified file is
    re-hashed.

    Args:
        cache: Optional cache instance; a private one is created when omitted
    """

    match_type = StrategyKind.EXACT.value
    requires_pre_grouping = True

    def __init__(self, cache: Optional[LRUCache] = None):
        self.cache = cache if cache is not None else LRUCache()

    def grouping_key(self, file: CandidateFile) -> int:
        return file.size

    def file_hash(self, file: CandidateFile) -> str:
        """Cached SHA-256 of a file. Raises OSError if unreadable."""
        return self.cache.get_or_compute(
            make_cache_key(file), lambda _key: calculate_file_hash(file.path)
        )

    def are_duplicates(self, file1: CandidateFile, file2: CandidateFile) -> bool:
        return self.file_hash(file1) == self.file_hash(file2)

    def clear_cache(self) -> None:
        self.cache.clear()

    def __repr__(self):
        return f"ExactMatchStrategy(cached={len(self.cache)})"


__all__ = ['ExactMatchStrategy']
