"""
Neural-similarity strategy: near-duplicates by embedding cosine similarity.
"""

from __future__ import annotations

from typing import Optional

from ..cache import LRUCache, make_cache_key
from ..config import DEFAULT_NEURAL_THRESHOLD
from ..exceptions import InvalidInputError
from ..models import CandidateFile
from ..scanner.embedding import EmbeddingExtractor, cosine_similarity
from ..scanner.grouping import create_group_key_for_file
from .base import StrategyKind


class NeuralSimilarityStrategy:
    """
    Buckets files with the rough grouper and matches them when the cosine
    similarity of their embeddings is at least ``threshold``.

    The strategy owns its extractor (and therefore the loaded model): it is
    created once in the constructor and released by ``close()``.

    Args:
        threshold: Minimum cosine similarity in [0, 1]
        extractor: Pre-built extractor; any object with ``extract_file(path)``
            and ``close()`` works. Built from ``model_path`` when omitted.
        model_path: Weights file for a new extractor
        cache: Optional cache for embeddings

    Raises:
        ModelInitializationError: If the model cannot be loaded
    """

    match_type = StrategyKind.NEURAL.value
    requires_pre_grouping = True

    def __init__(
        self,
        threshold: float = DEFAULT_NEURAL_THRESHOLD,
        extractor: Optional[EmbeddingExtractor] = None,
        model_path: Optional[str] = None,
        cache: Optional[LRUCache] = None,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise InvalidInputError("Similarity threshold must be between 0.0 and 1.0")
        self.threshold = threshold
        self.extractor = extractor if extractor is not None else EmbeddingExtractor(model_path)
        self.cache = cache if cache is not None else LRUCache()
        self._closed = False

    def grouping_key(self, file: CandidateFile) -> str:
        return create_group_key_for_file(file.path)

    def embedding(self, file: CandidateFile):
        """Cached embedding vector of a file."""
        if self._closed:
            raise RuntimeError("NeuralSimilarityStrategy has been closed")
        return self.cache.get_or_compute(
            make_cache_key(file), lambda _key: self.extractor.extract_file(file.path)
        )

    def similarity(self, file1: CandidateFile, file2: CandidateFile) -> float:
        return cosine_similarity(self.embedding(file1), self.embedding(file2))

    def are_duplicates(self, file1: CandidateFile, file2: CandidateFile) -> bool:
        return self.similarity(file1, file2) >= self.threshold

    def clear_cache(self) -> None:
        self.cache.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the model and cached embeddings."""
        if self._closed:
            return
        self._closed = True
        self.cache.clear()
        self.extractor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return f"NeuralSimilarityStrategy(threshold={self.threshold})"


__all__ = ['NeuralSimilarityStrategy']
