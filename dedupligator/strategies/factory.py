"""
Factory that builds and caches match strategies.

Exact and perceptual strategies are created lazily and reused. Neural
strategies hold a loaded model, so one instance is kept per similarity
threshold and released when the factory is closed.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Union

from ..config import DEFAULT_CACHE_CAPACITY, DEFAULT_NEURAL_THRESHOLD, DEFAULT_THRESHOLD
from ..cache import LRUCache
from .base import MatchStrategy, StrategyKind
from .exact import ExactMatchStrategy
from .neural import NeuralSimilarityStrategy
from .similar import SimilarImageStrategy

logger = logging.getLogger(__name__)


class StrategyFactory:
    """
    Builds strategies by kind and keeps them for reuse.

    Args:
        cache_capacity: Capacity of each strategy's cache
        model_path: Weights file for neural strategies (None = torchvision default)
        extractor_factory: Optional callable returning an embedding extractor;
            used instead of loading the default model
    """

    def __init__(
        self,
        cache_capacity: int = DEFAULT_CACHE_CAPACITY,
        model_path: Optional[str] = None,
        extractor_factory=None,
    ):
        self.cache_capacity = cache_capacity
        self.model_path = model_path
        self.extractor_factory = extractor_factory
        self._lock = threading.Lock()
        self._exact: Optional[ExactMatchStrategy] = None
        self._similar: dict[int, SimilarImageStrategy] = {}
        self._neural: dict[float, NeuralSimilarityStrategy] = {}

    def create_exact_match_strategy(self) -> ExactMatchStrategy:
        with self._lock:
            if self._exact is None:
                self._exact = ExactMatchStrategy(LRUCache(self.cache_capacity))
            return self._exact

    def create_similar_image_strategy(self, threshold: int = DEFAULT_THRESHOLD) -> SimilarImageStrategy:
        with self._lock:
            strategy = self._similar.get(threshold)
            if strategy is None:
                strategy = SimilarImageStrategy(threshold, LRUCache(self.cache_capacity))
                self._similar[threshold] = strategy
            return strategy

    def create_neural_similarity_strategy(
        self, threshold: float = DEFAULT_NEURAL_THRESHOLD
    ) -> NeuralSimilarityStrategy:
        # Held under the lock so two callers never load the model twice
        with self._lock:
            strategy = self._neural.get(threshold)
            if strategy is None:
                extractor = self.extractor_factory() if self.extractor_factory else None
                strategy = NeuralSimilarityStrategy(
                    threshold,
                    extractor=extractor,
                    model_path=self.model_path,
                    cache=LRUCache(self.cache_capacity),
                )
                self._neural[threshold] = strategy
                logger.info(f"Created neural strategy (threshold={threshold})")
            return strategy

    def create(
        self,
        kind: Union[str, StrategyKind],
        threshold: Optional[Union[int, float]] = None,
    ) -> MatchStrategy:
        """
        Return the strategy for ``kind``.

        ``threshold`` is the Hamming distance for perceptual matching and the
        cosine similarity for neural matching; it is ignored for exact matching.
        """
        kind = StrategyKind.parse(kind)
        if kind is StrategyKind.EXACT:
            return self.create_exact_match_strategy()
        if kind is StrategyKind.PERCEPTUAL:
            return self.create_similar_image_strategy(
                DEFAULT_THRESHOLD if threshold is None else int(threshold)
            )
        return self.create_neural_similarity_strategy(
            DEFAULT_NEURAL_THRESHOLD if threshold is None else float(threshold)
        )

    def _all_strategies(self) -> list:
        with self._lock:
            strategies = list(self._similar.values()) + list(self._neural.values())
            if self._exact is not None:
                strategies.append(self._exact)
            return strategies

    def clear_caches(self) -> None:
        """Clear the per-file caches of every strategy built so far."""
        for strategy in self._all_strategies():
            strategy.clear_cache()

    def close(self) -> None:
        """Release neural models and forget all strategies."""
        with self._lock:
            neural = list(self._neural.values())
            self._neural.clear()
            self._similar.clear()
            self._exact = None
        for strategy in neural:
            strategy.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


__all__ = ['StrategyFactory']
