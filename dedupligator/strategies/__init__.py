"""
Match strategies for the duplicate finder.

Public API:
- MatchStrategy: Protocol implemented by every strategy
- StrategyKind: Selectable policies (exact, perceptual, neural)
- ExactMatchStrategy: Byte-identical files by SHA-256
- SimilarImageStrategy: Perceptual hash within a Hamming distance
- NeuralSimilarityStrategy: Embedding cosine similarity
- StrategyFactory: Builds and reuses strategy instances
"""

from __future__ import annotations

from .base import MatchStrategy, StrategyKind
from .exact import ExactMatchStrategy
from .similar import SimilarImageStrategy
from .neural import NeuralSimilarityStrategy
from .factory import StrategyFactory

__all__ = [
    'MatchStrategy',
    'StrategyKind',
    'ExactMatchStrategy',
    'SimilarImageStrategy',
    'NeuralSimilarityStrategy',
    'StrategyFactory',
]
