"""
Dedupligator
============
Finds duplicate and near-duplicate images below a directory tree.

Features:
- Three interchangeable match strategies: exact (SHA-256), perceptual
  (64-bit DCT hash within a Hamming distance) and neural (MobileNetV2
  embedding cosine similarity)
- Cheap rough pre-grouping so only plausible pairs are compared
- Bounded worker pools for scanning, grouping and comparison
- Monotonic progress reporting and cooperative cancellation
- Bounded LRU caches for per-file hashes and embeddings
- CLI with TXT/CSV/JSON export
"""

__version__ = "1.0.0"

from .models import CandidateFile, DuplicateGroup, format_size
from .config import (
    IMAGE_EXTENSIONS,
    DEFAULT_THRESHOLD,
    DEFAULT_NEURAL_THRESHOLD,
    DEFAULT_CACHE_CAPACITY,
)
from .exceptions import (
    DedupligatorError,
    InvalidInputError,
    ScanCancelledError,
    ComparisonError,
    ModelInitializationError,
)
from .cache import LRUCache, CacheStats, make_cache_key
from .cancellation import CancellationToken
from .progress import ProgressReporter
from .strategies import (
    MatchStrategy,
    StrategyKind,
    ExactMatchStrategy,
    SimilarImageStrategy,
    NeuralSimilarityStrategy,
    StrategyFactory,
)
from .finder import DuplicateFinder, FinderStats, find_duplicates

__all__ = [
    "CandidateFile",
    "DuplicateGroup",
    "format_size",
    "IMAGE_EXTENSIONS",
    "DEFAULT_THRESHOLD",
    "DEFAULT_NEURAL_THRESHOLD",
    "DEFAULT_CACHE_CAPACITY",
    "DedupligatorError",
    "InvalidInputError",
    "ScanCancelledError",
    "ComparisonError",
    "ModelInitializationError",
    "LRUCache",
    "CacheStats",
    "make_cache_key",
    "CancellationToken",
    "ProgressReporter",
    "MatchStrategy",
    "StrategyKind",
    "ExactMatchStrategy",
    "SimilarImageStrategy",
    "NeuralSimilarityStrategy",
    "StrategyFactory",
    "DuplicateFinder",
    "FinderStats",
    "find_duplicates",
]
