"""
Scanner package for Dedupligator.

Provides file discovery and the per-image computations the match strategies
rely on.

Public API:
- find_image_files: Discover and snapshot image files in a directory tree
- map_parallel: Bounded worker-pool map with cancellation
- calculate_file_hash: SHA-256 hash of file contents
- calculate_phash / calculate_phash_file: 64-bit perceptual hash
- hamming_distance / are_images_similar / hash_to_string: pHash helpers
- create_group_key / create_group_key_for_file: Rough grouping key
- EmbeddingExtractor / cosine_similarity: Neural embeddings
"""

from __future__ import annotations

from .file_discovery import find_image_files, is_image_file
from .parallel import map_parallel
from .hashing import (
    calculate_file_hash,
    calculate_phash,
    calculate_phash_file,
    hamming_distance,
    are_images_similar,
    hash_to_string,
)
from .grouping import create_group_key, create_group_key_for_file
from .embedding import EmbeddingExtractor, cosine_similarity


# Public API exports
__all__ = [
    # File discovery
    'find_image_files',
    'is_image_file',
    'map_parallel',
    # Hashing functions
    'calculate_file_hash',
    'calculate_phash',
    'calculate_phash_file',
    'hamming_distance',
    'are_images_similar',
    'hash_to_string',
    # Grouping
    'create_group_key',
    'create_group_key_for_file',
    # Embeddings
    'EmbeddingExtractor',
    'cosine_similarity',
]
