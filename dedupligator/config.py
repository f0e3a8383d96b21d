"""
Configuration constants for Dedupligator.

This module contains all configurable settings including:
- Recognised image extensions
- Matching thresholds for the perceptual and neural strategies
- Geometry of the perceptual hash, rough grouper and embedding input
- Progress phase weights and worker/cache sizing
"""

import os

# Image extensions considered during a scan (compared case-insensitively)
IMAGE_EXTENSIONS = {
    '.jpg', '.jpeg', '.png', '.bmp', '.gif', '.webp',
}

# Default similarity threshold for perceptual hashing
# Maximum Hamming distance (0-64) for two images to count as duplicates
DEFAULT_THRESHOLD = 10

# Default cosine similarity threshold (0.0-1.0) for the neural strategy
DEFAULT_NEURAL_THRESHOLD = 0.7

# Default number of parallel workers (one per CPU core)
DEFAULT_WORKERS = os.cpu_count() or 4

# Bounded cache capacity (entries) used for file hashes, pHashes and embeddings
DEFAULT_CACHE_CAPACITY = 10_000

# Progress is split across the three pipeline phases (must sum to 1.0)
SCAN_PHASE_WEIGHT = 0.1     # 0% -> 10%
GROUP_PHASE_WEIGHT = 0.3    # 10% -> 40%
COMPARE_PHASE_WEIGHT = 0.6  # 40% -> 100%

# Perceptual hash geometry
PHASH_IMAGE_SIZE = 32       # images are reduced to a 32x32 grayscale grid
PHASH_LOW_FREQ_SIZE = 8     # top-left 8x8 block of the DCT
PHASH_BITS = 64

# Rough grouper geometry
GROUPER_THUMBNAIL_SIZE = 16
GROUPER_BRIGHTNESS_BUCKETS = 8
GROUPER_COLOR_BUCKETS = 4
GROUPER_ASPECT_BUCKETS = 5
GROUPER_SATURATION_THRESHOLD = 30
GROUPER_CHANNEL_MARGIN = 20
# Upper bounds (exclusive) of the aspect-ratio buckets; anything wider is the last bucket
GROUPER_ASPECT_LIMITS = (0.7, 0.9, 1.1, 1.5)
# Key assigned to images that cannot be decoded
ERROR_GROUP_KEY = "error_0_0_0"
# Key used when the strategy does not pre-group
UNGROUPED_KEY = "ungrouped"

# Embedding extractor input (ImageNet-pretrained MobileNetV2)
EMBEDDING_INPUT_SIZE = 224
IMAGENET_MEAN = (0.485, 0.456, 0.406)
IMAGENET_STD = (0.229, 0.224, 0.225)

# Decompression bomb limit for Pillow
MAX_IMAGE_PIXELS = 500_000_000

# Chunk size used when streaming file contents into the content hash
HASH_CHUNK_SIZE = 65536
