"""
Rough grouping module for the scanner package.

Derives a cheap bucket key from an image so that expensive pairwise
comparison only runs between images that already look alike. The key is the
aspect-ratio bucket, the average-brightness bucket and the dominant colour
class of a 16x16 thumbnail, joined as ``"{aspect}_{brightness}_{colour}"``.

Resizing and mild colour correction rarely move an image to another bucket;
a true duplicate that lands on a bucket boundary can still be missed.
"""

from __future__ import annotations

from pathlib import Path

from ..config import (
    ERROR_GROUP_KEY,
    GROUPER_ASPECT_BUCKETS,
    GROUPER_ASPECT_LIMITS,
    GROUPER_BRIGHTNESS_BUCKETS,
    GROUPER_CHANNEL_MARGIN,
    GROUPER_COLOR_BUCKETS,
    GROUPER_SATURATION_THRESHOLD,
    GROUPER_THUMBNAIL_SIZE,
)
from .dependencies import Image, np, _logger

# Colour classes
COLOR_GRAYSCALE = 0
COLOR_RED = 1
COLOR_GREEN = 2
COLOR_BLUE_OR_MIXED = 3


def aspect_ratio_bucket(width: int, height: int) -> int:
    """
    Bucket an aspect ratio: 0 portrait, 1 near-square portrait, 2 square,
    3 near-square landscape, 4 landscape.
    """
    if height <= 0:
        return GROUPER_ASPECT_BUCKETS - 1
    ratio = width / height
    for bucket, limit in enumerate(GROUPER_ASPECT_LIMITS):
        if ratio < limit:
            return bucket
    return GROUPER_ASPECT_BUCKETS - 1


def brightness_bucket(thumbnail: Image.Image) -> int:
    """Bucket the average grayscale brightness of a thumbnail (0-7)."""
    gray = np.asarray(thumbnail.convert('L'), dtype=np.int64)
    average = int(gray.sum() // gray.size)
    bucket = average // (256 // GROUPER_BRIGHTNESS_BUCKETS)
    return min(bucket, GROUPER_BRIGHTNESS_BUCKETS - 1)


def dominant_color_bucket(thumbnail: Image.Image) -> int:
    """
    Classify each thumbnail pixel and return the most common class.

    A pixel whose max-min channel spread is below the saturation threshold is
    grayscale; otherwise it is red or green when that channel leads both others
    by a margin, and blue/mixed in every remaining case. Ties go to the lower
    class number.
    """
    rgb = np.asarray(thumbnail.convert('RGB'), dtype=np.int16)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    saturation = rgb.max(axis=-1) - rgb.min(axis=-1)

    grayscale = saturation < GROUPER_SATURATION_THRESHOLD
    red = ~grayscale & (r > g + GROUPER_CHANNEL_MARGIN) & (r > b + GROUPER_CHANNEL_MARGIN)
    green = ~grayscale & ~red & (g > r + GROUPER_CHANNEL_MARGIN) & (g > b + GROUPER_CHANNEL_MARGIN)
    mixed = ~grayscale & ~red & ~green

    counts = [int(mask.sum()) for mask in (grayscale, red, green, mixed)]
    # argmax returns the first maximum
    return int(np.argmax(counts[:GROUPER_COLOR_BUCKETS]))


def create_group_key(image: Image.Image) -> str:
    """Compute the rough group key of a decoded image."""
    aspect = aspect_ratio_bucket(image.width, image.height)
    thumbnail = image.convert('RGB').resize(
        (GROUPER_THUMBNAIL_SIZE, GROUPER_THUMBNAIL_SIZE), Image.Resampling.BICUBIC
    )
    return f"{aspect}_{brightness_bucket(thumbnail)}_{dominant_color_bucket(thumbnail)}"


def create_group_key_for_file(filepath: str | Path) -> str:
    """
    Compute the rough group key of an image file.

    Files that cannot be opened or decoded all share ERROR_GROUP_KEY.
    """
    try:
        with Image.open(filepath) as img:
            img.load()
            return create_group_key(img)
    except Exception as e:
        _logger.debug(f"Rough grouping failed for {filepath}: {e}")
        return ERROR_GROUP_KEY


__all__ = [
    'aspect_ratio_bucket',
    'brightness_bucket',
    'dominant_color_bucket',
    'create_group_key',
    'create_group_key_for_file',
]
