"""
Hashing module for the scanner package.

Provides functions for calculating cryptographic content hashes and 64-bit
perceptual hashes of images.

Perceptual hash bit layout (stable across implementations):

1. The image is converted to 8-bit grayscale and resized to 32x32.
2. A 2-D DCT-II is taken over the 32x32 grid (pixel values scaled to 0..1).
3. The top-left 8x8 block of coefficients is read with the horizontal
   frequency ``u`` as the outer index and the vertical frequency ``v`` as the
   inner index, skipping the DC term at (0, 0). This leaves 63 coefficients.
4. Coefficient ``k`` of those 63 (``k = 8*u + v - 1``) sets bit ``k`` of the
   hash when it is >= the mean of the 63 coefficients. Bit 63 is always zero.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from ..config import (
    HASH_CHUNK_SIZE,
    PHASH_BITS,
    PHASH_IMAGE_SIZE,
    PHASH_LOW_FREQ_SIZE,
    DEFAULT_THRESHOLD,
)
from .dependencies import Image, dct, np


def calculate_file_hash(filepath: str | Path, algorithm: str = 'sha256') -> str:
    """
    Calculate cryptographic hash of a file.

    Args:
        filepath: Path to the file
        algorithm: Hash algorithm to use (default: sha256)

    Returns:
        Lower-case hex digest of the file contents

    Raises:
        OSError: If the file cannot be read
    """
    hasher = hashlib.new(algorithm)
    with open(filepath, 'rb') as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b''):
            hasher.update(chunk)
    return hasher.hexdigest()


def _dct_2d(pixels):
    """2-D DCT of a square array indexed [y, x]; result is indexed [v, u]."""
    return dct(dct(pixels, axis=0, norm="ortho"), axis=1, norm="ortho")


def calculate_phash(image: Image.Image) -> int:
    """
    Calculate the 64-bit perceptual hash of an image.

    Deterministic: equal pixel data always yields the same hash. Robust to
    resizing and mild recompression, not to rotation or cropping.

    Args:
        image: Any PIL image

    Returns:
        Hash as a non-negative integer below 2**63
    """
    gray = image.convert('L').resize(
        (PHASH_IMAGE_SIZE, PHASH_IMAGE_SIZE), Image.Resampling.LANCZOS
    )
    pixels = np.asarray(gray, dtype=np.float64) / 255.0

    # Transpose so the block is indexed [u, v] (horizontal frequency first)
    low = _dct_2d(pixels).T[:PHASH_LOW_FREQ_SIZE, :PHASH_LOW_FREQ_SIZE]
    coefficients = low.flatten()[1:]  # drop DC
    mean = coefficients.mean()

    value = 0
    for bit, coefficient in enumerate(coefficients):
        if coefficient >= mean:
            value |= 1 << bit
    return value


def calculate_phash_file(filepath: str | Path) -> int:
    """
    Calculate the perceptual hash of an image file.

    Raises:
        OSError: If the file cannot be read
        PIL.UnidentifiedImageError: If the file is not a decodable image
    """
    with Image.open(filepath) as img:
        img.load()  # Force load to detect truncated/corrupt images early
        return calculate_phash(img)


def hamming_distance(hash1: int, hash2: int) -> int:
    """Number of differing bits between two hashes."""
    return bin(hash1 ^ hash2).count('1')


def are_images_similar(hash1: int, hash2: int, threshold: int = DEFAULT_THRESHOLD) -> bool:
    """True if the hashes differ in at most ``threshold`` bits."""
    return hamming_distance(hash1, hash2) <= threshold


def hash_to_string(value: int) -> str:
    """Render a hash as a zero-padded 64-character binary string."""
    return format(value, f'0{PHASH_BITS}b')


__all__ = [
    'calculate_file_hash',
    'calculate_phash',
    'calculate_phash_file',
    'hamming_distance',
    'are_images_similar',
    'hash_to_string',
]
