"""
Pytest configuration and shared fixtures for test suite.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image
import numpy as np

from dedupligator.models import CandidateFile


def make_noise_image(seed: int, size=(64, 64)) -> Image.Image:
    """Deterministic random RGB image."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    return Image.fromarray(pixels, 'RGB')


def make_gradient_image(size=(64, 64), reverse=False) -> Image.Image:
    """Horizontal grayscale gradient rendered as RGB."""
    width, height = size
    row = np.linspace(0, 255, width, dtype=np.float64)
    if reverse:
        row = row[::-1]
    pixels = np.tile(row, (height, 1)).astype(np.uint8)
    return Image.fromarray(pixels, 'L').convert('RGB')


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def sample_images(temp_dir):
    """
    Create a set of sample images for testing.

    Returns:
        dict with paths to:
        - a (A.jpg) and b (B.jpg): byte-identical copies
        - c (C.jpg): unrelated image of a different size
        - notes (notes.txt): not an image
    """
    images = {}

    path_a = temp_dir / "A.jpg"
    make_noise_image(1).save(path_a, 'JPEG', quality=90)
    images['a'] = str(path_a)

    path_b = temp_dir / "B.jpg"
    path_b.write_bytes(path_a.read_bytes())
    images['b'] = str(path_b)

    path_c = temp_dir / "C.jpg"
    make_noise_image(2, size=(80, 48)).save(path_c, 'JPEG', quality=90)
    images['c'] = str(path_c)

    path_txt = temp_dir / "notes.txt"
    path_txt.write_text("not an image")
    images['notes'] = str(path_txt)

    return images


@pytest.fixture
def candidate(temp_dir):
    """Factory writing ``content`` to ``name`` and returning its CandidateFile."""
    def _make(name: str, content: bytes = b"data") -> CandidateFile:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return CandidateFile.from_path(str(path))
    return _make
