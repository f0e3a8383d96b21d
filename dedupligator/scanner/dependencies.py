"""
Third-party imports shared by the scanner modules.

Pillow, numpy and scipy are required. tqdm is optional and only drives the CLI
progress bar.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Optional

from ..config import MAX_IMAGE_PIXELS

# Shared by every scanner module
_logger = logging.getLogger(__name__)

try:
    from PIL import Image
    import numpy as np
    from scipy.fftpack import dct
except ImportError:
    raise ImportError(
        "Dedupligator needs Pillow, numpy and scipy.\n"
        "Install with: pip install Pillow numpy scipy"
    )

# Only the hard pixel limit applies; the softer warning is silenced
warnings.filterwarnings("ignore", category=Image.DecompressionBombWarning)


def set_max_image_pixels(limit: Optional[int]) -> None:
    """Set Pillow's decompression bomb limit (None disables the check)."""
    Image.MAX_IMAGE_PIXELS = limit
    _logger.debug(f"Pillow pixel limit set to {limit}")


set_max_image_pixels(MAX_IMAGE_PIXELS)

HAS_TQDM = False
_tqdm_class: Optional[Any] = None

try:
    from tqdm import tqdm as _tqdm_import
except ImportError:
    pass
else:
    HAS_TQDM = True
    _tqdm_class = _tqdm_import


__all__ = [
    'Image',
    'np',
    'dct',
    'HAS_TQDM',
    '_tqdm_class',
    '_logger',
    'set_max_image_pixels',
]
