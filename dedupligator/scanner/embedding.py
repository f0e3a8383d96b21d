"""
Embedding extraction module for the scanner package.

Runs an ImageNet-pretrained MobileNetV2 backbone (classification head
removed) to turn an image into a 1280-dimensional feature vector. The model
is loaded once per extractor and released by ``close()``.

torch/torchvision are imported when an extractor is created, so the rest of
the package works without loading them.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Optional

from ..config import EMBEDDING_INPUT_SIZE, IMAGENET_MEAN, IMAGENET_STD
from ..exceptions import ModelInitializationError
from .dependencies import Image, np, _logger


def cosine_similarity(vector1, vector2) -> float:
    """Cosine similarity of two vectors; 0.0 if either has zero length."""
    a = np.asarray(vector1, dtype=np.float64)
    b = np.asarray(vector2, dtype=np.float64)
    denominator = np.linalg.norm(a) * np.linalg.norm(b)
    if denominator < np.finfo(np.float32).eps:
        return 0.0
    return float(np.dot(a, b) / denominator)


class EmbeddingExtractor:
    """
    MobileNetV2 feature extractor.

    Args:
        model_path: Optional path to a saved MobileNetV2 ``state_dict``. When
            omitted the torchvision ImageNet weights are used (downloaded on
            first use).
        device: torch device string; defaults to CUDA when available.

    Raises:
        ModelInitializationError: If the weights file is missing or the model
            cannot be built.
    """

    def __init__(self, model_path: Optional[str] = None, device: Optional[str] = None):
        if model_path is not None and not os.path.isfile(model_path):
            raise ModelInitializationError(f"Model file not found: {model_path}")

        try:
            import torch
            from torchvision import models, transforms
        except ImportError as e:
            raise ModelInitializationError(
                "The neural strategy requires torch and torchvision.\n"
                "Install with: pip install torch torchvision"
            ) from e

        self._torch = torch
        self.device = device or ('cuda' if torch.cuda.is_available() else 'cpu')
        self.model_path = model_path

        try:
            if model_path is None:
                model = models.mobilenet_v2(weights=models.MobileNet_V2_Weights.DEFAULT)
            else:
                model = models.mobilenet_v2(weights=None)
                state_dict = torch.load(model_path, map_location='cpu')
                model.load_state_dict(state_dict)
        except Exception as e:
            raise ModelInitializationError(f"Failed to load embedding model: {e}") from e

        # Drop the classifier so the pooled backbone features are returned
        model.classifier = torch.nn.Identity()
        self.model = model.to(self.device).eval()

        # Resize the short side, then centre-crop to a square
        self.transform = transforms.Compose([
            transforms.Resize(EMBEDDING_INPUT_SIZE),
            transforms.CenterCrop(EMBEDDING_INPUT_SIZE),
            transforms.ToTensor(),
            transforms.Normalize(mean=list(IMAGENET_MEAN), std=list(IMAGENET_STD)),
        ])
        self._lock = threading.Lock()
        _logger.info(f"Loaded MobileNetV2 embedding model on {self.device}")

    @property
    def closed(self) -> bool:
        return self.model is None

    def extract(self, image: Image.Image):
        """Return the embedding of a decoded image as a float32 numpy vector."""
        tensor = self.transform(image.convert('RGB')).unsqueeze(0)
        with self._lock:
            if self.model is None:
                raise RuntimeError("EmbeddingExtractor has been closed")
            with self._torch.no_grad():
                features = self.model(tensor.to(self.device))
        return features.cpu().numpy().astype(np.float32).flatten()

    def extract_file(self, filepath: str | Path):
        """
        Return the embedding of an image file.

        Raises:
            FileNotFoundError: If the file does not exist
            PIL.UnidentifiedImageError: If the file is not a decodable image
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Image file not found: {filepath}")
        with Image.open(filepath) as img:
            img.load()
            return self.extract(img)

    def close(self) -> None:
        """Release the model. Further extraction raises RuntimeError."""
        with self._lock:
            if self.model is None:
                return
            self.model = None
        if self.device.startswith('cuda'):
            self._torch.cuda.empty_cache()
        _logger.debug("Released embedding model")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


__all__ = ['EmbeddingExtractor', 'cosine_similarity']
