"""
User configuration management for Dedupligator.

Settings are resolved in this order (first match wins):
1. Command-line arguments (handled by the CLI)
2. Environment variables (DEDUPLIGATOR_*)
3. User config file (~/.dedupligator/config.json)
4. Defaults from config.py

The config directory can be moved with DEDUPLIGATOR_CONFIG_DIR.

Example config.json:
{
    "default_strategy": "perceptual",
    "default_threshold": 8,
    "default_workers": 8,
    "model_path": "/models/mobilenet_v2.pt"
}
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, NamedTuple, Optional

from .config import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_NEURAL_THRESHOLD,
    DEFAULT_THRESHOLD,
    DEFAULT_WORKERS,
    MAX_IMAGE_PIXELS,
)

logger = logging.getLogger(__name__)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class _Setting(NamedTuple):
    env_var: str
    default: Any
    convert: Callable[[Any], Any]


_SETTINGS = {
    'default_strategy': _Setting('DEDUPLIGATOR_STRATEGY', 'exact', str),
    'default_threshold': _Setting('DEDUPLIGATOR_THRESHOLD', DEFAULT_THRESHOLD, int),
    'default_neural_threshold': _Setting('DEDUPLIGATOR_NEURAL_THRESHOLD', DEFAULT_NEURAL_THRESHOLD, float),
    'default_workers': _Setting('DEDUPLIGATOR_WORKERS', DEFAULT_WORKERS, int),
    'cache_capacity': _Setting('DEDUPLIGATOR_CACHE_CAPACITY', DEFAULT_CACHE_CAPACITY, int),
    'model_path': _Setting('DEDUPLIGATOR_MODEL_PATH', None, _optional_str),
    'max_image_pixels': _Setting('DEDUPLIGATOR_MAX_PIXELS', MAX_IMAGE_PIXELS, int),
}


class UserConfig:
    """
    Reads settings from the environment and the user config file.

    The file is parsed on first use and cached until ``reload()``. Values
    that cannot be converted to the setting's type are logged and replaced
    by the default.
    """

    _instance: Optional['UserConfig'] = None
    _file_data: Optional[dict] = None

    def __new__(cls):
        """Single shared instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def config_dir(self) -> Path:
        """Directory holding config.json."""
        override = os.getenv('DEDUPLIGATOR_CONFIG_DIR')
        return Path(override) if override else Path.home() / '.dedupligator'

    @property
    def config_file_path(self) -> Path:
        return self.config_dir / 'config.json'

    def _read_file(self) -> dict:
        path = self.config_file_path
        if not path.exists():
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path}: expected a JSON object")
            return {}
        logger.debug(f"Loaded configuration from {path}")
        return data

    def _file_values(self) -> dict:
        if self._file_data is None:
            self._file_data = self._read_file()
        return self._file_data

    def reload(self) -> None:
        """Forget the cached file contents; the next lookup re-reads the file."""
        self._file_data = None

    def get(self, key: str) -> Any:
        """
        Resolve one setting.

        Environment values are parsed as JSON when possible (so ``"8"`` is a
        number and ``"null"`` is None) and used verbatim otherwise.

        Raises:
            KeyError: If ``key`` is not a known setting
        """
        setting = _SETTINGS[key]
        raw = os.getenv(setting.env_var)
        if raw is not None:
            try:
                value = json.loads(raw)
            except json.JSONDecodeError:
                value = raw
            source = setting.env_var
        else:
            data = self._file_values()
            if key not in data:
                return setting.default
            value = data[key]
            source = str(self.config_file_path)

        if value is None:
            return setting.convert(None) if setting.convert is _optional_str else setting.default
        try:
            return setting.convert(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid value {value!r} for {key} in {source}; using {setting.default!r}")
            return setting.default

    def as_dict(self) -> dict:
        """All resolved settings, keyed by name."""
        return {key: self.get(key) for key in _SETTINGS}

    @property
    def default_strategy(self) -> str:
        """Strategy used when --strategy is not given."""
        return self.get('default_strategy')

    @property
    def default_threshold(self) -> int:
        """Perceptual hash Hamming distance threshold (0-64)."""
        return self.get('default_threshold')

    @property
    def default_neural_threshold(self) -> float:
        """Cosine similarity threshold for the neural strategy (0.0-1.0)."""
        return self.get('default_neural_threshold')

    @property
    def default_workers(self) -> int:
        return self.get('default_workers')

    @property
    def cache_capacity(self) -> int:
        """Entries kept by each strategy cache."""
        return self.get('cache_capacity')

    @property
    def model_path(self) -> Optional[str]:
        """MobileNetV2 weights file (None = torchvision default weights)."""
        return self.get('model_path')

    @property
    def max_image_pixels(self) -> int:
        """Decompression bomb limit passed to Pillow."""
        return self.get('max_image_pixels')

    def create_example_config(self) -> bool:
        """Write a config.json holding every setting at its default value."""
        example = {"_comment": "Dedupligator user configuration"}
        example.update({key: setting.default for key, setting in _SETTINGS.items()})

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(example, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to create example config: {e}")
            return False
        logger.info(f"Created example config file at {self.config_file_path}")
        return True


_user_config = UserConfig()


def get_user_config() -> UserConfig:
    """Get the shared UserConfig instance."""
    return _user_config
