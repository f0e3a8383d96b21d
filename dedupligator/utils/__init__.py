"""
Utilities package for Dedupligator.

Provides:
- formatters: Human-readable formatting for numbers, durations and file sizes
- validators: Directory and scan parameter validation
- exporters: Export duplicate groups to files
"""

from __future__ import annotations

# Import submodules for convenient access
from . import formatters
from . import validators
from . import exporters

# Export commonly used functions
from .formatters import format_number, format_duration, format_percent, format_size
from .validators import (
    validate_directory,
    normalize_directory_path,
    validate_threshold,
    validate_similarity,
    validate_workers,
)
from .exporters import export_results, EXPORT_FORMATS

__all__ = [
    # Submodules
    'formatters',
    'validators',
    'exporters',
    # Formatters
    'format_number',
    'format_duration',
    'format_percent',
    'format_size',
    # Validators
    'validate_directory',
    'normalize_directory_path',
    'validate_threshold',
    'validate_similarity',
    'validate_workers',
    # Exporters
    'export_results',
    'EXPORT_FORMATS',
]
