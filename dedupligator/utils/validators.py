"""
Input validation for Dedupligator.

Provides validators for the root directory and scan parameters. The
``validate_*`` helpers return ``(is_valid, error_message)`` tuples;
``normalize_directory_path`` raises InvalidInputError instead.
"""

from __future__ import annotations

import os
from typing import Optional

from ..config import PHASH_BITS
from ..exceptions import InvalidInputError


def validate_directory(directory: str) -> tuple[bool, str]:
    """
    Validate that a directory exists and is accessible.

    Args:
        directory: Directory path to validate

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_directory('/nonexistent/directory')
        (False, 'Directory not found: /nonexistent/directory')
    """
    if not directory or not str(directory).strip():
        return False, "Directory path is required"

    if not os.path.isabs(directory):
        return False, "Directory must be an absolute path"

    if not os.path.exists(directory):
        return False, f"Directory not found: {directory}"

    if not os.path.isdir(directory):
        return False, f"Path is not a directory: {directory}"

    if not os.access(directory, os.R_OK | os.X_OK):
        return False, f"Cannot read directory (permission denied): {directory}"

    return True, ""


def normalize_directory_path(directory) -> str:
    """
    Resolve ``directory`` to an absolute, normalised path and validate it.

    Args:
        directory: str or os.PathLike

    Returns:
        Absolute path without a trailing separator (except for a filesystem root)

    Raises:
        InvalidInputError: If the path is empty, missing, not a directory or unreadable
    """
    if directory is None or not str(directory).strip():
        raise InvalidInputError("Directory path is required")

    normalized = os.path.abspath(os.path.expanduser(os.fspath(directory)))
    is_valid, error = validate_directory(normalized)
    if not is_valid:
        raise InvalidInputError(error)
    return normalized


def validate_threshold(threshold: int) -> tuple[bool, str]:
    """
    Validate that a threshold value is within acceptable range.

    Args:
        threshold: Threshold value to validate (should be 0-64 for pHash)

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_threshold(10)
        (True, '')
        >>> validate_threshold(100)
        (False, 'Threshold must be between 0 and 64')
    """
    try:
        threshold = int(threshold)
        if not 0 <= threshold <= PHASH_BITS:
            return False, f"Threshold must be between 0 and {PHASH_BITS}"
        return True, ""
    except (ValueError, TypeError):
        return False, "Threshold must be an integer"


def validate_similarity(similarity: float) -> tuple[bool, str]:
    """
    Validate a cosine similarity threshold for the neural strategy.

    Examples:
        >>> validate_similarity(0.7)
        (True, '')
        >>> validate_similarity(1.5)
        (False, 'Similarity must be between 0.0 and 1.0')
    """
    try:
        similarity = float(similarity)
    except (ValueError, TypeError):
        return False, "Similarity must be a number"
    if not 0.0 <= similarity <= 1.0:
        return False, "Similarity must be between 0.0 and 1.0"
    return True, ""


def validate_workers(workers: Optional[int]) -> tuple[bool, str]:
    """Validate a worker count (1-256)."""
    try:
        workers = int(workers)
        if not 1 <= workers <= 256:
            return False, "Workers must be between 1 and 256"
    except (ValueError, TypeError):
        return False, "Workers must be an integer"
    return True, ""


__all__ = [
    'validate_directory',
    'normalize_directory_path',
    'validate_threshold',
    'validate_similarity',
    'validate_workers',
]
