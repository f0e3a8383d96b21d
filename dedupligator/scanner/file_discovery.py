"""
File discovery module for the scanner package.

Provides functionality to find and snapshot image files in a directory tree.
Top-level subdirectories are walked in parallel; directories that cannot be
read are skipped so a scan returns partial results instead of failing.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

from ..cancellation import CancellationToken
from ..config import IMAGE_EXTENSIONS, DEFAULT_WORKERS
from ..exceptions import InvalidInputError
from ..models import CandidateFile
from .dependencies import _logger
from .parallel import map_parallel


def is_image_file(path: str) -> bool:
    """Return True if ``path`` has a recognised image extension (case-insensitive)."""
    return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS


def _snapshot_files(
    directory: str,
    filenames: list[str],
    cancel_token: Optional[CancellationToken],
) -> list[CandidateFile]:
    """Snapshot the image files among ``filenames`` in ``directory``."""
    files = []
    for filename in sorted(filenames):
        if not is_image_file(filename):
            continue
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        filepath = os.path.join(directory, filename)
        try:
            if not os.path.isfile(filepath):
                continue
            files.append(CandidateFile.from_path(filepath))
        except OSError as e:
            _logger.debug(f"Skipping unreadable file {filepath}: {e}")
    return files


def _log_walk_error(error: OSError) -> None:
    _logger.debug(f"Skipping inaccessible directory {error.filename}: {error}")


def _walk_directory(
    directory: str,
    cancel_token: Optional[CancellationToken] = None,
) -> list[CandidateFile]:
    """
    Recursively collect image files below ``directory``.

    Access-denied and I/O errors skip the affected directory. Symlinked
    directories are not followed.
    """
    files = []
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_log_walk_error):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        # Sorting in place fixes the descent order for this run
        dirnames.sort()
        files.extend(_snapshot_files(dirpath, filenames, cancel_token))
    return files


def find_image_files(
    root_path: str,
    max_workers: int = DEFAULT_WORKERS,
    cancel_token: Optional[CancellationToken] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> list[CandidateFile]:
    """
    Find all image files in the given directory and its subdirectories.

    Args:
        root_path: Absolute path of an existing directory
        max_workers: Number of subdirectories enumerated in parallel
        cancel_token: Optional cancellation token checked between directories and files
        progress_callback: Optional callback(directories_done, directories_total)

    Returns:
        Snapshots of the image files: root-level files first, then each
        top-level subdirectory in name order

    Raises:
        InvalidInputError: If the root directory itself cannot be listed
        ScanCancelledError: If cancellation was requested
    """
    try:
        with os.scandir(root_path) as iterator:
            entries = list(iterator)
    except OSError as e:
        raise InvalidInputError(f"Cannot read directory: {root_path} ({e})") from e

    subdirs = []
    root_filenames = []
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(entry.path)
            else:
                root_filenames.append(entry.name)
        except OSError as e:
            _logger.debug(f"Skipping entry {entry.path}: {e}")
    subdirs.sort()

    total_dirs = len(subdirs) + 1
    images = _snapshot_files(root_path, root_filenames, cancel_token)
    if progress_callback:
        progress_callback(1, total_dirs)

    def _on_directory_done(done: int, _total: int) -> None:
        if progress_callback:
            progress_callback(done + 1, total_dirs)

    per_directory = map_parallel(
        lambda directory: _walk_directory(directory, cancel_token),
        subdirs,
        max_workers=max_workers,
        cancel_token=cancel_token,
        progress_callback=_on_directory_done,
    )
    for files in per_directory:
        images.extend(files)

    return images


__all__ = ['find_image_files', 'is_image_file']
