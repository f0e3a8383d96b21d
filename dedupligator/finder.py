"""
Duplicate finder: the scan -> pre-group -> compare pipeline.

Phases and their share of the reported progress:

1. Scan (10%): enumerate image files below the root directory.
2. Pre-group (30%): bucket files by the strategy's grouping key and drop
   buckets with a single file.
3. Compare (60%): run the strategy's pairwise predicate inside each bucket.

All three phases use a bounded worker pool. A cancellation token is polled
between directories, files and comparison pairs; a cancelled run raises
ScanCancelledError and returns nothing.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Hashable, Optional

from .cancellation import CancellationToken
from .config import (
    COMPARE_PHASE_WEIGHT,
    DEFAULT_WORKERS,
    GROUP_PHASE_WEIGHT,
    SCAN_PHASE_WEIGHT,
    UNGROUPED_KEY,
)
from .exceptions import ComparisonError, InvalidInputError, ScanCancelledError
from .models import CandidateFile, DuplicateGroup
from .progress import ProgressCallback, ProgressReporter
from .scanner.file_discovery import find_image_files
from .scanner.parallel import map_parallel
from .strategies.base import MatchStrategy
from .utils.validators import normalize_directory_path, validate_workers

logger = logging.getLogger(__name__)

# Grouping modes
GROUPING_REPRESENTATIVE = 'representative'
GROUPING_CONNECTED = 'connected'
GROUPING_MODES = (GROUPING_REPRESENTATIVE, GROUPING_CONNECTED)

# Key for files whose grouping key could not be computed
_GROUPING_ERROR_KEY = "error"


@dataclass
class FinderStats:
    """Counters collected during the most recent run."""
    files_scanned: int = 0
    groups_compared: int = 0
    files_compared: int = 0
    comparisons: int = 0
    comparison_failures: int = 0
    duplicate_groups: int = 0


class DuplicateFinder:
    """
    Finds duplicate image files below a directory using one match strategy.

    Args:
        strategy: Match strategy deciding which files are duplicates
        max_workers: Worker-pool size for every phase (default: CPU count)
        grouping: ``'representative'`` (default) builds each group around the
            first unclaimed file and only adds files that match it directly.
            ``'connected'`` merges every pair that matches, so groups are the
            connected components of the match relation.

    Raises:
        InvalidInputError: If ``max_workers`` or ``grouping`` is invalid
    """

    def __init__(
        self,
        strategy: MatchStrategy,
        max_workers: int = DEFAULT_WORKERS,
        grouping: str = GROUPING_REPRESENTATIVE,
    ):
        if strategy is None:
            raise InvalidInputError("A match strategy is required")
        is_valid, error = validate_workers(max_workers)
        if not is_valid:
            raise InvalidInputError(error)
        if grouping not in GROUPING_MODES:
            raise InvalidInputError(
                f"Unknown grouping mode '{grouping}'. Choose one of: {', '.join(GROUPING_MODES)}"
            )
        self.strategy = strategy
        self.max_workers = int(max_workers)
        self.grouping = grouping
        self.stats = FinderStats()
        self._stats_lock = threading.Lock()
        self._reporter: Optional[ProgressReporter] = None

    def find_duplicates(
        self,
        directory_path: str,
        progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[DuplicateGroup]:
        """
        Find duplicate groups below ``directory_path``.

        Args:
            directory_path: Root directory to scan
            progress: Optional callback(percent) receiving non-decreasing values in [0, 100]
            cancel_token: Optional token; cancelling it aborts the run

        Returns:
            Duplicate groups of two or more files each, in no particular order

        Raises:
            InvalidInputError: If the directory does not exist or cannot be read
            ScanCancelledError: If the token was cancelled before the run finished
        """
        root = normalize_directory_path(directory_path)
        token = cancel_token if cancel_token is not None else CancellationToken()
        reporter = ProgressReporter(progress)
        self._reporter = reporter
        self.stats = FinderStats()

        try:
            token.raise_if_cancelled()
            logger.info(f"Scanning {root} for images...")
            files = self.scan(root, reporter, token)
            logger.info(f"Found {len(files):,} image files")
            if len(files) < 2:
                reporter.report(100.0)
                return []

            groups = self.pre_group(files, reporter, token)
            logger.info(f"{len(groups):,} candidate groups to compare")
            if not groups:
                reporter.report(100.0)
                return []

            duplicates = self.compare_groups(groups, reporter, token)
            token.raise_if_cancelled()
            reporter.report(100.0)
            logger.info(f"Found {len(duplicates):,} duplicate groups")
            return duplicates
        except ScanCancelledError:
            logger.info("Scan was cancelled")
            raise
        finally:
            reporter.close()

    def flush_progress(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the last run's progress values to reach its callback.

        ``find_duplicates`` returns without waiting on the callback; callers
        that draw the final value themselves (a progress bar) call this first.

        Returns:
            True if every value was delivered within ``timeout`` seconds
        """
        if self._reporter is None:
            return True
        return self._reporter.flush(timeout)

    def scan(
        self,
        root: str,
        reporter: Optional[ProgressReporter] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[CandidateFile]:
        """Phase 1: enumerate candidate image files below an absolute ``root``."""

        def _on_progress(done: int, total: int) -> None:
            if reporter is not None:
                reporter.report_phase(0.0, SCAN_PHASE_WEIGHT, done, total)

        files = find_image_files(
            root,
            max_workers=self.max_workers,
            cancel_token=cancel_token,
            progress_callback=_on_progress,
        )
        self.stats.files_scanned = len(files)
        return files

    def _safe_grouping_key(self, file: CandidateFile) -> Hashable:
        try:
            return self.strategy.grouping_key(file)
        except Exception as e:
            logger.debug(f"Grouping key failed for {file.path}: {e}")
            return _GROUPING_ERROR_KEY

    def pre_group(
        self,
        files: list[CandidateFile],
        reporter: Optional[ProgressReporter] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[list[CandidateFile]]:
        """
        Phase 2: partition ``files`` by grouping key.

        Buckets keep the scan order of their files. Single-file buckets are
        dropped since they cannot contain duplicates. Strategies that do not
        pre-group get all files in one bucket.
        """
        if not self.strategy.requires_pre_grouping:
            if reporter is not None:
                reporter.report((SCAN_PHASE_WEIGHT + GROUP_PHASE_WEIGHT) * 100)
            buckets = {UNGROUPED_KEY: list(files)}
        else:
            def _on_progress(done: int, total: int) -> None:
                if reporter is not None:
                    reporter.report_phase(SCAN_PHASE_WEIGHT, GROUP_PHASE_WEIGHT, done, total)

            keys = map_parallel(
                self._safe_grouping_key,
                files,
                max_workers=self.max_workers,
                cancel_token=cancel_token,
                progress_callback=_on_progress,
            )
            buckets = defaultdict(list)
            for file, key in zip(files, keys):
                buckets[key].append(file)

        return [members for members in buckets.values() if len(members) > 1]

    def compare_groups(
        self,
        groups: list[list[CandidateFile]],
        reporter: Optional[ProgressReporter] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[DuplicateGroup]:
        """Phase 3: find duplicates inside each pre-group, groups in parallel."""
        token = cancel_token if cancel_token is not None else CancellationToken()
        total_files = sum(len(group) for group in groups)
        processed = 0
        lock = threading.Lock()

        def _tick() -> None:
            nonlocal processed
            with lock:
                processed += 1
                done = processed
            if reporter is not None:
                reporter.report_phase(
                    SCAN_PHASE_WEIGHT + GROUP_PHASE_WEIGHT, COMPARE_PHASE_WEIGHT, done, total_files
                )

        if self.grouping == GROUPING_CONNECTED:
            compare = self._group_by_connectivity
        else:
            compare = self._group_by_representative

        per_group = map_parallel(
            lambda group: compare(group, token, _tick),
            groups,
            max_workers=self.max_workers,
            cancel_token=token,
        )

        duplicates = [
            DuplicateGroup(files=members, match_type=self.strategy.match_type)
            for found in per_group
            for members in found
        ]
        with self._stats_lock:
            self.stats.groups_compared += len(groups)
            self.stats.files_compared += total_files
            self.stats.duplicate_groups += len(duplicates)
        return duplicates

    def _group_by_representative(
        self,
        files: list[CandidateFile],
        token: CancellationToken,
        tick: Callable[[], None],
    ) -> list[list[CandidateFile]]:
        """
        First-unclaimed-wins grouping.

        Each unclaimed file becomes a representative and claims every later
        unclaimed file that matches it. Files are only compared with the
        representative, so if A~B and B~C but not A~C, C is not in A's group.
        """
        claimed: set[str] = set()
        groups = []

        for i, current in enumerate(files):
            tick()
            if current.path in claimed:
                continue

            members = [current]
            for other in files[i + 1:]:
                token.raise_if_cancelled()
                if other.path in claimed:
                    continue
                if self._files_are_duplicates(current, other):
                    members.append(other)
                    claimed.add(other.path)

            if len(members) > 1:
                claimed.add(current.path)
                groups.append(members)

        return groups

    def _group_by_connectivity(
        self,
        files: list[CandidateFile],
        token: CancellationToken,
        tick: Callable[[], None],
    ) -> list[list[CandidateFile]]:
        """Transitive-closure grouping: connected components of the match relation."""
        parent = list(range(len(files)))

        def find(x: int) -> int:
            while parent[x] != x:
                parent[x] = parent[parent[x]]  # Path halving
                x = parent[x]
            return x

        def union(x: int, y: int) -> None:
            px, py = find(x), find(y)
            if px != py:
                # Lower index stays root so groups keep scan order
                parent[max(px, py)] = min(px, py)

        for i in range(len(files)):
            tick()
            for j in range(i + 1, len(files)):
                token.raise_if_cancelled()
                # Already connected; the pair cannot change the components
                if find(i) == find(j):
                    continue
                if self._files_are_duplicates(files[i], files[j]):
                    union(i, j)

        components: dict[int, list[CandidateFile]] = defaultdict(list)
        for i, file in enumerate(files):
            components[find(i)].append(file)
        return [members for members in components.values() if len(members) > 1]

    def _files_are_duplicates(self, file1: CandidateFile, file2: CandidateFile) -> bool:
        """Run the strategy predicate; a failing pair counts as not duplicate."""
        with self._stats_lock:
            self.stats.comparisons += 1
        try:
            return self.strategy.are_duplicates(file1, file2)
        except ScanCancelledError:
            raise
        except Exception as e:
            logger.warning(str(ComparisonError(file1.path, file2.path, e)))
            with self._stats_lock:
                self.stats.comparison_failures += 1
            return False


def find_duplicates(
    directory_path: str,
    strategy: MatchStrategy,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    max_workers: int = DEFAULT_WORKERS,
    grouping: str = GROUPING_REPRESENTATIVE,
) -> list[DuplicateGroup]:
    """Convenience wrapper: build a DuplicateFinder and run it once."""
    finder = DuplicateFinder(strategy, max_workers=max_workers, grouping=grouping)
    return finder.find_duplicates(directory_path, progress=progress, cancel_token=cancel_token)


__all__ = [
    'DuplicateFinder',
    'FinderStats',
    'find_duplicates',
    'GROUPING_REPRESENTATIVE',
    'GROUPING_CONNECTED',
    'GROUPING_MODES',
]
