"""
CLI workflow orchestration for Dedupligator.

Provides the CLIOrchestrator class that coordinates the entire CLI scanning
workflow from argument parsing through final reporting.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..cancellation import CancellationToken
from ..exceptions import InvalidInputError, ModelInitializationError, ScanCancelledError
from ..finder import DuplicateFinder
from ..scanner.dependencies import HAS_TQDM, _tqdm_class, set_max_image_pixels
from ..strategies import StrategyFactory, StrategyKind
from ..user_config import get_user_config
from ..utils.exporters import export_results
from ..utils.validators import (
    normalize_directory_path,
    validate_similarity,
    validate_threshold,
    validate_workers,
)
from .arg_parser import parse_arguments
from .reporting import print_duplicate_report, sort_groups

# Exit code for a run interrupted with Ctrl-C
EXIT_INTERRUPTED = 130

# Seconds to wait for the progress bar to draw its final value
PROGRESS_FLUSH_TIMEOUT = 2.0


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose (DEBUG level) logging

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


class _ProgressBar:
    """Progress sink that drives a 0-100 tqdm bar."""

    def __init__(self):
        self._bar = _tqdm_class(total=100, desc="Finding duplicates", unit="%",
                                bar_format="{l_bar}{bar}| {n:.0f}/{total:.0f}%")

    def __call__(self, percent: float) -> None:
        self._bar.n = percent
        self._bar.refresh()

    def close(self) -> None:
        self._bar.close()


class CLIOrchestrator:
    """
    Orchestrates the CLI scanning workflow.

    Manages the complete lifecycle from argument parsing through duplicate
    detection, reporting and export.
    """

    def __init__(self, argv=None):
        """Initialize the orchestrator."""
        self.argv = argv
        self.logger = None
        self.args = None
        self.directory: Optional[str] = None
        self.kind: Optional[StrategyKind] = None
        self.threshold = None
        self.workers = None
        self.cache_capacity = None
        self.model_path = None
        self.groups = []
        self.finder: Optional[DuplicateFinder] = None
        self.token = CancellationToken()

    def run(self) -> int:
        """
        Execute the complete CLI workflow.

        Returns:
            Exit code (0 for success, 1 for error, 130 when interrupted)

        Workflow phases:
        1. Setup & argument parsing
        2. Validation
        3. Detection
        4. Reporting & export
        """
        # Phase 1: Setup
        self._setup_phase()

        # Phase 2: Validation
        exit_code = self._validate_phase()
        if exit_code != 0:
            return exit_code

        # Phase 3: Detection
        start = time.monotonic()
        exit_code = self._detect_phase()
        if exit_code != 0:
            return exit_code
        elapsed = time.monotonic() - start

        # Phase 4: Reporting
        return self._report_phase(elapsed)

    def _setup_phase(self) -> None:
        """Phase 1: Parse arguments and setup logging."""
        self.args = parse_arguments(self.argv)
        self.logger = setup_logging(self.args.verbose)

    def _validate_phase(self) -> int:
        """
        Phase 2: Resolve defaults from the user configuration and validate them.

        Returns:
            0 for success, 1 for validation error
        """
        config = get_user_config()

        try:
            self.directory = normalize_directory_path(self.args.directory)
        except InvalidInputError as e:
            self.logger.error(str(e))
            return 1

        try:
            self.kind = StrategyKind.parse(self.args.strategy or config.default_strategy)
        except InvalidInputError as e:
            self.logger.error(str(e))
            return 1

        if self.kind is StrategyKind.PERCEPTUAL:
            threshold = self.args.threshold
            if threshold is None:
                threshold = config.default_threshold
            is_valid, error = validate_threshold(threshold)
            self.threshold = int(threshold) if is_valid else None
        elif self.kind is StrategyKind.NEURAL:
            threshold = self.args.similarity
            if threshold is None:
                threshold = config.default_neural_threshold
            is_valid, error = validate_similarity(threshold)
            self.threshold = float(threshold) if is_valid else None
        else:
            is_valid, error = True, ""
        if not is_valid:
            self.logger.error(error)
            return 1

        workers = self.args.workers if self.args.workers is not None else config.default_workers
        is_valid, error = validate_workers(workers)
        if not is_valid:
            self.logger.error(error)
            return 1
        self.workers = int(workers)

        self.cache_capacity = (self.args.cache_capacity
                               if self.args.cache_capacity is not None
                               else config.cache_capacity)
        if int(self.cache_capacity) < 1:
            self.logger.error("Cache capacity must be at least 1")
            return 1

        self.model_path = self.args.model or config.model_path
        set_max_image_pixels(config.max_image_pixels)
        return 0

    def _make_progress_sink(self) -> Optional[_ProgressBar]:
        if self.args.no_progress:
            return None
        if not HAS_TQDM:
            self.logger.debug("tqdm not installed; progress bar disabled")
            return None
        return _ProgressBar()

    def _detect_phase(self) -> int:
        """
        Phase 3: Build the strategy and run the finder.

        Returns:
            0 for success, 1 for a fatal error, 130 when interrupted
        """
        self.logger.info(f"Strategy: {self.kind.value}"
                         + (f" (threshold={self.threshold})" if self.threshold is not None else ""))
        factory = StrategyFactory(cache_capacity=int(self.cache_capacity),
                                  model_path=self.model_path)
        sink = None
        try:
            strategy = factory.create(self.kind, self.threshold)
            self.finder = DuplicateFinder(strategy, max_workers=self.workers,
                                          grouping=self.args.grouping)
            sink = self._make_progress_sink()
            self.groups = self.finder.find_duplicates(
                self.directory, progress=sink, cancel_token=self.token
            )
        except KeyboardInterrupt:
            self.token.cancel()
            self.logger.warning("Interrupted by user")
            return EXIT_INTERRUPTED
        except ScanCancelledError:
            self.logger.warning("Scan cancelled")
            return EXIT_INTERRUPTED
        except (InvalidInputError, ModelInitializationError) as e:
            self.logger.error(str(e))
            return 1
        finally:
            if sink is not None:
                if self.finder is not None and not self.finder.flush_progress(PROGRESS_FLUSH_TIMEOUT):
                    self.logger.debug("Progress bar did not catch up before closing")
                sink.close()
            factory.clear_caches()
            factory.close()
        return 0

    def _report_phase(self, elapsed: float) -> int:
        """Phase 4: Display the report and handle exports."""
        self.groups = sort_groups(self.groups)
        print_duplicate_report(self.groups, self.kind.value, self.finder.stats, elapsed)

        if self.args.export:
            try:
                export_results(self.groups, self.args.export, self.args.export_format)
            except OSError as e:
                self.logger.error(f"Failed to export results: {e}")
                return 1
            self.logger.info(f"Results exported to: {self.args.export}")
        return 0


__all__ = ['CLIOrchestrator', 'setup_logging', 'EXIT_INTERRUPTED']
