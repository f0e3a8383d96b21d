"""
Parallel processing module for the scanner package.

Provides a bounded worker-pool map with cooperative cancellation and progress
callbacks, shared by directory enumeration, grouping-key computation and
per-group comparison.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence, TypeVar

from ..cancellation import CancellationToken
from ..config import DEFAULT_WORKERS

T = TypeVar('T')
R = TypeVar('R')


def _run_unit(
    func: Callable[[T], R],
    item: T,
    cancel_token: Optional[CancellationToken],
) -> R:
    # Work that was queued before a cancel is skipped, not started
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()
    return func(item)


def map_parallel(
    func: Callable[[T], R],
    items: Sequence[T],
    max_workers: int = DEFAULT_WORKERS,
    cancel_token: Optional[CancellationToken] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> list[R]:
    """
    Apply ``func`` to every item using at most ``max_workers`` threads.

    Args:
        func: Function applied to each item
        items: Work items
        max_workers: Number of parallel workers
        cancel_token: Optional token checked before each unit of work starts
        progress_callback: Optional callback(completed, total) after each unit

    Returns:
        Results in the same order as ``items``

    Raises:
        ScanCancelledError: If the token was cancelled; pending units are dropped
        Exception: The first exception raised by ``func`` is re-raised
    """
    total = len(items)
    results: list = [None] * total
    if total == 0:
        return results

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {
            executor.submit(_run_unit, func, item, cancel_token): index
            for index, item in enumerate(items)
        }
        try:
            for completed, future in enumerate(as_completed(futures), 1):
                results[futures[future]] = future.result()
                if progress_callback:
                    progress_callback(completed, total)
        except BaseException as e:
            # Ctrl-C also stops units that are already running
            if isinstance(e, KeyboardInterrupt) and cancel_token is not None:
                cancel_token.cancel()
            for future in futures:
                future.cancel()
            raise

    return results


__all__ = ['map_parallel']
