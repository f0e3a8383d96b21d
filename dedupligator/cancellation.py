"""
Cooperative cancellation for long-running scans.

The caller keeps a CancellationToken and calls ``cancel()`` from any thread;
the finder polls it between directories, files and comparison pairs.
"""

from __future__ import annotations

import threading

from .exceptions import ScanCancelledError


class CancellationToken:
    """Thread-safe cancellation flag."""

    def __init__(self):
        self._cancel_requested = False
        self._lock = threading.Lock()

    @property
    def cancel_requested(self) -> bool:
        """Check if cancel has been requested."""
        with self._lock:
            return self._cancel_requested

    def cancel(self):
        """Request cancellation of the current scan."""
        with self._lock:
            self._cancel_requested = True

    def raise_if_cancelled(self):
        """Raise ScanCancelledError if cancellation was requested."""
        if self.cancel_requested:
            raise ScanCancelledError()


__all__ = ['CancellationToken']
