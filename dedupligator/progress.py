"""
Progress reporting for the duplicate finder.

Workers publish percentages without ever waiting on the caller's sink: values
go into a queue that a background thread drains and forwards. Stale values are
coalesced, so a slow sink only sees the latest percentage, and the values it
does see never decrease.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

_STOP = object()


class ProgressReporter:
    """
    Forwards monotonic, clamped percentages in ``[0, 100]`` to a sink.

    ``report`` is safe to call from any worker thread and never blocks on the
    sink. ``close`` stops the dispatcher without waiting for it; ``flush`` waits.
    """

    def __init__(self, sink: Optional[ProgressCallback] = None):
        self._sink = sink
        self._lock = threading.Lock()
        self._highest = 0.0
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        if sink is not None:
            self._thread = threading.Thread(
                target=self._dispatch, name="progress-dispatcher", daemon=True
            )
            self._thread.start()

    @property
    def current(self) -> float:
        """Highest percentage reported so far."""
        with self._lock:
            return self._highest

    def report(self, percent: float) -> None:
        """Publish ``percent``; values below the current maximum are ignored."""
        percent = min(max(percent, 0.0), 100.0)
        with self._lock:
            if percent <= self._highest:
                return
            self._highest = percent
        if self._sink is not None:
            self._queue.put(percent)

    def report_phase(self, start: float, weight: float, done: int, total: int) -> None:
        """Report ``done / total`` of a phase spanning ``weight`` from ``start`` (fractions of 1)."""
        if total <= 0:
            fraction = 1.0
        else:
            fraction = done / total
        self.report((start + weight * fraction) * 100)

    def close(self) -> None:
        """
        Stop the dispatcher once the queued values are delivered.

        Returns immediately; the daemon dispatcher delivers the final value
        on its own. Use ``flush`` to wait for it.
        """
        if self._thread is None or self._closed:
            return
        self._queue.put(_STOP)
        self._closed = True

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait up to ``timeout`` seconds for the dispatcher to deliver everything.

        Closes the reporter if it is still open.

        Returns:
            True if the sink has received the final value
        """
        if self._thread is None:
            return True
        self.close()
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _dispatch(self) -> None:
        delivered = -1.0
        while True:
            item = self._queue.get()
            stop = item is _STOP
            latest = None if stop else item
            # Coalesce everything already queued; keep only the highest value
            while True:
                try:
                    pending = self._queue.get_nowait()
                except queue.Empty:
                    break
                if pending is _STOP:
                    stop = True
                elif latest is None or pending > latest:
                    latest = pending
            if latest is not None and latest > delivered:
                try:
                    self._sink(latest)
                except Exception as e:
                    logger.warning(f"Progress callback raised: {e}")
                delivered = latest
            if stop:
                return


__all__ = ['ProgressReporter', 'ProgressCallback']
