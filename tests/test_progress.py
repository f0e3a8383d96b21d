"""
Tests for progress reporting and cancellation tokens.
"""

import threading
import time

import pytest

from dedupligator.cancellation import CancellationToken
from dedupligator.exceptions import ScanCancelledError
from dedupligator.progress import ProgressReporter


class TestProgressReporter:
    """Monotonic, clamped progress values."""

    def test_starts_at_zero(self):
        assert ProgressReporter().current == 0.0

    def test_ignores_lower_values(self):
        reporter = ProgressReporter()
        reporter.report(40)
        reporter.report(20)
        assert reporter.current == 40

    def test_clamps_to_range(self):
        reporter = ProgressReporter()
        reporter.report(-5)
        assert reporter.current == 0.0
        reporter.report(150)
        assert reporter.current == 100.0

    def test_report_phase(self):
        reporter = ProgressReporter()
        reporter.report_phase(0.1, 0.3, 1, 2)
        assert reporter.current == pytest.approx(25.0)

    def test_report_phase_empty_total_completes_phase(self):
        reporter = ProgressReporter()
        reporter.report_phase(0.1, 0.3, 0, 0)
        assert reporter.current == pytest.approx(40.0)

    def test_sink_receives_final_value(self):
        values = []
        reporter = ProgressReporter(values.append)
        for v in (10, 5, 30, 30, 70, 100):
            reporter.report(v)
        assert reporter.flush(timeout=5)
        assert values == sorted(values)
        assert values[-1] == 100
        assert len(values) == len(set(values))

    def test_concurrent_reports_stay_monotonic(self):
        values = []
        reporter = ProgressReporter(values.append)

        def worker(offset):
            for i in range(200):
                reporter.report((i * 4 + offset) / 8)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert reporter.flush(timeout=5)

        assert values == sorted(values)
        assert values[-1] == reporter.current

    def test_close_is_idempotent(self):
        reporter = ProgressReporter(lambda _v: None)
        reporter.close()
        reporter.close()
        assert reporter.flush(timeout=5)

    def test_flush_without_sink(self):
        assert ProgressReporter().flush(timeout=0)

    def test_close_does_not_wait_for_slow_sink(self):
        release = threading.Event()
        values = []

        def slow_sink(value):
            release.wait(5)
            values.append(value)

        reporter = ProgressReporter(slow_sink)
        reporter.report(40)
        reporter.report(100)
        start = time.monotonic()
        reporter.close()
        assert time.monotonic() - start < 1.0

        release.set()
        assert reporter.flush(timeout=5)
        assert values[-1] == 100

    def test_flush_times_out_on_stuck_sink(self):
        release = threading.Event()
        reporter = ProgressReporter(lambda _v: release.wait(5))
        reporter.report(50)
        try:
            assert not reporter.flush(timeout=0.05)
        finally:
            release.set()
        assert reporter.flush(timeout=5)

    def test_sink_errors_are_logged(self, caplog):
        def sink(_value):
            raise RuntimeError("broken sink")

        reporter = ProgressReporter(sink)
        with caplog.at_level("WARNING"):
            reporter.report(50)
            reporter.flush(timeout=5)
        assert "broken sink" in caplog.text


class TestCancellationToken:
    """Cancellation flag."""

    def test_initial_state(self):
        token = CancellationToken()
        assert not token.cancel_requested
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancel_requested
        with pytest.raises(ScanCancelledError):
            token.raise_if_cancelled()

    def test_cancel_from_other_thread(self):
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()
        assert token.cancel_requested
