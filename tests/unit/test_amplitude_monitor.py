"""Tests for AmplitudeMonitor (periodic level sampling)."""

import logging
import time

import pytest

from src.services.audio.monitor import AmplitudeMonitor


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


class TestSampling:
    def test_samples_at_interval(self):
        monitor = AmplitudeMonitor(lambda: 0.25, interval=0.01)
        monitor.start()
        try:
            assert _wait_for(lambda: monitor.samples >= 3)
        finally:
            monitor.stop()

        assert monitor.peak == pytest.approx(0.25)
        assert monitor.running is False

    def test_sample_rate_is_bounded(self):
        """Sampling waits between reads instead of spinning."""
        calls = []
        monitor = AmplitudeMonitor(lambda: calls.append(1) or 0.1, interval=0.05)
        monitor.start()
        time.sleep(0.3)
        monitor.stop()

        assert 1 <= len(calls) <= 8

    def test_levels_are_clamped(self):
        levels = iter([1.7, -0.3])
        seen = []
        monitor = AmplitudeMonitor(lambda: next(levels, 0.0), interval=0.01, on_sample=seen.append)
        monitor.start()
        assert _wait_for(lambda: len(seen) >= 2)
        monitor.stop()

        assert seen[:2] == [1.0, 0.0]
        assert monitor.peak == 1.0

    def test_latest_resets_on_stop(self):
        monitor = AmplitudeMonitor(lambda: 0.6, interval=0.01)
        monitor.start()
        assert _wait_for(lambda: monitor.latest > 0)

        monitor.stop()

        assert monitor.latest == 0.0
        assert monitor.peak == pytest.approx(0.6)


class TestLifecycle:
    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            AmplitudeMonitor(lambda: 0.0, interval=0)

    def test_start_twice_is_noop(self):
        monitor = AmplitudeMonitor(lambda: 0.1, interval=0.01)
        monitor.start()
        monitor.start()
        assert monitor.running is True
        monitor.stop()
        assert monitor.running is False

    def test_stop_returns_promptly(self):
        monitor = AmplitudeMonitor(lambda: 0.1, interval=1.0)
        monitor.start()

        started = time.monotonic()
        monitor.stop()

        assert time.monotonic() - started < 0.5

    def test_read_error_stops_monitor(self, caplog):
        def broken():
            raise RuntimeError("device gone")

        monitor = AmplitudeMonitor(broken, interval=0.01)
        with caplog.at_level(logging.ERROR):
            monitor.start()
            assert _wait_for(lambda: not monitor.running)
        monitor.stop()

        assert monitor.samples == 0
        assert "Amplitude sampling failed" in caplog.text
