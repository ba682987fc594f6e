"""Periodic amplitude sampling while a recording is active.

Reads the capture backend's level every ``interval`` seconds on a daemon
thread. Waiting on the stop event between samples keeps the loop idle
between reads and lets ``stop()`` return within one interval.
"""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AmplitudeMonitor:
    """Samples an input level at a fixed interval.

    Args:
        read_level: Callable returning the current level in ``[0.0, 1.0]``.
        interval: Seconds between samples.
        on_sample: Optional callback invoked with every sampled level.
    """

    def __init__(
        self,
        read_level: Callable[[], float],
        interval: float = 0.15,
        on_sample: Callable[[float], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._read_level = read_level
        self._interval = interval
        self._on_sample = on_sample
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._latest = 0.0
        self._peak = 0.0
        self._samples = 0

    @property
    def latest(self) -> float:
        return self._latest

    @property
    def peak(self) -> float:
        return self._peak

    @property
    def samples(self) -> int:
        return self._samples

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Launch the sampling thread (no-op if already running)."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sampling_loop, name="amplitude-monitor", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit and wait for the thread to finish."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self._interval * 4)
        self._latest = 0.0

    def _sampling_loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                level = min(max(float(self._read_level()), 0.0), 1.0)
                self._latest = level
                self._peak = max(self._peak, level)
                self._samples += 1
                if self._on_sample is not None:
                    self._on_sample(level)
            except Exception:
                logger.exception("Amplitude sampling failed; monitor stopped")
                return
