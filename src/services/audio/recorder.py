"""Recorder controller: the single recording handle.

States: idle -> recording -> idle

``start()`` hands back a ``RecordingSession`` value and ``stop()`` takes it
back, so callers never share mutable recording flags with the controller.
"""

import logging
import threading
import time
import uuid
from collections.abc import Callable
from pathlib import Path

from src.core.exceptions import (
    DeviceUnavailableError,
    InvalidStateError,
    PermissionDeniedError,
    RecordingAlreadyActiveError,
)
from src.core.models import AudioFormat, RecordingSession, RecordingState
from src.services.audio.base import BaseCaptureBackend
from src.services.audio.monitor import AmplitudeMonitor

logger = logging.getLogger(__name__)


class RecorderController:
    """Owns one capture backend and allows at most one active session.

    Args:
        backend: Hardware capture implementation.
        recordings_dir: Directory receiving one file per session.
        audio_format: Container/codec pairing applied to every session.
        permission_granted: Result of the microphone permission request.
        poll_interval: Seconds between amplitude samples while recording.
        on_amplitude: Optional callback receiving each sampled level.
        clock: Time source for file naming (seconds since epoch).
    """

    def __init__(
        self,
        backend: BaseCaptureBackend,
        recordings_dir: str | Path,
        audio_format: AudioFormat,
        permission_granted: bool = True,
        poll_interval: float = 0.15,
        on_amplitude: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._recordings_dir = Path(recordings_dir)
        self._audio_format = audio_format
        self._permission_granted = permission_granted
        self._poll_interval = poll_interval
        self._on_amplitude = on_amplitude
        self._clock = clock
        self._lock = threading.Lock()
        self._session: RecordingSession | None = None
        self._monitor: AmplitudeMonitor | None = None
        self._last_path: Path | None = None

    # -- state --

    @property
    def state(self) -> RecordingState:
        return RecordingState.recording if self._session is not None else RecordingState.idle

    @property
    def active_session(self) -> RecordingSession | None:
        return self._session

    @property
    def audio_format(self) -> AudioFormat:
        return self._audio_format

    @property
    def amplitude(self) -> float:
        """Most recent sampled input level, 0.0 when idle."""
        monitor = self._monitor
        return monitor.latest if monitor is not None else 0.0

    @property
    def permission_granted(self) -> bool:
        return self._permission_granted

    def grant_permission(self, granted: bool = True) -> None:
        """Record the outcome of a (re-)requested microphone permission."""
        self._permission_granted = granted

    # -- lifecycle --

    def allocate_path(self) -> Path:
        """Return a fresh ``recording_<epoch-ms>.<ext>`` path in the recordings dir."""
        stamp = int(self._clock() * 1000)
        ext = self._audio_format.extension
        path = self._recordings_dir / f"recording_{stamp}.{ext}"
        suffix = 1
        while path.exists() or path == self._last_path:
            path = self._recordings_dir / f"recording_{stamp}_{suffix}.{ext}"
            suffix += 1
        self._last_path = path
        return path

    def start(self) -> RecordingSession:
        """Begin a new recording session.

        Raises:
            PermissionDeniedError: Microphone permission was not granted.
            RecordingAlreadyActiveError: A session is already active.
            DeviceUnavailableError: The backend could not be configured.
        """
        with self._lock:
            if not self._permission_granted:
                raise PermissionDeniedError()
            if self._session is not None:
                raise RecordingAlreadyActiveError()

            path = self.allocate_path()
            try:
                self._backend.start(path, self._audio_format)
            except DeviceUnavailableError as exc:
                logger.error("Failed to start recording to %s: %s", path, exc.detail)
                raise

            session = RecordingSession(
                session_id=uuid.uuid4().hex,
                file_path=path,
                audio_format=self._audio_format,
            )
            self._monitor = AmplitudeMonitor(
                self._backend.current_amplitude,
                interval=self._poll_interval,
                on_sample=self._on_amplitude,
            )
            self._monitor.start()
            self._session = session
            logger.info("Recording %s started: %s", session.session_id, path)
            return session

    def stop(self, session: RecordingSession) -> Path:
        """Finalize ``session`` and release the capture handle.

        Returns:
            Path of the finalized audio file.

        Raises:
            InvalidStateError: No session is active, or ``session`` is not it.
            DeviceUnavailableError: The audio file could not be finalized.
        """
        with self._lock:
            active = self._session
            if active is None:
                raise InvalidStateError()
            if session.session_id != active.session_id:
                raise InvalidStateError(
                    f"Recording {session.session_id} is not the active recording"
                )

            self._stop_monitor()
            try:
                path = self._backend.stop()
            finally:
                self._session = None
                active.active = False
                session.active = False

            logger.info("Recording %s finalized: %s", active.session_id, path)
            return path

    def release(self) -> None:
        """Tear down any active capture without raising (screen teardown)."""
        with self._lock:
            active = self._session
            if active is None:
                return
            self._stop_monitor()
            try:
                self._backend.stop()
            except DeviceUnavailableError as exc:
                logger.warning("Failed to release recorder: %s", exc.detail)
            finally:
                self._session = None
                active.active = False
            logger.info("Recording %s released on teardown", active.session_id)

    def _stop_monitor(self) -> None:
        monitor, self._monitor = self._monitor, None
        if monitor is not None:
            monitor.stop()
