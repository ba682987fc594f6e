"""Shared pytest fixtures for the SentiMic test suite.

Provides an in-memory capture backend, a synchronous executor, and
sample audio helpers used across unit and e2e tests.
"""

import struct
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

from src.core.config import get_settings
from src.core.exceptions import DeviceUnavailableError
from src.core.models import AUDIO_FORMATS, AudioFormat
from src.services.audio.base import BaseCaptureBackend
from src.services.audio.recorder import RecorderController

# ---------------------------------------------------------------------------
# Capture backend fake
# ---------------------------------------------------------------------------


class FakeCaptureBackend(BaseCaptureBackend):
    """Backend that writes a tiny placeholder file on stop.

    Refuses a second ``start`` while capturing, like a real device handle.
    """

    def __init__(self, level: float = 0.5, fail_start: bool = False) -> None:
        self.level = level
        self.fail_start = fail_start
        self.capturing = False
        self.started: list[Path] = []
        self.stopped: list[Path] = []
        self._path: Path | None = None

    def start(self, file_path: Path, audio_format: AudioFormat) -> None:
        if self.fail_start:
            raise DeviceUnavailableError("Cannot open input device: no microphone")
        if self.capturing:
            raise DeviceUnavailableError("Capture device is already in use")
        self.capturing = True
        self._path = Path(file_path)
        self.started.append(self._path)

    def stop(self) -> Path:
        if not self.capturing or self._path is None:
            raise DeviceUnavailableError("Capture is not running")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(b"RIFF\x00\x00\x00\x00WAVEfake")
        self.capturing = False
        self.stopped.append(self._path)
        return self._path

    def current_amplitude(self) -> float:
        return self.level


class ImmediateExecutor(Executor):
    """Runs submitted work inline so workflow tests are deterministic."""

    def submit(self, fn, /, *args, **kwargs):  # noqa: ANN001
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Make every test read settings fresh from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Recorder fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def backend():
    return FakeCaptureBackend()


@pytest.fixture
def wav_format():
    return AUDIO_FORMATS["wav"]


@pytest.fixture
def recorder(tmp_path, backend, wav_format):
    """RecorderController over the fake backend, writing into tmp_path."""
    controller = RecorderController(
        backend,
        recordings_dir=tmp_path / "recordings",
        audio_format=wav_format,
        permission_granted=True,
        poll_interval=0.01,
    )
    yield controller
    controller.release()


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono).

    Returns:
        bytes: Raw PCM audio data.
    """
    import math

    sample_rate = 16000
    duration = 1.0
    frequency = 440.0
    amplitude = 16000  # ~50% of max int16

    samples = []
    for i in range(int(sample_rate * duration)):
        value = int(amplitude * math.sin(2 * math.pi * frequency * i / sample_rate))
        samples.append(struct.pack("<h", value))
    return b"".join(samples)


@pytest.fixture
def sample_audio_path(tmp_path, sample_pcm_bytes):
    """Create a temporary ``recording_<ms>.wav`` file from sample PCM data.

    Returns:
        Path: Path to the temporary WAV file.
    """
    import wave

    wav_path = tmp_path / "recording_1700000000000.wav"
    with wave.open(str(wav_path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(sample_pcm_bytes)
    return wav_path
