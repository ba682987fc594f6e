"""PortAudio capture backend.

Streams microphone input through ``sounddevice`` and encodes it on the fly
with ``soundfile`` so the file is complete as soon as ``stop()`` returns.
"""

import logging
import threading
from pathlib import Path

import numpy as np
import sounddevice as sd
import soundfile as sf

from src.core.exceptions import DeviceUnavailableError
from src.core.models import AudioFormat
from src.services.audio.base import BaseCaptureBackend

logger = logging.getLogger(__name__)


def request_microphone_permission(
    sample_rate: int = 16000,
    channels: int = 1,
    device: int | str | None = None,
) -> bool:
    """Check that the default (or given) input device can be opened.

    Desktop platforms surface a denied microphone permission as a PortAudio
    error when the input device is checked, so a failed check counts as denial.
    """
    try:
        sd.check_input_settings(device=device, channels=channels, samplerate=sample_rate)
    except (sd.PortAudioError, ValueError) as exc:
        logger.warning("Microphone is not accessible: %s", exc)
        return False
    return True


class SoundDeviceBackend(BaseCaptureBackend):
    """Records one file at a time from a PortAudio input stream."""

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        device: int | str | None = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._device = device
        self._stream: sd.InputStream | None = None
        self._file: sf.SoundFile | None = None
        self._file_path: Path | None = None
        self._peak = 0.0
        self._lock = threading.Lock()

    @property
    def is_capturing(self) -> bool:
        return self._stream is not None

    def start(self, file_path: Path, audio_format: AudioFormat) -> None:
        if self._stream is not None:
            raise DeviceUnavailableError("Capture device is already in use")

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._file = sf.SoundFile(
                str(path),
                mode="w",
                samplerate=self._sample_rate,
                channels=self._channels,
                format=audio_format.container,
                subtype=audio_format.subtype,
            )
        except (sf.LibsndfileError, RuntimeError, OSError) as exc:
            raise DeviceUnavailableError(
                f"Cannot create {audio_format.container}/{audio_format.subtype} file {path}: {exc}"
            ) from exc

        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="float32",
                device=self._device,
                callback=self._on_audio,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as exc:
            self._file.close()
            self._file = None
            path.unlink(missing_ok=True)
            raise DeviceUnavailableError(f"Cannot open input device: {exc}") from exc

        self._stream = stream
        self._file_path = path
        self._peak = 0.0
        logger.debug("Capture started: %s (%d Hz, %d ch)", path, self._sample_rate, self._channels)

    def _on_audio(self, indata: np.ndarray, frames: int, time_info, status) -> None:  # noqa: ANN001
        """PortAudio callback: append the block to the file and track the peak."""
        if status:
            logger.debug("Input stream status: %s", status)
        if self._file is None or frames == 0:
            return
        self._file.write(indata)
        peak = float(np.max(np.abs(indata)))
        with self._lock:
            if peak > self._peak:
                self._peak = peak

    def stop(self) -> Path:
        if self._stream is None or self._file_path is None:
            raise DeviceUnavailableError("Capture is not running")

        stream, self._stream = self._stream, None
        path, self._file_path = self._file_path, None
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as exc:
            logger.warning("Error while closing input stream: %s", exc)
        finally:
            sound_file, self._file = self._file, None
            with self._lock:
                self._peak = 0.0

        if sound_file is not None:
            try:
                sound_file.close()
            except (sf.LibsndfileError, RuntimeError, OSError) as exc:
                raise DeviceUnavailableError(f"Cannot finalize recording {path}: {exc}") from exc

        logger.debug("Capture finalized: %s", path)
        return path

    def current_amplitude(self) -> float:
        with self._lock:
            level, self._peak = self._peak, 0.0
        return min(level, 1.0)
