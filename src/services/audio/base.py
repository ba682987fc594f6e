"""
Abstract base class for audio capture backends.

The recorder controller only talks to this interface, so the hardware
layer can be swapped (PortAudio in production, an in-memory fake in tests).
"""

from abc import ABC, abstractmethod
from pathlib import Path

from src.core.models import AudioFormat


class BaseCaptureBackend(ABC):
    """Interface that every capture backend must implement."""

    @abstractmethod
    def start(self, file_path: Path, audio_format: AudioFormat) -> None:
        """Open the input device and begin writing audio to ``file_path``.

        Args:
            file_path: Destination file, created (or truncated) by the backend.
            audio_format: Container/codec pairing to encode with.

        Raises:
            DeviceUnavailableError: If the device or encoder cannot be configured.
        """

    @abstractmethod
    def stop(self) -> Path:
        """Halt capture, finalize the file and release the device.

        Returns:
            Path of the finalized audio file.
        """

    @abstractmethod
    def current_amplitude(self) -> float:
        """Peak input level in ``[0.0, 1.0]`` since the previous call."""
