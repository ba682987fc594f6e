"""
Audio module - Microphone capture and recording control.

Factory function for creating the capture backend used by the recorder.
"""

from .base import BaseCaptureBackend
from .monitor import AmplitudeMonitor
from .recorder import RecorderController

__all__ = [
    "AmplitudeMonitor",
    "BaseCaptureBackend",
    "RecorderController",
    "create_backend",
    "request_microphone_permission",
]


def create_backend(provider: str = "sounddevice", **kwargs) -> BaseCaptureBackend:
    """Factory function to create a capture backend instance.

    Args:
        provider: Backend name ("sounddevice")
        **kwargs: Backend-specific configuration (sample_rate, channels, device)

    Returns:
        BaseCaptureBackend implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "sounddevice":
        from .backend import SoundDeviceBackend

        return SoundDeviceBackend(**kwargs)
    else:
        raise ValueError(f"Unknown capture backend: {provider}")


def request_microphone_permission(**kwargs) -> bool:
    """Probe microphone access; see ``backend.request_microphone_permission``."""
    from .backend import request_microphone_permission as _request

    return _request(**kwargs)
