"""
SentiMic exception hierarchy.

All application-specific exceptions inherit from SentiMicError,
so the UI layer can catch one type and show ``detail`` to the user.
"""

from datetime import UTC, datetime


class SentiMicError(Exception):
    """Base exception for all SentiMic errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "SENTIMIC_ERROR",
    ) -> None:
        self.detail = detail
        self.code = code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class PermissionDeniedError(SentiMicError):
    """Raised when microphone access has not been granted."""

    def __init__(self, detail: str = "Microphone permission was not granted") -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED")


class DeviceUnavailableError(SentiMicError):
    """Raised when the capture device cannot be opened or configured."""

    def __init__(self, detail: str = "Audio capture device is unavailable") -> None:
        super().__init__(detail=detail, code="DEVICE_UNAVAILABLE")


class RecordingAlreadyActiveError(SentiMicError):
    """Raised when trying to start a recording while one is already active."""

    def __init__(self) -> None:
        super().__init__(
            detail="A recording is already active",
            code="RECORDING_ALREADY_ACTIVE",
        )


class InvalidStateError(SentiMicError):
    """Raised when stopping without a matching active recording."""

    def __init__(self, detail: str = "No recording is active") -> None:
        super().__init__(detail=detail, code="INVALID_STATE")


class SentimentRequestError(SentiMicError):
    """Raised when the sentiment API call fails (transport or HTTP status)."""

    def __init__(self, detail: str = "Sentiment request failed", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail=detail, code="SENTIMENT_REQUEST_FAILED")
