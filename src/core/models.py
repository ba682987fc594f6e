"""
Pydantic v2 models shared by the recorder, the sentiment client and the UI.
"""

from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


class RecordingState(StrEnum):
    """States of the single record button."""

    idle = "idle"
    recording = "recording"
    analyzing = "analyzing"


class AudioFormat(BaseModel):
    """Container/codec pairing used for both the file on disk and the upload."""

    model_config = ConfigDict(frozen=True)

    extension: str
    container: str  # libsndfile major format, e.g. "WAV"
    subtype: str  # libsndfile subtype (codec), e.g. "PCM_16"
    mime_type: str


AUDIO_FORMATS: dict[str, AudioFormat] = {
    "wav": AudioFormat(extension="wav", container="WAV", subtype="PCM_16", mime_type="audio/wav"),
    "flac": AudioFormat(extension="flac", container="FLAC", subtype="PCM_16", mime_type="audio/flac"),
    "ogg": AudioFormat(extension="ogg", container="OGG", subtype="VORBIS", mime_type="audio/ogg"),
}


class RecordingSession(BaseModel):
    """One contiguous record-to-stop interval producing exactly one file."""

    session_id: str
    file_path: Path
    audio_format: AudioFormat
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    active: bool = True


# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------


class SentimentResult(BaseModel):
    """Label returned by the sentiment API for one recording."""

    label: str = ""
    file_path: Path | None = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
