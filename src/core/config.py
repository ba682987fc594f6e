"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SentiMic application settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        sentiment_api_url: Endpoint that receives the multipart audio upload.
        sentiment_api_key: Static bearer token sent with every upload.
        recordings_dir: Directory where finished recordings are written.
        audio_format: Container/codec scheme used for every recording.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Sentiment API ---
    sentiment_api_url: str = "https://api.whisper.ai/v1/sentiment"
    sentiment_api_key: str = ""  # Sent as "Authorization: Bearer <key>"

    # --- Audio capture ---
    recordings_dir: str = "data/recordings"  # Old recordings are never deleted
    audio_format: Literal["wav", "flac", "ogg"] = "wav"
    sample_rate: int = Field(default=16000, gt=0)  # 16 kHz is plenty for speech
    channels: int = Field(default=1, ge=1, le=2)
    amplitude_poll_interval: float = Field(default=0.15, ge=0.01, le=2.0)  # seconds

    # --- Application ---
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
