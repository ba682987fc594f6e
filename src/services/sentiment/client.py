"""
Synchronous HTTP client for the remote sentiment-analysis API.

Uses ``httpx.Client`` (sync); the workflow runs it on a background worker
so the UI thread never blocks on the upload.
"""

import json
import logging
from pathlib import Path

import httpx

from src.core.config import get_settings
from src.core.exceptions import SentimentRequestError
from src.core.models import AUDIO_FORMATS

logger = logging.getLogger(__name__)


def extract_sentiment(body: object) -> str:
    """Return the ``sentiment`` field of a decoded JSON body.

    Anything other than a JSON object, or an object without a scalar
    ``sentiment`` value, yields an empty label.
    """
    if not isinstance(body, dict):
        return ""
    value = body.get("sentiment")
    if value is None or isinstance(value, dict | list):
        return ""
    if isinstance(value, str):
        return value
    # Non-string scalars keep their wire spelling ("true", "0.5")
    return json.dumps(value)


def guess_mime_type(file_path: str | Path) -> str:
    """Map a recording's extension to the MIME type of its audio format."""
    fmt = AUDIO_FORMATS.get(Path(file_path).suffix.lstrip(".").lower())
    return fmt.mime_type if fmt is not None else "application/octet-stream"


class SentimentClient:
    """Uploads one recording per call and reads back its sentiment label.

    Endpoint and bearer token default to ``Settings`` values. No retries
    and no timeout override: httpx defaults apply.
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            api_url: Sentiment endpoint; defaults to ``settings.sentiment_api_url``.
            api_key: Bearer token; defaults to ``settings.sentiment_api_key``.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
        """
        settings = get_settings()
        self._api_url = api_url or settings.sentiment_api_url
        self._api_key = api_key if api_key is not None else settings.sentiment_api_key
        self._client = httpx.Client(transport=transport)

    @property
    def api_url(self) -> str:
        return self._api_url

    def _upload(self, path: Path, mime_type: str) -> httpx.Response:
        """POST the file as multipart form data.

        Raises:
            SentimentRequestError: On unreadable file, transport fault or non-2xx status.
        """
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            with path.open("rb") as fh:
                resp = self._client.post(
                    self._api_url,
                    files={"file": (path.name, fh, mime_type)},
                    headers=headers,
                )
            resp.raise_for_status()
            return resp
        except httpx.TimeoutException:
            raise SentimentRequestError("Sentiment request timed out") from None
        except httpx.HTTPStatusError as exc:
            raise SentimentRequestError(
                f"{exc.response.status_code} - {exc.response.reason_phrase}",
                status_code=exc.response.status_code,
            ) from None
        except httpx.HTTPError as exc:
            raise SentimentRequestError(f"Network error: {exc}") from exc
        except OSError as exc:
            raise SentimentRequestError(f"Cannot read recording {path}: {exc}") from exc

    def analyze(self, file_path: str | Path, mime_type: str | None = None) -> str | None:
        """Upload a finished recording and return its sentiment label.

        Args:
            file_path: Finalized audio file.
            mime_type: Content type of the file part; guessed from the extension if omitted.

        Returns:
            The label (``""`` when the response carries none), or ``None`` when
            the request failed or the body was not JSON.
        """
        path = Path(file_path)
        try:
            resp = self._upload(path, mime_type or guess_mime_type(path))
        except SentimentRequestError as exc:
            logger.warning("Failed to analyze audio sentiment: %s", exc.detail)
            return None

        try:
            body = resp.json()
        except ValueError:
            logger.warning(
                "Failed to analyze audio sentiment: non-JSON response (%d bytes)",
                len(resp.content),
            )
            return None

        label = extract_sentiment(body)
        logger.info("Sentiment for %s: %r", path.name, label)
        return label

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SentimentClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
