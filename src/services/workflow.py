"""Single-button record/analyze workflow.

Drives the recorder controller and the sentiment client from one toggle:

    idle --press--> recording --press--> analyzing --(result)--> idle

The upload runs on a single-worker executor owned by the workflow, so its
lifetime is tied to the screen that owns the workflow. ``close()`` (or
garbage collection of the workflow) cancels pending work and releases the
recorder.

Usage::

    from src.services.workflow import create_workflow

    workflow = create_workflow(permission_granted=True)
    workflow.press()   # start recording
    workflow.press()   # stop, upload in the background
    workflow.wait()
    print(workflow.label)
"""

import logging
import threading
import weakref
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import partial
from pathlib import Path

from src.core.config import Settings, get_settings
from src.core.exceptions import (
    DeviceUnavailableError,
    InvalidStateError,
    PermissionDeniedError,
)
from src.core.models import AUDIO_FORMATS, RecordingSession, RecordingState, SentimentResult
from src.services.audio import RecorderController, create_backend
from src.services.sentiment import SentimentClient

logger = logging.getLogger(__name__)

BUTTON_LABELS = {
    RecordingState.idle: "Record Audio",
    RecordingState.recording: "Stop Recording",
    RecordingState.analyzing: "Record Audio",
}


def _shutdown(recorder: RecorderController, client: SentimentClient, executor: Executor) -> None:
    """Release everything a workflow owns. Must not reference the workflow itself."""
    recorder.release()
    executor.shutdown(wait=False, cancel_futures=True)
    client.close()


class RecordingWorkflow:
    """State machine behind the record button.

    Args:
        recorder: Controller owning the capture handle.
        client: Sentiment API client.
        executor: Runs uploads off the caller's thread; a private
            single-worker pool is created when omitted.
        on_result: Optional callback invoked (on the worker thread) with each
            new ``SentimentResult``.
    """

    def __init__(
        self,
        recorder: RecorderController,
        client: SentimentClient,
        executor: Executor | None = None,
        on_result: Callable[[SentimentResult], None] | None = None,
    ) -> None:
        self._recorder = recorder
        self._client = client
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="sentiment-upload"
        )
        self._on_result = on_result
        # Re-entrant: a done-callback may fire synchronously inside press()
        self._lock = threading.RLock()
        self._state = RecordingState.idle
        self._session: RecordingSession | None = None
        self._pending: Future | None = None
        self._idle = threading.Event()
        self._idle.set()
        self._result: SentimentResult | None = None
        self._last_error: str | None = None
        self._closed = False
        self._finalizer = weakref.finalize(self, _shutdown, recorder, client, self._executor)

    # -- state exposed to the UI --

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def result(self) -> SentimentResult | None:
        return self._result

    @property
    def label(self) -> str:
        return self._result.label if self._result is not None else ""

    @property
    def amplitude(self) -> float:
        return self._recorder.amplitude

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def session(self) -> RecordingSession | None:
        return self._session

    @property
    def button_label(self) -> str:
        return BUTTON_LABELS[self._state]

    @property
    def button_disabled(self) -> bool:
        return self._closed or self._state is RecordingState.analyzing

    @property
    def closed(self) -> bool:
        return self._closed

    # -- actions --

    def press(self) -> RecordingState:
        """Handle one button press and return the resulting state."""
        with self._lock:
            if self._closed:
                logger.warning("Ignoring press on a closed workflow")
            elif self._state is RecordingState.idle:
                self._begin_recording()
            elif self._state is RecordingState.recording:
                self._finish_recording()
            else:
                logger.info("Ignoring press while sentiment analysis is in flight")
            return self._state

    def _begin_recording(self) -> None:
        try:
            self._session = self._recorder.start()
        except (PermissionDeniedError, DeviceUnavailableError) as exc:
            logger.error("Cannot start recording: %s", exc.detail)
            self._last_error = exc.detail
            return
        self._last_error = None
        self._state = RecordingState.recording

    def _finish_recording(self) -> None:
        session, self._session = self._session, None
        try:
            path = self._recorder.stop(session)
        except (InvalidStateError, DeviceUnavailableError) as exc:
            logger.error("Cannot stop recording: %s", exc.detail)
            self._last_error = exc.detail
            self._state = RecordingState.idle
            return

        self._state = RecordingState.analyzing
        self._idle.clear()
        future = self._executor.submit(
            self._client.analyze, path, session.audio_format.mime_type
        )
        self._pending = future
        future.add_done_callback(partial(self._on_analysis_done, path))

    def _on_analysis_done(self, path: Path, future: Future) -> None:
        label: str | None = None
        if future.cancelled():
            logger.info("Sentiment analysis for %s cancelled", path.name)
        elif future.exception() is not None:
            logger.error(
                "Sentiment analysis for %s crashed", path.name, exc_info=future.exception()
            )
        else:
            label = future.result()

        result = None
        with self._lock:
            self._pending = None
            self._state = RecordingState.idle
            if label is not None:
                result = SentimentResult(label=label, file_path=path)
                self._result = result
        self._idle.set()

        if result is not None and self._on_result is not None:
            self._on_result(result)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until no analysis is in flight. Returns False on timeout."""
        return self._idle.wait(timeout)

    def close(self) -> None:
        """Cancel pending analysis and release the recorder (screen teardown)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = self._pending
            self._session = None
            if self._state is RecordingState.recording:
                self._state = RecordingState.idle
        if pending is not None:
            pending.cancel()
        self._finalizer()

    def __enter__(self) -> "RecordingWorkflow":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def create_workflow(
    permission_granted: bool,
    settings: Settings | None = None,
    on_result: Callable[[SentimentResult], None] | None = None,
) -> RecordingWorkflow:
    """Build a workflow wired to the PortAudio backend and the configured API."""
    settings = settings or get_settings()
    backend = create_backend(
        "sounddevice",
        sample_rate=settings.sample_rate,
        channels=settings.channels,
    )
    recorder = RecorderController(
        backend,
        recordings_dir=settings.recordings_dir,
        audio_format=AUDIO_FORMATS[settings.audio_format],
        permission_granted=permission_granted,
        poll_interval=settings.amplitude_poll_interval,
    )
    client = SentimentClient(
        api_url=settings.sentiment_api_url,
        api_key=settings.sentiment_api_key,
    )
    return RecordingWorkflow(recorder, client, on_result=on_result)
