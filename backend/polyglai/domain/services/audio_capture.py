"""Audio capture service for the recording lifecycle."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from polyglai.domain.constants import MIN_RECORDING_DURATION_MS
from polyglai.domain.entities.recording import (
    RecordingHandle,
    RecordingSession,
    RecordingState,
)
from polyglai.domain.services.format_negotiator import FormatNegotiator
from polyglai.domain.value_objects.audio_format import FormatChoice, RuntimeCapabilities
from polyglai.ports.audio import (
    AudioInputPort,
    AudioInputStream,
    EmptyRecordingError,
    RecordingInProgressError,
    RecordingNotFoundError,
    RecordingTooShortError,
)

logger = logging.getLogger(__name__)


@dataclass
class _ActiveRecording:
    handle: RecordingHandle
    stream: AudioInputStream
    collector: asyncio.Task
    started: float


class AudioCapture:
    """Owns the single active recording.

    Responsibilities:
    - One recording at a time (a second start is rejected)
    - Buffering recorder chunks until stop
    - Releasing the input tracks on every exit path
    - Enforcing the minimum duration before anything is transcribed

    Only the raw bytes of the last stopped recording are retained (for
    playback); they are dropped when the next recording starts.
    """

    def __init__(
        self,
        audio_input: AudioInputPort,
        negotiator: FormatNegotiator,
        clock: Callable[[], float] = time.monotonic,
        min_duration_ms: int = MIN_RECORDING_DURATION_MS,
    ):
        """Initialize audio capture.

        Args:
            audio_input: Port that opens microphone streams
            negotiator: Picks the recording format
            clock: Monotonic clock in seconds (injected for tests)
            min_duration_ms: Shortest recording accepted
        """
        self._input = audio_input
        self._negotiator = negotiator
        self._clock = clock
        self._min_duration_ms = min_duration_ms
        self._active: _ActiveRecording | None = None
        self._last: RecordingSession | None = None
        self._lock = asyncio.Lock()

    @property
    def active_recording(self) -> RecordingHandle | None:
        return self._active.handle if self._active else None

    def select_format(self, capabilities: RuntimeCapabilities) -> FormatChoice:
        """Format the next recording would use."""
        return self._negotiator.select_recording_format(capabilities)

    async def start_recording(self, capabilities: RuntimeCapabilities) -> RecordingHandle:
        """Open the microphone and start buffering.

        Args:
            capabilities: What the client runtime can record

        Returns:
            Handle for the new recording

        Raises:
            RecordingInProgressError: If a recording is already active
            PermissionDeniedError: If microphone access is refused
        """
        async with self._lock:
            if self._active is not None:
                raise RecordingInProgressError(self._active.handle.id)

            format = self._negotiator.select_recording_format(capabilities)
            stream = await self._input.open(format, capabilities)

            self._last = None
            handle = RecordingHandle(format=format, started_at=datetime.now(UTC))
            collector = asyncio.create_task(self._collect(handle, stream))
            self._active = _ActiveRecording(
                handle=handle,
                stream=stream,
                collector=collector,
                started=self._clock(),
            )

        logger.info(f"Recording started: {handle.id} ({format.mime_type})")
        return handle

    async def stop_recording(self, recording_id: str, mime_type: str | None = None) -> RecordingSession:
        """Stop the active recording and seal it.

        The input tracks are released even if stopping fails or the caller
        is cancelled.

        Args:
            recording_id: Handle id returned by start_recording
            mime_type: Container the recorder actually produced, when it
                differs from the negotiated one (runtime default)

        Returns:
            Sealed RecordingSession

        Raises:
            RecordingNotFoundError: If the id is not the active recording
            RecordingTooShortError: If shorter than the minimum duration
            EmptyRecordingError: If no audio bytes were captured
        """
        active = self._require_active(recording_id)
        stopped = self._clock()
        try:
            await active.stream.stop()
            await active.collector
        finally:
            active.stream.release()
            if not active.collector.done():
                active.collector.cancel()
            self._active = None

        handle = active.handle
        handle.state = RecordingState.STOPPED
        duration_ms = max(0, round((stopped - active.started) * 1000))
        audio = b"".join(handle.chunks)

        if duration_ms < self._min_duration_ms:
            logger.info(f"Recording {handle.id} rejected: {duration_ms}ms")
            raise RecordingTooShortError(duration_ms, self._min_duration_ms)
        if not audio:
            raise EmptyRecordingError(f"Recording {handle.id} produced no audio")

        recorded_type = self._negotiator.resolve_mime_type(audio, mime_type or handle.format.mime_type)
        session = RecordingSession(
            encoded_audio=audio,
            mime_type=recorded_type,
            duration_ms=duration_ms,
            started_at=handle.started_at,
            recording_id=handle.id,
        )
        self._last = session
        logger.info(
            f"Recording stopped: {handle.id}",
            extra={"duration_ms": duration_ms, "size_bytes": session.size_bytes},
        )
        return session

    async def abandon(self, recording_id: str) -> None:
        """Drop the active recording without sealing it.

        Raises:
            RecordingNotFoundError: If the id is not the active recording
        """
        active = self._require_active(recording_id)
        try:
            active.collector.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await active.collector
        finally:
            active.stream.release()
            self._active = None

        active.handle.state = RecordingState.ABANDONED
        active.handle.chunks.clear()
        logger.info(f"Recording abandoned: {recording_id}")

    def last_recording(self, recording_id: str) -> RecordingSession | None:
        """Retained bytes of the last stopped recording, if the id matches."""
        if self._last is not None and self._last.recording_id == recording_id:
            return self._last
        return None

    def _require_active(self, recording_id: str) -> _ActiveRecording:
        if self._active is None or self._active.handle.id != recording_id:
            raise RecordingNotFoundError(f"No active recording {recording_id}")
        return self._active

    async def _collect(self, handle: RecordingHandle, stream: AudioInputStream) -> None:
        async for chunk in stream.chunks():
            if chunk:
                handle.chunks.append(chunk)
