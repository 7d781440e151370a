"""Audio input fed by the browser's MediaRecorder over HTTP.

The browser owns the physical microphone. It reports its permission state
when a recording starts and then posts each ``dataavailable`` chunk; this
adapter turns those posts into the AudioInputStream the capture service
reads from.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from polyglai.domain.constants import FeedbackMessages
from polyglai.domain.value_objects.audio_format import FormatChoice, RuntimeCapabilities
from polyglai.ports.audio import PermissionDeniedError, RecordingNotFoundError

logger = logging.getLogger(__name__)


class UploadedAudioStream:
    """Queue-backed stream of uploaded recorder chunks."""

    def __init__(self, format: FormatChoice) -> None:
        self.format = format
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._stopped = False
        self._released = False

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def is_released(self) -> bool:
        return self._released

    def push(self, chunk: bytes) -> None:
        if self._stopped:
            raise RecordingNotFoundError("Recording already stopped")
        self._queue.put_nowait(chunk)

    async def chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk

    async def stop(self) -> None:
        if not self._stopped:
            self._stopped = True
            # End-of-stream marker, queued after every pushed chunk
            self._queue.put_nowait(None)

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._stopped = True
            logger.debug("Uploaded audio stream released")


class UploadedAudioInput:
    """AudioInputPort implementation for browser-recorded audio."""

    def __init__(self) -> None:
        self._stream: UploadedAudioStream | None = None

    @property
    def current_stream(self) -> UploadedAudioStream | None:
        return self._stream

    async def open(self, format: FormatChoice, capabilities: RuntimeCapabilities) -> UploadedAudioStream:
        """Open a stream for a new recording.

        Raises:
            PermissionDeniedError: If the browser reported a denied microphone
        """
        if capabilities.permission_denied:
            raise PermissionDeniedError(FeedbackMessages.PERMISSION_DENIED)
        self._stream = UploadedAudioStream(format)
        return self._stream

    def push_chunk(self, chunk: bytes) -> int:
        """Append an uploaded chunk to the open stream.

        Returns:
            Size of the accepted chunk

        Raises:
            RecordingNotFoundError: If no stream is open or it was stopped
        """
        if self._stream is None or self._stream.is_stopped:
            raise RecordingNotFoundError("No open audio stream")
        self._stream.push(chunk)
        return len(chunk)
