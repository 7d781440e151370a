"""Port interfaces for audio input and audio codecs."""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from polyglai.domain.value_objects.audio_format import FormatChoice, RuntimeCapabilities


@runtime_checkable
class AudioInputStream(Protocol):
    """An open microphone stream producing encoded recorder chunks."""

    def chunks(self) -> AsyncIterator[bytes]:
        """Yield encoded chunks until the recorder stops."""
        ...

    async def stop(self) -> None:
        """Stop the recorder; ``chunks()`` ends after the final chunk."""
        ...

    def release(self) -> None:
        """Release the underlying input tracks. Safe to call twice."""
        ...


@runtime_checkable
class AudioInputPort(Protocol):
    """Source of microphone streams.

    Only one stream may be open at a time; the microphone is a single
    shared device.
    """

    async def open(self, format: FormatChoice, capabilities: RuntimeCapabilities) -> AudioInputStream:
        """Request microphone access and start recording.

        Args:
            format: Container/codec to record in
            capabilities: Runtime report, including the permission state

        Raises:
            PermissionDeniedError: If the user or OS refuses access
        """
        ...


@runtime_checkable
class AudioCodecPort(Protocol):
    """Decoder/encoder producing canonical 16-bit PCM WAV."""

    def to_wav(self, data: bytes) -> bytes:
        """Decode ``data`` and re-encode it as 16-bit PCM WAV.

        Raises:
            AudioDecodeError: If the input cannot be decoded
        """
        ...


class AudioCaptureError(Exception):
    """Base exception for recording failures."""

    pass


class PermissionDeniedError(AudioCaptureError):
    """Raised when microphone access is refused."""

    pass


class RecordingTooShortError(AudioCaptureError):
    """Raised when a recording is shorter than the minimum duration."""

    def __init__(self, duration_ms: int, minimum_ms: int):
        self.duration_ms = duration_ms
        self.minimum_ms = minimum_ms
        super().__init__(f"Recording lasted {duration_ms}ms, minimum is {minimum_ms}ms")


class EmptyRecordingError(AudioCaptureError):
    """Raised when a recording produced no audio bytes."""

    pass


class RecordingInProgressError(AudioCaptureError):
    """Raised when starting a recording while another is active."""

    def __init__(self, active_recording_id: str):
        self.active_recording_id = active_recording_id
        super().__init__(f"Recording {active_recording_id} already in progress")


class RecordingNotFoundError(AudioCaptureError):
    """Raised when a recording id is unknown or no longer active."""

    pass


class AudioDecodeError(Exception):
    """Raised when audio cannot be decoded to PCM."""

    pass
