"""Port interfaces for speech recognition backends."""

from typing import Protocol, runtime_checkable

from polyglai.domain.value_objects.transcription import TranscriptionResult


@runtime_checkable
class SpeechRecognitionBackend(Protocol):
    """A speech-to-text backend.

    Remote and local recognizers share this interface so the fallback
    composition does not care which one it talks to.
    """

    @property
    def requires_wav(self) -> bool:
        """Whether audio must be converted to WAV before ``transcribe``."""
        ...

    def is_available(self) -> bool:
        """Whether the backend can be used in this process."""
        ...

    async def transcribe(self, audio: bytes, mime_type: str, locale: str) -> TranscriptionResult:
        """Recognize speech in ``audio``.

        Args:
            audio: Raw encoded audio bytes
            mime_type: MIME type of ``audio``
            locale: Recognition locale (e.g. "en-US")

        Returns:
            TranscriptionResult (Success, NoMatch or Error)

        Raises:
            TranscriptionError: If the call fails outright
        """
        ...


class SpeechServiceError(Exception):
    """Base exception for speech service errors."""

    pass


class TranscriptionError(SpeechServiceError):
    """Raised when a recognition call fails.

    Carries the HTTP status and body for diagnostics; ``status_code`` is
    None for transport failures that never got a response.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class NoSpeechDetectedError(SpeechServiceError):
    """Raised when recognition completed but found no speech."""

    def __init__(self, message: str, mime_type: str = ""):
        self.mime_type = mime_type
        super().__init__(message)


class SpeechServiceNotConfiguredError(SpeechServiceError):
    """Raised when the speech service has no usable credentials."""

    pass
