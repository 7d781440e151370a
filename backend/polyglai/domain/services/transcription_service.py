"""
Transcription Service.

Composes the remote recognizer with an optional local fallback. The remote
backend is always tried first; the fallback only runs when the remote
yields no usable text or fails outright, and is bounded by a hard timeout
with no retries.
"""

import asyncio
import logging
import time

from polyglai.domain.constants import LOCAL_FALLBACK_TIMEOUT_SECONDS, FeedbackMessages
from polyglai.domain.entities.recording import RecordingSession
from polyglai.domain.services.format_negotiator import FormatNegotiator
from polyglai.domain.value_objects.transcription import (
    RecognitionStatus,
    TranscriptionResult,
)
from polyglai.ports.speech import (
    NoSpeechDetectedError,
    SpeechRecognitionBackend,
    SpeechServiceNotConfiguredError,
    TranscriptionError,
)

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Fallback decorator over two speech recognition backends."""

    def __init__(
        self,
        remote: SpeechRecognitionBackend,
        negotiator: FormatNegotiator,
        fallback: SpeechRecognitionBackend | None = None,
        fallback_timeout_seconds: float = LOCAL_FALLBACK_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize transcription service.

        Args:
            remote: Primary backend (Azure)
            negotiator: Converts audio to what each backend accepts
            fallback: In-process backend tried when the remote gives no text
            fallback_timeout_seconds: Hard limit on the fallback attempt
        """
        self._remote = remote
        self._negotiator = negotiator
        self._fallback = fallback
        self._fallback_timeout = fallback_timeout_seconds

    @property
    def fallback_available(self) -> bool:
        return self._fallback is not None and self._fallback.is_available()

    async def transcribe(self, session: RecordingSession, locale: str) -> TranscriptionResult:
        """Transcribe a sealed recording.

        Args:
            session: Recording to transcribe (consumed, not retained)
            locale: Recognition locale (e.g. "en-US")

        Returns:
            A successful TranscriptionResult

        Raises:
            NoSpeechDetectedError: Recognition completed but found no speech
            TranscriptionError: The remote call or the fallback failed and nothing succeeded
            SpeechServiceNotConfiguredError: No backend is usable
        """
        start_time = time.time()
        remote_result: TranscriptionResult | None = None
        remote_error: TranscriptionError | None = None

        if self._remote.is_available():
            prepared = self._negotiator.prepare_for_backend(session, self._remote.requires_wav)
            try:
                remote_result = await self._remote.transcribe(
                    prepared.encoded_audio, prepared.mime_type, locale
                )
            except TranscriptionError as e:
                logger.warning(f"Remote transcription failed: {e} (status={e.status_code})")
                remote_error = e
            else:
                if remote_result.is_success:
                    self._log_transcription(session, remote_result, start_time)
                    return remote_result
                logger.info(f"Remote recognition returned {remote_result.recognition_status}")
        elif not self.fallback_available:
            raise SpeechServiceNotConfiguredError(FeedbackMessages.NOT_CONFIGURED)

        fallback_error: TranscriptionError | None = None
        try:
            fallback_result = await self._try_fallback(session, locale)
        except TranscriptionError as e:
            fallback_error = e
        else:
            if fallback_result is not None:
                self._log_transcription(session, fallback_result, start_time)
                return fallback_result

        if remote_error is not None:
            raise remote_error
        if remote_result is None and fallback_error is not None:
            raise fallback_error
        if remote_result is None or remote_result.recognition_status == RecognitionStatus.NO_MATCH:
            raise NoSpeechDetectedError(self._no_speech_message(session.mime_type), session.mime_type)
        raise TranscriptionError(FeedbackMessages.TRANSCRIPTION_FAILED, body=str(remote_result.recognition_status))

    async def _try_fallback(self, session: RecordingSession, locale: str) -> TranscriptionResult | None:
        """Single bounded attempt on the local backend.

        Returns None when the backend is missing or recognized nothing.

        Raises:
            TranscriptionError: The attempt failed or timed out
        """
        if self._fallback is None or not self._fallback.is_available():
            return None

        prepared = self._negotiator.prepare_for_backend(session, self._fallback.requires_wav)
        try:
            result = await asyncio.wait_for(
                self._fallback.transcribe(prepared.encoded_audio, prepared.mime_type, locale),
                timeout=self._fallback_timeout,
            )
        except TimeoutError:
            logger.warning(f"Local fallback timed out after {self._fallback_timeout}s")
            raise TranscriptionError(FeedbackMessages.TRANSCRIPTION_FAILED, body="local fallback timed out") from None
        except TranscriptionError as e:
            logger.warning(f"Local fallback failed: {e}")
            raise

        return result if result.is_success else None

    @staticmethod
    def _no_speech_message(mime_type: str) -> str:
        if "webm" in (mime_type or "").lower():
            return FeedbackMessages.NO_SPEECH_WEBM
        return FeedbackMessages.NO_SPEECH

    def _log_transcription(
        self,
        session: RecordingSession,
        result: TranscriptionResult,
        start_time: float,
    ) -> None:
        logger.info(
            "Transcription complete",
            extra={
                "recording_id": session.recording_id,
                "source_engine": str(result.source_engine),
                "duration_ms": session.duration_ms,
                "latency_ms": round((time.time() - start_time) * 1000),
                "text_length": len(result.text),
            },
        )
