"""FastAPI dependency injection module.

Provides singleton instances of services for API routes.
Uses lifespan events for initialization and cleanup.
"""

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, Request, status

from polyglai.adapters.azure_speech import AzureSpeechAdapter
from polyglai.adapters.upload_audio_input import UploadedAudioInput
from polyglai.composition import (
    create_assessment_service,
    create_assessment_store,
    create_audio_capture,
    create_azure_speech_adapter,
    create_format_negotiator,
    create_pronunciation_scorer,
    create_transcription_service,
)
from polyglai.config import get_usage_log_path
from polyglai.domain.constants import FeedbackMessages
from polyglai.domain.services.assessment_service import AssessmentService
from polyglai.domain.services.audio_capture import AudioCapture
from polyglai.domain.services.transcription_service import TranscriptionService
from polyglai.infrastructure.usage_tracker import configure_usage_log
from polyglai.ports.assessment_store import AssessmentStoreError
from polyglai.ports.audio import (
    AudioCaptureError,
    EmptyRecordingError,
    PermissionDeniedError,
    RecordingInProgressError,
    RecordingNotFoundError,
    RecordingTooShortError,
)
from polyglai.ports.speech import (
    NoSpeechDetectedError,
    SpeechServiceError,
    SpeechServiceNotConfiguredError,
    TranscriptionError,
)

logger = logging.getLogger(__name__)


# Singletons stored at module level
_audio_input: UploadedAudioInput | None = None
_speech_adapter: AzureSpeechAdapter | None = None
_transcription_service: TranscriptionService | None = None
_audio_capture: AudioCapture | None = None
_assessment_service: AssessmentService | None = None


async def init_dependencies() -> None:
    """Initialize all singleton dependencies.

    Called during FastAPI lifespan startup.
    """
    global _audio_input, _speech_adapter, _transcription_service
    global _audio_capture, _assessment_service

    configure_usage_log(get_usage_log_path())

    negotiator = create_format_negotiator()
    _audio_input = UploadedAudioInput()
    _speech_adapter = create_azure_speech_adapter()
    _transcription_service = create_transcription_service(_speech_adapter, negotiator)
    _audio_capture = create_audio_capture(_audio_input, negotiator)
    _assessment_service = create_assessment_service(
        capture=_audio_capture,
        transcription=_transcription_service,
        scorer=create_pronunciation_scorer(),
        store=create_assessment_store(),
    )

    if _speech_adapter.is_configured():
        logger.info(f"Azure Speech configured: {_speech_adapter.service_info()['recognition_url']}")
    else:
        logger.warning("Azure Speech not configured - only the local fallback can transcribe")
    if _transcription_service.fallback_available:
        logger.info("Local Whisper fallback available")


async def cleanup_dependencies() -> None:
    """Cleanup dependencies on shutdown.

    Called during FastAPI lifespan shutdown.
    Abandons an unfinished recording and closes connections.
    """
    global _audio_capture, _speech_adapter

    if _audio_capture is not None and _audio_capture.active_recording is not None:
        await _audio_capture.abandon(_audio_capture.active_recording.id)

    # Close HTTP client
    if _speech_adapter is not None:
        await _speech_adapter.close()


def get_audio_input() -> UploadedAudioInput:
    """Dependency: Get UploadedAudioInput instance."""
    if _audio_input is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _audio_input


def get_speech_adapter() -> AzureSpeechAdapter:
    """Dependency: Get AzureSpeechAdapter instance."""
    if _speech_adapter is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _speech_adapter


def get_transcription_service() -> TranscriptionService:
    """Dependency: Get TranscriptionService instance."""
    if _transcription_service is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _transcription_service


def get_audio_capture() -> AudioCapture:
    """Dependency: Get AudioCapture instance."""
    if _audio_capture is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _audio_capture


def get_assessment_service() -> AssessmentService:
    """Dependency: Get AssessmentService instance."""
    if _assessment_service is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _assessment_service


# Type aliases for dependency injection
AudioInputDep = Annotated[UploadedAudioInput, Depends(get_audio_input)]
SpeechAdapterDep = Annotated[AzureSpeechAdapter, Depends(get_speech_adapter)]
TranscriptionServiceDep = Annotated[TranscriptionService, Depends(get_transcription_service)]
AudioCaptureDep = Annotated[AudioCapture, Depends(get_audio_capture)]
AssessmentServiceDep = Annotated[AssessmentService, Depends(get_assessment_service)]


# =============================================================================
# Error Mapping
# =============================================================================


# Domain failures the routes translate with raise_api_error
API_ERRORS = (AudioCaptureError, SpeechServiceError, AssessmentStoreError, TypeError, ValueError)


def _error(status_code: int, code: str, message: str, details: dict | None = None) -> HTTPException:
    error: dict = {"code": code, "message": message}
    if details:
        error["details"] = details
    return HTTPException(status_code=status_code, detail={"error": error})


def raise_api_error(exc: Exception) -> NoReturn:
    """Translate a domain exception into the API error envelope.

    Raises:
        HTTPException: Always
    """
    if isinstance(exc, PermissionDeniedError):
        raise _error(
            status.HTTP_403_FORBIDDEN, "MICROPHONE_PERMISSION_DENIED", FeedbackMessages.PERMISSION_DENIED
        ) from None
    if isinstance(exc, RecordingInProgressError):
        raise _error(
            status.HTTP_409_CONFLICT,
            "RECORDING_IN_PROGRESS",
            FeedbackMessages.RECORDING_IN_PROGRESS,
            {"active_recording_id": exc.active_recording_id},
        ) from None
    if isinstance(exc, RecordingTooShortError):
        raise _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "RECORDING_TOO_SHORT",
            FeedbackMessages.RECORDING_TOO_SHORT,
            {"duration_ms": exc.duration_ms, "minimum_ms": exc.minimum_ms},
        ) from None
    if isinstance(exc, EmptyRecordingError):
        raise _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "EMPTY_RECORDING", FeedbackMessages.EMPTY_RECORDING
        ) from None
    if isinstance(exc, RecordingNotFoundError):
        raise _error(status.HTTP_404_NOT_FOUND, "RECORDING_NOT_FOUND", str(exc)) from None
    if isinstance(exc, NoSpeechDetectedError):
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "NO_SPEECH_DETECTED", str(exc)) from None
    if isinstance(exc, SpeechServiceNotConfiguredError):
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE, "SPEECH_NOT_CONFIGURED", FeedbackMessages.NOT_CONFIGURED
        ) from None
    if isinstance(exc, TranscriptionError):
        logger.error(f"Transcription failed: {exc} (status={exc.status_code})")
        raise _error(
            status.HTTP_502_BAD_GATEWAY, "TRANSCRIPTION_FAILED", FeedbackMessages.TRANSCRIPTION_FAILED
        ) from None
    if isinstance(exc, AssessmentStoreError):
        logger.error(f"Assessment store error: {exc}")
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE, "STORE_UNAVAILABLE", "Scores could not be saved"
        ) from None
    if isinstance(exc, (TypeError, ValueError)):
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_REQUEST", str(exc)) from None
    raise exc


# =============================================================================
# Rate Limiting
# =============================================================================


@dataclass(frozen=True)
class RateLimitConfig:
    """Requests allowed per client within a sliding window."""

    max_requests: int
    window_seconds: float


RATE_LIMITS: dict[str, RateLimitConfig] = {
    "/api/recordings/start": RateLimitConfig(max_requests=30, window_seconds=60),
    "/api/recordings/{recording_id}/assess": RateLimitConfig(max_requests=30, window_seconds=60),
    "/api/assessments/score": RateLimitConfig(max_requests=120, window_seconds=60),
    "/api/speech/diagnostics": RateLimitConfig(max_requests=10, window_seconds=60),
}


class InMemoryRateLimiter:
    """Sliding-window limiter keyed by (route, client address).

    Single-process only. A client's entry is dropped as soon as its window
    holds no requests, so idle clients do not accumulate.
    """

    def __init__(
        self,
        limits: dict[str, RateLimitConfig] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limits = RATE_LIMITS if limits is None else limits
        self._clock = clock
        self._hits: dict[tuple[str, str], deque[float]] = {}

    def limit_for(self, endpoint: str) -> RateLimitConfig | None:
        return self._limits.get(endpoint)

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def acquire(self, endpoint: str, client_ip: str) -> bool:
        """Count a request against the client's window.

        Returns:
            False if the window is already full (the request is not counted)
        """
        config = self._limits.get(endpoint)
        if config is None:
            return True

        now = self._clock()
        self._expire(now)
        hits = self._hits.setdefault((endpoint, client_ip), deque())
        if len(hits) >= config.max_requests:
            return False
        hits.append(now)
        return True

    def _expire(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            cutoff = now - self._limits[key[0]].window_seconds
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]


_rate_limiter = InMemoryRateLimiter()


def rate_limit(endpoint: str):
    """Dependency factory: reject the request with 429 once its route limit is hit.

    Usage:
        _: Annotated[None, Depends(rate_limit("/api/recordings/start"))]
    """

    async def check_rate_limit(request: Request) -> None:
        client_ip = request.client.host if request.client else "unknown"
        if not _rate_limiter.acquire(endpoint, client_ip):
            config = _rate_limiter.limit_for(endpoint)
            logger.warning(f"Rate limit hit on {endpoint} by {client_ip}")
            raise _error(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "RATE_LIMIT_EXCEEDED",
                f"Too many requests. Limit: {config.max_requests}/{config.window_seconds:g}s",
            )

    return check_rate_limit
