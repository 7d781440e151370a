"""API layer - FastAPI routes and dependencies."""

from .dependencies import (
    AssessmentServiceDep,
    AudioCaptureDep,
    AudioInputDep,
    InMemoryRateLimiter,
    SpeechAdapterDep,
    TranscriptionServiceDep,
    cleanup_dependencies,
    get_assessment_service,
    get_audio_capture,
    get_audio_input,
    get_speech_adapter,
    get_transcription_service,
    init_dependencies,
    raise_api_error,
    rate_limit,
)
from .routes import assessments_router, recordings_router, speech_router

__all__ = [
    # Routes
    "recordings_router",
    "assessments_router",
    "speech_router",
    # Dependencies
    "init_dependencies",
    "cleanup_dependencies",
    "get_audio_input",
    "get_speech_adapter",
    "get_transcription_service",
    "get_audio_capture",
    "get_assessment_service",
    "rate_limit",
    "raise_api_error",
    # Type aliases
    "AudioInputDep",
    "SpeechAdapterDep",
    "TranscriptionServiceDep",
    "AudioCaptureDep",
    "AssessmentServiceDep",
    "InMemoryRateLimiter",
]
