"""
Composition Root.

Centralized dependency wiring for the application.
All factory functions that instantiate adapters belong here to maintain
hexagonal architecture (domain NEVER imports from adapters).
"""

import random

from polyglai.adapters.azure_speech import AzureSpeechAdapter
from polyglai.adapters.local_whisper import LocalWhisperAdapter
from polyglai.adapters.upload_audio_input import UploadedAudioInput
from polyglai.adapters.wav_codec import WavCodec
from polyglai.config import (
    get_assessment_db_path,
    get_azure_alternative_endpoints,
    get_azure_speech_endpoint,
    get_azure_speech_key,
    get_azure_speech_region,
    get_azure_speech_timeout,
    get_transcription_max_attempts,
    get_whisper_compute_type,
    get_whisper_device,
    get_whisper_model,
    is_local_fallback_enabled,
)
from polyglai.domain.services.assessment_service import AssessmentService
from polyglai.domain.services.audio_capture import AudioCapture
from polyglai.domain.services.format_negotiator import FormatNegotiator
from polyglai.domain.services.pronunciation_scorer import PronunciationScorer, ScoringConfig
from polyglai.domain.services.transcription_service import TranscriptionService
from polyglai.infrastructure.assessment_store import SQLiteAssessmentStore
from polyglai.ports.assessment_store import AssessmentStore


def create_format_negotiator() -> FormatNegotiator:
    """Create FormatNegotiator backed by the soundfile WAV codec."""
    return FormatNegotiator(WavCodec())


def create_azure_speech_adapter() -> AzureSpeechAdapter:
    """Create the Azure Speech adapter from environment configuration."""
    return AzureSpeechAdapter(
        subscription_key=get_azure_speech_key(),
        region=get_azure_speech_region(),
        endpoint=get_azure_speech_endpoint(),
        alternative_endpoints=get_azure_alternative_endpoints(),
        timeout=get_azure_speech_timeout(),
        max_attempts=get_transcription_max_attempts(),
    )


def create_local_whisper_adapter() -> LocalWhisperAdapter:
    """Create the local fallback recognizer (unavailable without faster-whisper)."""
    return LocalWhisperAdapter(
        model=get_whisper_model(),
        device=get_whisper_device(),
        compute_type=get_whisper_compute_type(),
        enabled=is_local_fallback_enabled(),
    )


def create_transcription_service(
    remote: AzureSpeechAdapter,
    negotiator: FormatNegotiator,
) -> TranscriptionService:
    """Create TranscriptionService with the local fallback wired in.

    Args:
        remote: Shared Azure adapter (also used by the diagnostics routes)
        negotiator: Shared format negotiator

    Returns:
        TranscriptionService trying Azure first, then faster-whisper
    """
    return TranscriptionService(
        remote=remote,
        negotiator=negotiator,
        fallback=create_local_whisper_adapter(),
    )


def create_pronunciation_scorer(rng: random.Random | None = None) -> PronunciationScorer:
    """Create PronunciationScorer with product thresholds."""
    return PronunciationScorer(ScoringConfig(), rng=rng)


def create_assessment_store() -> AssessmentStore:
    """Create the SQLite-backed assessment store."""
    return SQLiteAssessmentStore(get_assessment_db_path())


def create_audio_capture(audio_input: UploadedAudioInput, negotiator: FormatNegotiator) -> AudioCapture:
    """Create AudioCapture reading from browser-uploaded chunks."""
    return AudioCapture(audio_input, negotiator)


def create_assessment_service(
    capture: AudioCapture,
    transcription: TranscriptionService,
    scorer: PronunciationScorer,
    store: AssessmentStore | None,
) -> AssessmentService:
    """Create AssessmentService from already-built collaborators."""
    return AssessmentService(capture, transcription, scorer, store)
