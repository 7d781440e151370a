"""Domain services - orchestration and business logic."""

from .assessment_service import AssessmentOutcome, AssessmentService
from .audio_capture import AudioCapture
from .format_negotiator import (
    PREFERRED_MIME_TYPES,
    WAV_MIME_TYPE,
    FormatNegotiator,
    content_type_for,
)
from .pronunciation_scorer import (
    PronunciationScorer,
    ScoringConfig,
    levenshtein,
    normalize_words,
    similarity,
    split_phonemes,
)
from .transcription_service import TranscriptionService

__all__ = [
    "AudioCapture",
    "FormatNegotiator",
    "PREFERRED_MIME_TYPES",
    "WAV_MIME_TYPE",
    "content_type_for",
    "TranscriptionService",
    "PronunciationScorer",
    "ScoringConfig",
    "levenshtein",
    "similarity",
    "normalize_words",
    "split_phonemes",
    "AssessmentService",
    "AssessmentOutcome",
]
