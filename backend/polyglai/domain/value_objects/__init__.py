"""Domain value objects - immutable objects without identity."""

from .audio_format import DEFAULT_MIME_TYPE, FormatChoice, RuntimeCapabilities
from .scoring import Level, MetricScores, PhonemeScore, ScoreBand, ScoreResult, ScoringRequest
from .transcription import RecognitionStatus, SourceEngine, TranscriptionResult

__all__ = [
    "DEFAULT_MIME_TYPE",
    "FormatChoice",
    "RuntimeCapabilities",
    "Level",
    "ScoreBand",
    "ScoringRequest",
    "PhonemeScore",
    "MetricScores",
    "ScoreResult",
    "RecognitionStatus",
    "SourceEngine",
    "TranscriptionResult",
]
