# Domain layer - Business logic (NO external dependencies)

from .entities import AssessmentRecord, RecordingHandle, RecordingSession, RecordingState
from .value_objects import (
    FormatChoice,
    Level,
    MetricScores,
    PhonemeScore,
    RecognitionStatus,
    RuntimeCapabilities,
    ScoreBand,
    ScoreResult,
    ScoringRequest,
    SourceEngine,
    TranscriptionResult,
)

__all__ = [
    "AssessmentRecord",
    "RecordingHandle",
    "RecordingSession",
    "RecordingState",
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
