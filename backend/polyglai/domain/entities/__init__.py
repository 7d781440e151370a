"""Domain entities - objects with identity."""

from .assessment import AssessmentRecord
from .recording import RecordingHandle, RecordingSession, RecordingState

__all__ = ["AssessmentRecord", "RecordingHandle", "RecordingSession", "RecordingState"]
