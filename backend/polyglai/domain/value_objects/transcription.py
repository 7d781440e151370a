"""Speech transcription value objects."""

from dataclasses import dataclass
from enum import StrEnum


class RecognitionStatus(StrEnum):
    """Categorical outcome of a recognition call."""

    SUCCESS = "Success"
    NO_MATCH = "NoMatch"
    ERROR = "Error"

    @classmethod
    def from_azure(cls, status: str | None) -> "RecognitionStatus":
        """Collapse an Azure RecognitionStatus value into the three outcomes.

        Silence and babble timeouts are a "no speech" outcome, anything
        unrecognized is an error.
        """
        if status == "Success":
            return cls.SUCCESS
        if status in ("NoMatch", "InitialSilenceTimeout", "BabbleTimeout"):
            return cls.NO_MATCH
        return cls.ERROR


class SourceEngine(StrEnum):
    """Which recognizer produced the transcript."""

    REMOTE = "Remote"
    LOCAL_FALLBACK = "LocalFallback"


@dataclass(frozen=True)
class TranscriptionResult:
    """Outcome of a single recognition attempt.

    Attributes:
        text: Recognized text (empty unless status is SUCCESS)
        recognition_status: Success / NoMatch / Error
        source_engine: Remote service or local fallback
        duration_ms: Length of the recognized speech, if reported
        offset_ms: Start offset of the recognized speech, if reported
    """

    text: str
    recognition_status: RecognitionStatus
    source_engine: SourceEngine
    duration_ms: int | None = None
    offset_ms: int | None = None

    def __post_init__(self) -> None:
        """Text is present exactly when recognition succeeded."""
        if self.recognition_status == RecognitionStatus.SUCCESS and not self.text.strip():
            raise ValueError("Successful transcription requires non-empty text")
        if self.recognition_status != RecognitionStatus.SUCCESS and self.text:
            raise ValueError(
                f"text must be empty when recognition_status is {self.recognition_status}"
            )

    @property
    def is_success(self) -> bool:
        return self.recognition_status == RecognitionStatus.SUCCESS

    @classmethod
    def success(
        cls,
        text: str,
        source_engine: SourceEngine,
        duration_ms: int | None = None,
        offset_ms: int | None = None,
    ) -> "TranscriptionResult":
        """Factory for a recognized transcript."""
        return cls(
            text=text.strip(),
            recognition_status=RecognitionStatus.SUCCESS,
            source_engine=source_engine,
            duration_ms=duration_ms,
            offset_ms=offset_ms,
        )

    @classmethod
    def no_match(cls, source_engine: SourceEngine) -> "TranscriptionResult":
        """Factory for a call that completed without recognizing speech."""
        return cls(
            text="",
            recognition_status=RecognitionStatus.NO_MATCH,
            source_engine=source_engine,
        )

    @classmethod
    def error(cls, source_engine: SourceEngine) -> "TranscriptionResult":
        """Factory for a call that reported a recognition error."""
        return cls(
            text="",
            recognition_status=RecognitionStatus.ERROR,
            source_engine=source_engine,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "text": self.text,
            "recognition_status": str(self.recognition_status),
            "source_engine": str(self.source_engine),
            "duration_ms": self.duration_ms,
            "offset_ms": self.offset_ms,
        }
