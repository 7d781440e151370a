"""Assessment record entity (a persisted best attempt)."""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class AssessmentRecord:
    """A learner's scored attempt at a target text.

    Stored per (user, language, level, target text); only the best
    attempt is kept.
    """

    user_id: str
    target_text: str
    transcript: str
    score: int
    level: str
    language: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("user_id is required")
        if self.score < 0 or self.score > 100:
            raise ValueError(f"score must be 0-100, got {self.score}")

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "target_text": self.target_text,
            "transcript": self.transcript,
            "score": self.score,
            "level": self.level,
            "language": self.language,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssessmentRecord":
        timestamp = data.get("timestamp")
        return cls(
            user_id=data["user_id"],
            target_text=data["target_text"],
            transcript=data.get("transcript", ""),
            score=int(data["score"]),
            level=data["level"],
            language=data["language"],
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(UTC),
        )
