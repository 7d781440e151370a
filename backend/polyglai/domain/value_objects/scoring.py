"""Pronunciation scoring value objects."""

from dataclasses import dataclass, field
from enum import StrEnum

from polyglai.domain.constants import FeedbackMessages
from polyglai.domain.languages import DEFAULT_LANGUAGE, normalize_language


class Level(StrEnum):
    """Learner proficiency level.

    Beginners practise single words and get a phoneme breakdown;
    intermediate and advanced learners practise sentences and get
    per-metric scores.
    """

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def is_sentence_level(self) -> bool:
        return self is not Level.BEGINNER


class ScoreBand(StrEnum):
    """Coarse quality band for an overall score."""

    EXCELLENT = "excellent"  # >= 90
    GOOD = "good"  # 75-89
    AVERAGE = "average"  # 60-74
    POOR = "poor"  # < 60

    @classmethod
    def from_score(cls, score: int) -> "ScoreBand":
        if score >= 90:
            return cls.EXCELLENT
        elif score >= 75:
            return cls.GOOD
        elif score >= 60:
            return cls.AVERAGE
        else:
            return cls.POOR


def _check_score(name: str, value: int) -> None:
    if value < 0 or value > 100:
        raise ValueError(f"{name} must be 0-100, got {value}")


@dataclass(frozen=True)
class ScoringRequest:
    """Inputs for scoring one attempt.

    Attributes:
        target_text: Reference phrase the learner was asked to say
        transcript: Recognized text (may be empty)
        level: Proficiency level selecting the scoring strategy
        language: Canonical language code (aliases are normalized)
    """

    target_text: str
    transcript: str
    level: Level = Level.BEGINNER
    language: str = DEFAULT_LANGUAGE

    def __post_init__(self) -> None:
        if not isinstance(self.target_text, str) or not isinstance(self.transcript, str):
            raise TypeError("target_text and transcript must be strings")
        # Frozen dataclass: coerce through object.__setattr__
        object.__setattr__(self, "level", Level(self.level))
        object.__setattr__(self, "language", normalize_language(self.language) or DEFAULT_LANGUAGE)


@dataclass(frozen=True)
class PhonemeScore:
    """Score for a single sound unit of a target word."""

    sound: str
    description: str
    score: int

    def __post_init__(self) -> None:
        _check_score("score", self.score)

    @property
    def feedback(self) -> str:
        return FeedbackMessages.for_phoneme_score(self.score)

    def to_dict(self) -> dict:
        return {
            "sound": self.sound,
            "description": self.description,
            "score": self.score,
            "feedback": self.feedback,
        }


@dataclass(frozen=True)
class MetricScores:
    """Sentence-level sub-metrics, each 0-100."""

    pronunciation: int
    fluency: int
    completeness: int
    prosody: int

    def __post_init__(self) -> None:
        for name in ("pronunciation", "fluency", "completeness", "prosody"):
            _check_score(name, getattr(self, name))

    def to_dict(self) -> dict:
        return {
            "pronunciation": self.pronunciation,
            "fluency": self.fluency,
            "completeness": self.completeness,
            "prosody": self.prosody,
        }


@dataclass(frozen=True)
class ScoreResult:
    """Result of scoring a transcript against a target phrase.

    Attributes:
        overall_score: Final score 0-100
        word_match_ratio: Fraction of target words found in the transcript
        phoneme_breakdown: Per-sound scores (beginner level only)
        per_metric_scores: Sub-metrics (intermediate/advanced only)
    """

    overall_score: int
    word_match_ratio: float
    phoneme_breakdown: tuple[PhonemeScore, ...] = field(default_factory=tuple)
    per_metric_scores: MetricScores | None = None

    def __post_init__(self) -> None:
        _check_score("overall_score", self.overall_score)
        if self.word_match_ratio < 0.0 or self.word_match_ratio > 1.0:
            raise ValueError(f"word_match_ratio must be 0-1, got {self.word_match_ratio}")

    @property
    def band(self) -> ScoreBand:
        return ScoreBand.from_score(self.overall_score)

    @classmethod
    def empty(cls) -> "ScoreResult":
        """Factory for an attempt with nothing to compare."""
        return cls(overall_score=0, word_match_ratio=0.0)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "overall_score": self.overall_score,
            "word_match_ratio": self.word_match_ratio,
            "band": str(self.band),
            "phoneme_breakdown": [p.to_dict() for p in self.phoneme_breakdown],
            "per_metric_scores": (
                self.per_metric_scores.to_dict() if self.per_metric_scores else None
            ),
        }
