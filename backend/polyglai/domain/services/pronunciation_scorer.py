"""
Pronunciation Scorer.

Scores a recognized transcript against the target phrase:

1. Word-match ratio: each target word counts as said if the transcript
   contains it exactly, a close spelling (Levenshtein similarity above the
   threshold), or a known learner variant.
2. A ratio under the floor caps the attempt in the low band.
3. Beginners get a per-sound breakdown averaged into the overall score;
   intermediate and advanced learners get a similarity-based score with
   pronunciation / fluency / completeness / prosody sub-metrics.

Scores carry a small random perturbation so repeated attempts do not look
mechanically identical. The random source is injected for reproducibility.
"""

import logging
import random
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from polyglai.domain.constants import (
    BEGINNER_JITTER,
    LEVEL_METRIC_OFFSETS,
    LOW_BAND_CEILING,
    PHONEME_MISSED_RANGE,
    PHONEME_SAID_RANGE,
    PRONUNCIATION_VARIANTS,
    SENTENCE_JITTER,
    SIMILARITY_THRESHOLD,
    WORD_MATCH_FLOOR,
)
from polyglai.domain.phonemes import (
    UNKNOWN_SOUND,
    describe_hangul,
    is_hangul_syllable,
    table_for,
)
from polyglai.domain.value_objects.scoring import (
    Level,
    MetricScores,
    PhonemeScore,
    ScoreResult,
    ScoringRequest,
)

logger = logging.getLogger(__name__)

# Anything that is not a word character, whitespace or apostrophe, plus
# apostrophes that are not between two word characters
_PUNCTUATION = re.compile(r"[^\w\s']|(?<!\w)'|'(?!\w)")


@dataclass(frozen=True)
class ScoringConfig:
    """Tunable scoring thresholds (defaults are the product values)."""

    similarity_threshold: float = SIMILARITY_THRESHOLD
    word_match_floor: float = WORD_MATCH_FLOOR
    low_band_ceiling: int = LOW_BAND_CEILING
    beginner_jitter: int = BEGINNER_JITTER
    sentence_jitter: int = SENTENCE_JITTER
    phoneme_said_range: tuple[int, int] = PHONEME_SAID_RANGE
    phoneme_missed_range: tuple[int, int] = PHONEME_MISSED_RANGE
    level_offsets: Mapping[str, Mapping[str, int]] = field(
        default_factory=lambda: LEVEL_METRIC_OFFSETS
    )
    variants: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: PRONUNCIATION_VARIANTS
    )


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit insert/delete/substitute costs.

    Uses two rolling rows, so memory is O(min(len(a), len(b))).

    Raises:
        TypeError: If either argument is not a string
    """
    if not isinstance(a, str) or not isinstance(b, str):
        raise TypeError("levenshtein() arguments must be strings")

    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity ``1 - distance / max(len)`` in [0, 1]."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def normalize_words(text: str) -> list[str]:
    """Lowercase, strip punctuation (keeping in-word apostrophes), split."""
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")
    text = text.lower().replace("’", "'")
    return _PUNCTUATION.sub(" ", text).split()


class PronunciationScorer:
    """Scores transcripts against target phrases.

    Synchronous and side-effect free apart from drawing from ``rng``.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize scorer.

        Args:
            config: Threshold overrides (product defaults if omitted)
            rng: Random source for score perturbation (seed it in tests)
        """
        self._config = config or ScoringConfig()
        self._rng = rng or random.Random()

    @property
    def config(self) -> ScoringConfig:
        return self._config

    def word_match_ratio(self, target_text: str, transcript: str) -> float:
        """Fraction of target words found in the transcript."""
        return self._match_words(normalize_words(target_text), normalize_words(transcript))

    def score_pronunciation(
        self,
        target_text: str,
        transcript: str,
        level: Level | str = Level.BEGINNER,
        language: str = "english",
    ) -> int:
        """Overall 0-100 score for an attempt."""
        request = ScoringRequest(
            target_text=target_text,
            transcript=transcript,
            level=Level(level),
            language=language,
        )
        return self.assess(request).overall_score

    def assess(self, request: ScoringRequest) -> ScoreResult:
        """Score an attempt with the level-specific strategy.

        Args:
            request: Target, transcript, level and language

        Returns:
            ScoreResult (overall score, match ratio, breakdown or metrics)
        """
        if not request.target_text.strip() or not request.transcript.strip():
            return ScoreResult.empty()

        target_words = normalize_words(request.target_text)
        said_words = normalize_words(request.transcript)
        ratio = self._match_words(target_words, said_words)

        if ratio < self._config.word_match_floor:
            result = self._low_band_result(request, target_words, said_words, ratio)
        elif request.level == Level.BEGINNER:
            result = self._beginner_result(request, target_words, said_words, ratio)
        else:
            result = self._sentence_result(request, target_words, said_words, ratio)

        logger.debug(
            "Pronunciation scored",
            extra={
                "level": str(request.level),
                "language": request.language,
                "word_match_ratio": round(ratio, 3),
                "overall_score": result.overall_score,
            },
        )
        return result

    def phoneme_breakdown(
        self, word: str, language: str, said_words: list[str]
    ) -> list[PhonemeScore]:
        """Per-sound scores for one target word.

        Credit is gated on whether the whole word was plausibly said: every
        sound draws from the high range if the best transcript word is
        similar enough, else from the low range.
        """
        best = max((similarity(word, said) for said in said_words), default=0.0)
        low, high = (
            self._config.phoneme_said_range
            if best > self._config.similarity_threshold
            else self._config.phoneme_missed_range
        )
        return [
            PhonemeScore(sound=sound, description=description, score=self._rng.randrange(low, high))
            for sound, description in split_phonemes(word, language)
        ]

    def _match_words(self, target_words: list[str], said_words: list[str]) -> float:
        if not said_words:
            return 0.0

        matched = 0
        for word in target_words:
            variants = self._config.variants.get(word, ())
            for said in said_words:
                if (
                    said == word
                    or similarity(word, said) > self._config.similarity_threshold
                    or said in variants
                ):
                    matched += 1
                    break
        return matched / max(1, len(target_words))

    def _low_band(self) -> int:
        return self._rng.randrange(self._config.low_band_ceiling)

    def _low_band_result(
        self,
        request: ScoringRequest,
        target_words: list[str],
        said_words: list[str],
        ratio: float,
    ) -> ScoreResult:
        breakdown: list[PhonemeScore] = []
        metrics = None
        if request.level == Level.BEGINNER:
            for word in target_words:
                breakdown.extend(self.phoneme_breakdown(word, request.language, said_words))
        else:
            metrics = MetricScores(
                pronunciation=self._low_band(),
                fluency=self._low_band(),
                completeness=self._low_band(),
                prosody=self._low_band(),
            )
        return ScoreResult(
            overall_score=self._low_band(),
            word_match_ratio=ratio,
            phoneme_breakdown=tuple(breakdown),
            per_metric_scores=metrics,
        )

    def _beginner_result(
        self,
        request: ScoringRequest,
        target_words: list[str],
        said_words: list[str],
        ratio: float,
    ) -> ScoreResult:
        breakdown: list[PhonemeScore] = []
        for word in target_words:
            breakdown.extend(self.phoneme_breakdown(word, request.language, said_words))

        if not breakdown:
            return ScoreResult(overall_score=0, word_match_ratio=ratio)

        mean = sum(p.score for p in breakdown) / len(breakdown)
        jitter = self._config.beginner_jitter
        overall = _clamp(round(mean + self._rng.randint(-jitter, jitter - 1)))
        return ScoreResult(
            overall_score=overall,
            word_match_ratio=ratio,
            phoneme_breakdown=tuple(breakdown),
        )

    def _sentence_result(
        self,
        request: ScoringRequest,
        target_words: list[str],
        said_words: list[str],
        ratio: float,
    ) -> ScoreResult:
        base = round(similarity(" ".join(target_words), " ".join(said_words)) * 100)
        jitter = self._config.sentence_jitter
        overall = _clamp(base + self._rng.randint(-jitter, jitter - 1))

        offsets = self._config.level_offsets.get(str(request.level), {})
        completeness = min(100, round(len(said_words) / max(1, len(target_words)) * 100))
        metrics = MetricScores(
            pronunciation=_clamp(base + offsets.get("pronunciation", 0)),
            fluency=_clamp(base + offsets.get("fluency", 0)),
            completeness=completeness,
            prosody=_clamp(base + offsets.get("prosody", 0)),
        )
        return ScoreResult(
            overall_score=overall,
            word_match_ratio=ratio,
            per_metric_scores=metrics,
        )


def split_phonemes(word: str, language: str) -> list[tuple[str, str]]:
    """Split a word into (sound, description) units.

    Greedy longest match over the language table; Hangul syllables are
    one unit each, described from their jamo. Characters with no table
    entry become "Unknown sound"; punctuation is skipped.
    """
    table = table_for(language)
    max_len = max(len(key) for key in table)
    word = word.lower().strip()
    units: list[tuple[str, str]] = []

    i = 0
    while i < len(word):
        char = word[i]
        if not char.isalnum():
            i += 1
            continue
        if is_hangul_syllable(char):
            units.append((char, describe_hangul(char)))
            i += 1
            continue

        for length in range(min(max_len, len(word) - i), 0, -1):
            piece = word[i : i + length]
            if piece in table:
                units.append((piece, table[piece]))
                i += length
                break
        else:
            units.append((char, UNKNOWN_SOUND))
            i += 1
    return units


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))
