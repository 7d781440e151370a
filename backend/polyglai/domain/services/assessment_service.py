"""
Assessment Service.

Domain service that runs one pronunciation assessment end to end:
stop the recording, transcribe it, score the transcript and keep the
learner's best attempt. The recording is handed to transcription and
dropped afterwards; only the capture service keeps its raw bytes for
playback.
"""

import logging
import time
from dataclasses import dataclass

from polyglai.domain.entities.assessment import AssessmentRecord
from polyglai.domain.languages import locale_for, normalize_language, texts_match
from polyglai.domain.services.audio_capture import AudioCapture
from polyglai.domain.services.pronunciation_scorer import PronunciationScorer
from polyglai.domain.services.transcription_service import TranscriptionService
from polyglai.domain.value_objects.scoring import Level, ScoreResult, ScoringRequest
from polyglai.domain.value_objects.transcription import TranscriptionResult
from polyglai.ports.assessment_store import AssessmentStore

logger = logging.getLogger(__name__)


@dataclass
class AssessmentOutcome:
    """Everything the presenter shows for one attempt."""

    request: ScoringRequest
    score: ScoreResult
    transcription: TranscriptionResult | None = None
    recording_id: str | None = None
    playback_url: str | None = None
    is_new_high_score: bool = False

    def to_dict(self) -> dict:
        return {
            "target_text": self.request.target_text,
            "transcript": self.request.transcript,
            "level": str(self.request.level),
            "language": self.request.language,
            "score": self.score.to_dict(),
            "transcription": self.transcription.to_dict() if self.transcription else None,
            "recording_id": self.recording_id,
            "playback_url": self.playback_url,
            "is_new_high_score": self.is_new_high_score,
        }


class AssessmentService:
    """Orchestrates capture, transcription, scoring and persistence.

    Responsibilities:
    - Hand the sealed recording to transcription exactly once
    - Score with the level-specific strategy
    - Save only a first attempt or a new high score
    """

    def __init__(
        self,
        capture: AudioCapture,
        transcription: TranscriptionService,
        scorer: PronunciationScorer,
        store: AssessmentStore | None = None,
    ) -> None:
        self._capture = capture
        self._transcription = transcription
        self._scorer = scorer
        self._store = store

    async def assess_recording(
        self,
        recording_id: str,
        target_text: str,
        level: Level | str,
        language: str,
        user_id: str | None = None,
        mime_type: str | None = None,
    ) -> AssessmentOutcome:
        """Stop the active recording and assess it.

        Raises:
            RecordingNotFoundError, RecordingTooShortError, EmptyRecordingError:
                From the capture step
            NoSpeechDetectedError, TranscriptionError: From transcription
        """
        start_time = time.time()
        session = await self._capture.stop_recording(recording_id, mime_type)

        transcription = await self._transcription.transcribe(session, locale_for(language))
        request = ScoringRequest(
            target_text=target_text,
            transcript=transcription.text,
            level=Level(level),
            language=language,
        )
        score = self._scorer.assess(request)
        is_new_high_score = await self.record_result(user_id, request, score)

        self._log_assessment(request, score, transcription, start_time)
        return AssessmentOutcome(
            request=request,
            score=score,
            transcription=transcription,
            recording_id=session.recording_id,
            playback_url=f"/api/recordings/{session.recording_id}/audio",
            is_new_high_score=is_new_high_score,
        )

    async def score_transcript(
        self,
        target_text: str,
        transcript: str,
        level: Level | str,
        language: str,
        user_id: str | None = None,
    ) -> AssessmentOutcome:
        """Score an already recognized transcript."""
        request = ScoringRequest(
            target_text=target_text,
            transcript=transcript,
            level=Level(level),
            language=language,
        )
        score = self._scorer.assess(request)
        is_new_high_score = await self.record_result(user_id, request, score)
        return AssessmentOutcome(request=request, score=score, is_new_high_score=is_new_high_score)

    async def record_result(
        self,
        user_id: str | None,
        request: ScoringRequest,
        score: ScoreResult,
    ) -> bool:
        """Persist the attempt if it is the first one or beats the stored best.

        Returns:
            True if the attempt was saved
        """
        if self._store is None or not user_id:
            return False

        saved = await self._store.save_assessment(
            AssessmentRecord(
                user_id=user_id,
                target_text=request.target_text,
                transcript=request.transcript,
                score=score.overall_score,
                level=str(request.level),
                language=request.language,
            )
        )
        if saved:
            logger.info(f"Saved high score {score.overall_score} for {user_id}")
        else:
            logger.debug(f"Score {score.overall_score} does not beat the stored best for {user_id}")
        return saved

    async def get_assessed_texts(self, user_id: str, language: str, level: Level | str) -> list[str]:
        """Target texts the learner already has a score for."""
        if self._store is None:
            return []
        return await self._store.get_assessed_texts(
            user_id, normalize_language(language), str(Level(level))
        )

    async def is_text_assessed(
        self, user_id: str, target_text: str, language: str, level: Level | str
    ) -> bool:
        """Whether the learner already has a score for ``target_text``."""
        assessed = await self.get_assessed_texts(user_id, language, level)
        return any(texts_match(text, target_text, language) for text in assessed)

    async def list_high_scores(self, user_id: str, language: str | None = None) -> list[AssessmentRecord]:
        if self._store is None:
            return []
        return await self._store.list_high_scores(
            user_id, normalize_language(language) if language else None
        )

    def _log_assessment(
        self,
        request: ScoringRequest,
        score: ScoreResult,
        transcription: TranscriptionResult,
        start_time: float,
    ) -> None:
        """Log assessment metrics for observability."""
        logger.info(
            "Assessment complete",
            extra={
                "level": str(request.level),
                "language": request.language,
                "overall_score": score.overall_score,
                "word_match_ratio": round(score.word_match_ratio, 3),
                "band": str(score.band),
                "source_engine": str(transcription.source_engine),
                "assessment_time_ms": round((time.time() - start_time) * 1000),
            },
        )
