"""Transcript scoring and learner score history API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from polyglai.api.dependencies import (
    API_ERRORS,
    AssessmentServiceDep,
    raise_api_error,
    rate_limit,
)
from polyglai.domain.languages import DEFAULT_LANGUAGE
from polyglai.domain.value_objects.scoring import Level

router = APIRouter(prefix="/api", tags=["assessments"])


# =============================================================================
# Request/Response Models
# =============================================================================


class ScoreTranscriptRequest(BaseModel):
    """Request body for scoring an already recognized transcript."""

    target_text: str
    transcript: str
    level: Level = Level.BEGINNER
    language: str = DEFAULT_LANGUAGE
    user_id: str | None = None


class AssessmentRecordResponse(BaseModel):
    """Stored best attempt."""

    user_id: str
    target_text: str
    transcript: str
    score: int
    level: str
    language: str
    timestamp: str


class AssessmentHistoryResponse(BaseModel):
    """Learner's best attempts, newest first."""

    user_id: str
    assessments: list[AssessmentRecordResponse]


class AssessedTextsResponse(BaseModel):
    """Target texts the learner already has a score for."""

    user_id: str
    language: str
    level: str
    texts: list[str]


# =============================================================================
# Routes
# =============================================================================


@router.post(
    "/assessments/score",
    responses={422: {"description": "Invalid scoring request"}},
)
async def score_transcript(
    request: ScoreTranscriptRequest,
    service: AssessmentServiceDep,
    _: Annotated[None, Depends(rate_limit("/api/assessments/score"))],
) -> dict:
    """Score a transcript against the target text without recording audio."""
    try:
        outcome = await service.score_transcript(
            target_text=request.target_text,
            transcript=request.transcript,
            level=request.level,
            language=request.language,
            user_id=request.user_id,
        )
    except API_ERRORS as e:
        raise_api_error(e)

    return outcome.to_dict()


@router.get("/users/{user_id}/assessments", response_model=AssessmentHistoryResponse)
async def list_assessments(
    user_id: str,
    service: AssessmentServiceDep,
    language: str | None = None,
) -> AssessmentHistoryResponse:
    """List the learner's best score per target text."""
    try:
        records = await service.list_high_scores(user_id, language)
    except API_ERRORS as e:
        raise_api_error(e)

    return AssessmentHistoryResponse(
        user_id=user_id,
        assessments=[AssessmentRecordResponse(**record.to_dict()) for record in records],
    )


@router.get("/users/{user_id}/assessed-texts", response_model=AssessedTextsResponse)
async def list_assessed_texts(
    user_id: str,
    service: AssessmentServiceDep,
    language: str = DEFAULT_LANGUAGE,
    level: Annotated[Level, Query()] = Level.BEGINNER,
) -> AssessedTextsResponse:
    """Target texts already assessed at this language and level."""
    try:
        texts = await service.get_assessed_texts(user_id, language, level)
    except API_ERRORS as e:
        raise_api_error(e)

    return AssessedTextsResponse(user_id=user_id, language=language, level=str(level), texts=texts)
