"""Speech service status, diagnostics and usage API routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from polyglai.api.dependencies import (
    SpeechAdapterDep,
    TranscriptionServiceDep,
    rate_limit,
)
from polyglai.domain.languages import AZURE_LOCALES, SUPPORTED_LANGUAGES
from polyglai.infrastructure.usage_tracker import get_usage_summary

router = APIRouter(prefix="/api/speech", tags=["speech"])


class LanguagesResponse(BaseModel):
    """Learner languages and recognition locales."""

    supported_languages: list[str]
    language_locales: dict[str, str]
    recognition_languages: dict[str, str]


class SpeechStatusResponse(BaseModel):
    """Which recognizers can currently transcribe."""

    remote_available: bool
    fallback_available: bool
    remote: dict[str, Any]


@router.get("/languages", response_model=LanguagesResponse)
async def list_languages(speech: SpeechAdapterDep) -> LanguagesResponse:
    """List practice languages and every locale the recognizer accepts."""
    return LanguagesResponse(
        supported_languages=list(SUPPORTED_LANGUAGES),
        language_locales=dict(AZURE_LOCALES),
        recognition_languages=speech.available_languages(),
    )


@router.get("/status", response_model=SpeechStatusResponse)
async def speech_status(
    speech: SpeechAdapterDep,
    transcription: TranscriptionServiceDep,
) -> SpeechStatusResponse:
    """Report configuration without touching the network."""
    return SpeechStatusResponse(
        remote_available=speech.is_available(),
        fallback_available=transcription.fallback_available,
        remote=speech.service_info(),
    )


@router.get("/diagnostics")
async def speech_diagnostics(
    speech: SpeechAdapterDep,
    _: Annotated[None, Depends(rate_limit("/api/speech/diagnostics"))],
) -> dict[str, Any]:
    """Probe the Speech endpoints and suggest configuration fixes."""
    return await speech.run_diagnostics()


@router.get("/usage")
async def speech_usage() -> dict[str, Any]:
    """Aggregated recognition usage and estimated cost."""
    return get_usage_summary()
