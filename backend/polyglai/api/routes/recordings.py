"""Recording lifecycle and assessment API routes.

The browser records with MediaRecorder: it asks for a format, starts a
recording (reporting its microphone permission), posts each chunk as it
becomes available, then either stops, abandons or assesses the recording.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import BaseModel, Field

from polyglai.api.dependencies import (
    API_ERRORS,
    AssessmentServiceDep,
    AudioCaptureDep,
    AudioInputDep,
    raise_api_error,
    rate_limit,
)
from polyglai.domain.languages import DEFAULT_LANGUAGE
from polyglai.domain.services.format_negotiator import content_type_for
from polyglai.domain.value_objects.audio_format import RuntimeCapabilities
from polyglai.domain.value_objects.scoring import Level
from polyglai.ports.audio import RecordingNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recordings", tags=["recordings"])


# =============================================================================
# Request/Response Models
# =============================================================================


class FormatResponse(BaseModel):
    """Recorder format the client should use."""

    mime_type: str
    audio_bits_per_second: int | None = None
    recorder_options: dict


class StartRecordingRequest(BaseModel):
    """Request body for starting a recording."""

    supported_mime_types: list[str] = Field(default_factory=list)
    microphone_permission: str = "granted"


class RecordingResponse(BaseModel):
    """Active recording handle."""

    id: str
    state: str
    mime_type: str
    recorder_options: dict
    started_at: str
    buffered_bytes: int


class ChunkResponse(BaseModel):
    """Acknowledgement of an uploaded chunk."""

    recording_id: str
    accepted_bytes: int


class StoppedRecordingResponse(BaseModel):
    """Sealed recording summary."""

    recording_id: str
    mime_type: str
    duration_ms: int
    size_bytes: int
    playback_url: str


class AssessRecordingRequest(BaseModel):
    """Request body for assessing a recording."""

    target_text: str
    level: Level = Level.BEGINNER
    language: str = DEFAULT_LANGUAGE
    user_id: str | None = None
    mime_type: str | None = None


# =============================================================================
# Routes
# =============================================================================


@router.get("/format", response_model=FormatResponse)
async def get_recording_format(
    capture: AudioCaptureDep,
    mime_types: Annotated[list[str] | None, Query()] = None,
) -> FormatResponse:
    """Pick the recorder format from the MIME types the browser supports."""
    choice = capture.select_format(RuntimeCapabilities.from_list(mime_types or []))
    return FormatResponse(
        mime_type=choice.mime_type,
        audio_bits_per_second=choice.audio_bits_per_second,
        recorder_options=choice.recorder_options(),
    )


@router.post(
    "/start",
    response_model=RecordingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Microphone permission denied"},
        409: {"description": "Recording already in progress"},
    },
)
async def start_recording(
    request: StartRecordingRequest,
    capture: AudioCaptureDep,
    _: Annotated[None, Depends(rate_limit("/api/recordings/start"))],
) -> RecordingResponse:
    """Start a new recording.

    Only one recording may be active at a time.
    """
    capabilities = RuntimeCapabilities.from_list(
        request.supported_mime_types, request.microphone_permission
    )
    try:
        handle = await capture.start_recording(capabilities)
    except API_ERRORS as e:
        raise_api_error(e)

    return RecordingResponse(
        id=handle.id,
        state=str(handle.state),
        mime_type=handle.format.mime_type,
        recorder_options=handle.format.recorder_options(),
        started_at=handle.started_at.isoformat(),
        buffered_bytes=handle.buffered_bytes,
    )


@router.post(
    "/{recording_id}/chunks",
    response_model=ChunkResponse,
    responses={404: {"description": "Recording not active"}},
)
async def upload_chunk(
    recording_id: str,
    request: Request,
    capture: AudioCaptureDep,
    audio_input: AudioInputDep,
) -> ChunkResponse:
    """Append one recorder chunk (raw request body) to the active recording."""
    chunk = await request.body()
    try:
        active = capture.active_recording
        if active is None or active.id != recording_id:
            raise RecordingNotFoundError(f"No active recording {recording_id}")
        accepted = audio_input.push_chunk(chunk)
    except API_ERRORS as e:
        raise_api_error(e)

    return ChunkResponse(recording_id=recording_id, accepted_bytes=accepted)


@router.post(
    "/{recording_id}/stop",
    response_model=StoppedRecordingResponse,
    responses={
        404: {"description": "Recording not active"},
        422: {"description": "Recording too short or empty"},
    },
)
async def stop_recording(
    recording_id: str,
    capture: AudioCaptureDep,
    mime_type: str | None = None,
) -> StoppedRecordingResponse:
    """Stop the recording without assessing it (keeps it for playback).

    ``mime_type`` is the container the recorder actually produced, when the
    runtime default was used.
    """
    try:
        session = await capture.stop_recording(recording_id, mime_type)
    except API_ERRORS as e:
        raise_api_error(e)

    return StoppedRecordingResponse(
        recording_id=session.recording_id,
        mime_type=session.mime_type,
        duration_ms=session.duration_ms,
        size_bytes=session.size_bytes,
        playback_url=f"/api/recordings/{session.recording_id}/audio",
    )


@router.delete(
    "/{recording_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Recording not active"}},
)
async def abandon_recording(recording_id: str, capture: AudioCaptureDep) -> Response:
    """Abandon the active recording and release the microphone."""
    try:
        await capture.abandon(recording_id)
    except API_ERRORS as e:
        raise_api_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{recording_id}/audio",
    responses={404: {"description": "Recording not available for playback"}},
)
async def get_recording_audio(recording_id: str, capture: AudioCaptureDep) -> Response:
    """Play back the last stopped recording."""
    session = capture.last_recording(recording_id)
    if session is None:
        raise_api_error(RecordingNotFoundError(f"Recording {recording_id} is not available"))

    return Response(
        content=session.encoded_audio,
        media_type=content_type_for(session.mime_type),
        headers={"Cache-Control": "no-store"},
    )


@router.post(
    "/{recording_id}/assess",
    responses={
        404: {"description": "Recording not active"},
        422: {"description": "Recording too short, empty or without speech"},
        502: {"description": "Speech recognition failed"},
        503: {"description": "Speech service not configured"},
    },
)
async def assess_recording(
    recording_id: str,
    request: AssessRecordingRequest,
    service: AssessmentServiceDep,
    _: Annotated[None, Depends(rate_limit("/api/recordings/{recording_id}/assess"))],
) -> dict:
    """Stop the recording, transcribe it and score it against the target text."""
    try:
        outcome = await service.assess_recording(
            recording_id=recording_id,
            target_text=request.target_text,
            level=request.level,
            language=request.language,
            user_id=request.user_id,
            mime_type=request.mime_type,
        )
    except API_ERRORS as e:
        raise_api_error(e)

    return outcome.to_dict()
