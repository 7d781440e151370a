import pytest

from polyglai.adapters.upload_audio_input import UploadedAudioInput
from polyglai.domain.entities.recording import RecordingState
from polyglai.domain.services.audio_capture import AudioCapture
from polyglai.domain.value_objects.audio_format import RuntimeCapabilities
from polyglai.ports.audio import (
    EmptyRecordingError,
    PermissionDeniedError,
    RecordingInProgressError,
    RecordingNotFoundError,
    RecordingTooShortError,
)

WEBM_ONLY = RuntimeCapabilities.from_list(["audio/webm;codecs=opus", "audio/webm"], "granted")


@pytest.fixture
def audio_input():
    return UploadedAudioInput()


@pytest.fixture
def capture(audio_input, negotiator, clock):
    return AudioCapture(audio_input, negotiator, clock=clock)


async def _record(capture, audio_input, clock, duration_ms, chunks=(b"chunk-1", b"chunk-2")):
    handle = await capture.start_recording(WEBM_ONLY)
    for chunk in chunks:
        audio_input.push_chunk(chunk)
    clock.advance_ms(duration_ms)
    return handle


@pytest.mark.asyncio
async def test_start_recording_negotiates_format(capture):
    handle = await capture.start_recording(WEBM_ONLY)

    assert handle.format.mime_type == "audio/webm;codecs=opus"
    assert handle.format.audio_bits_per_second == 16000
    assert handle.state == RecordingState.RECORDING
    assert capture.active_recording is handle


@pytest.mark.asyncio
async def test_stop_seals_buffered_chunks(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 1200)

    session = await capture.stop_recording(handle.id)

    assert session.encoded_audio == b"chunk-1chunk-2"
    assert session.mime_type == "audio/webm;codecs=opus"
    assert session.duration_ms == 1200
    assert capture.active_recording is None
    assert capture.last_recording(handle.id) is session


@pytest.mark.asyncio
async def test_recording_at_minimum_duration_is_accepted(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 500)

    session = await capture.stop_recording(handle.id)

    assert session.duration_ms == 500


@pytest.mark.asyncio
async def test_recording_below_minimum_duration_is_rejected(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 499)

    with pytest.raises(RecordingTooShortError) as exc_info:
        await capture.stop_recording(handle.id)

    assert exc_info.value.duration_ms == 499
    assert exc_info.value.minimum_ms == 500
    assert capture.last_recording(handle.id) is None


@pytest.mark.asyncio
async def test_short_check_runs_before_empty_check(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 100, chunks=())

    with pytest.raises(RecordingTooShortError):
        await capture.stop_recording(handle.id)


@pytest.mark.asyncio
async def test_recording_without_audio_is_rejected(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 900, chunks=(b"",))

    with pytest.raises(EmptyRecordingError):
        await capture.stop_recording(handle.id)


@pytest.mark.asyncio
async def test_denied_permission_leaves_no_active_recording(capture):
    denied = RuntimeCapabilities.from_list(["audio/webm"], "denied")

    with pytest.raises(PermissionDeniedError):
        await capture.start_recording(denied)

    assert capture.active_recording is None


@pytest.mark.asyncio
async def test_second_start_is_rejected_while_recording(capture):
    handle = await capture.start_recording(WEBM_ONLY)

    with pytest.raises(RecordingInProgressError) as exc_info:
        await capture.start_recording(WEBM_ONLY)

    assert exc_info.value.active_recording_id == handle.id


@pytest.mark.asyncio
async def test_stream_is_released_even_when_recording_is_rejected(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 10)
    stream = audio_input.current_stream

    with pytest.raises(RecordingTooShortError):
        await capture.stop_recording(handle.id)

    assert stream.is_released
    assert capture.active_recording is None


@pytest.mark.asyncio
async def test_stream_is_released_when_stop_fails(capture, audio_input, mocker):
    handle = await capture.start_recording(WEBM_ONLY)
    stream = audio_input.current_stream
    mocker.patch.object(stream, "stop", side_effect=RuntimeError("device lost"))

    with pytest.raises(RuntimeError):
        await capture.stop_recording(handle.id)

    assert stream.is_released
    assert capture.active_recording is None


@pytest.mark.asyncio
async def test_abandon_releases_and_allows_new_recording(capture, audio_input):
    handle = await capture.start_recording(WEBM_ONLY)
    stream = audio_input.current_stream

    await capture.abandon(handle.id)

    assert stream.is_released
    assert handle.state == RecordingState.ABANDONED
    second = await capture.start_recording(WEBM_ONLY)
    assert second.id != handle.id


@pytest.mark.asyncio
async def test_new_recording_drops_previous_playback(capture, audio_input, clock):
    first = await _record(capture, audio_input, clock, 800)
    await capture.stop_recording(first.id)

    await capture.start_recording(WEBM_ONLY)

    assert capture.last_recording(first.id) is None


@pytest.mark.asyncio
async def test_unknown_recording_id_is_rejected(capture):
    await capture.start_recording(WEBM_ONLY)

    with pytest.raises(RecordingNotFoundError):
        await capture.stop_recording("not-the-id")


@pytest.mark.asyncio
async def test_runtime_default_mime_type_can_be_reported_on_stop(audio_input, negotiator, clock):
    capture = AudioCapture(audio_input, negotiator, clock=clock)
    handle = await capture.start_recording(RuntimeCapabilities.from_list([], "granted"))
    audio_input.push_chunk(b"mp4-data")
    clock.advance_ms(700)

    session = await capture.stop_recording(handle.id, mime_type="audio/mp4")

    assert handle.format.is_default
    assert session.mime_type == "audio/mp4"


@pytest.mark.asyncio
async def test_chunks_after_stop_are_refused(capture, audio_input, clock):
    handle = await _record(capture, audio_input, clock, 800)
    await capture.stop_recording(handle.id)

    with pytest.raises(RecordingNotFoundError):
        audio_input.push_chunk(b"late")


@pytest.mark.asyncio
async def test_runtime_default_recording_is_labelled_by_its_container(audio_input, negotiator, clock):
    capture = AudioCapture(audio_input, negotiator, clock=clock)
    handle = await capture.start_recording(RuntimeCapabilities.from_list([], "granted"))
    audio_input.push_chunk(b"\x00\x00\x00\x1cftypM4A ")
    audio_input.push_chunk(b"aac frames")
    clock.advance_ms(900)

    session = await capture.stop_recording(handle.id)

    assert handle.format.is_default
    assert session.mime_type == "audio/mp4"
