import pytest
from conftest import make_session

from polyglai.domain.services.format_negotiator import content_type_for, sniff_mime_type
from polyglai.domain.value_objects.audio_format import RuntimeCapabilities


@pytest.mark.parametrize(
    ("supported", "expected"),
    [
        (["audio/wav", "audio/webm"], "audio/wav"),
        (["audio/webm", "audio/webm;codecs=opus"], "audio/webm;codecs=opus"),
        (["audio/webm"], "audio/webm"),
    ],
)
def test_first_supported_format_in_preference_order(negotiator, supported, expected):
    choice = negotiator.select_recording_format(RuntimeCapabilities.from_list(supported))

    assert choice.mime_type == expected
    assert choice.audio_bits_per_second == 16000
    assert choice.recorder_options() == {"mimeType": expected, "audioBitsPerSecond": 16000}


def test_runtime_default_when_nothing_preferred_is_supported(negotiator):
    choice = negotiator.select_recording_format(RuntimeCapabilities.from_list(["audio/mp4"]))

    assert choice.is_default
    assert choice.audio_bits_per_second is None
    assert choice.recorder_options() == {}


@pytest.mark.parametrize(
    ("mime_type", "content_type"),
    [
        ("audio/mp4", "audio/mp4"),
        ("audio/webm;codecs=opus", "audio/webm"),
        ("audio/ogg;codecs=opus", "audio/ogg"),
        ("audio/wav", "audio/wav"),
        ("default", "audio/wav"),
    ],
)
def test_content_type_for(mime_type, content_type):
    assert content_type_for(mime_type) == content_type


def test_wav_input_is_not_reencoded(negotiator, codec):
    audio, mime_type = negotiator.convert_to_wav(b"RIFFdata", "audio/wav")

    assert (audio, mime_type) == (b"RIFFdata", "audio/wav")
    assert codec.calls == []


def test_failed_conversion_returns_original(negotiator, codec):
    codec.fail = True

    audio, mime_type = negotiator.convert_to_wav(b"opus", "audio/ogg;codecs=opus")

    assert (audio, mime_type) == (b"opus", "audio/ogg;codecs=opus")


def test_prepare_for_backend_keeps_session_when_wav_not_required(negotiator, codec):
    session = make_session()

    assert negotiator.prepare_for_backend(session, requires_wav=False) is session
    assert codec.calls == []


def test_prepare_for_backend_swaps_in_wav_audio(negotiator):
    session = make_session(b"opus")

    prepared = negotiator.prepare_for_backend(session, requires_wav=True)

    assert prepared.encoded_audio == b"RIFFopus"
    assert prepared.mime_type == "audio/wav"
    assert prepared.duration_ms == session.duration_ms
    assert prepared.recording_id == session.recording_id


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"RIFF\x24\x00\x00\x00WAVEfmt ", "audio/wav"),
        (b"\x1aE\xdf\xa3\x9fB\x86\x81\x01", "audio/webm"),
        (b"OggS\x00\x02\x00\x00", "audio/ogg"),
        (b"\x00\x00\x00\x1cftypM4A ", "audio/mp4"),
        (b"ID3\x04\x00", None),
    ],
)
def test_sniff_container(data, expected):
    assert sniff_mime_type(data) == expected


def test_runtime_default_is_resolved_from_the_bytes(negotiator):
    webm = b"\x1aE\xdf\xa3 opus clusters"

    mime_type = negotiator.resolve_mime_type(webm, "default")

    assert mime_type == "audio/webm"
    assert content_type_for(mime_type) == "audio/webm"


def test_reported_container_type_is_trusted(negotiator):
    assert negotiator.resolve_mime_type(b"OggS....", "audio/webm;codecs=opus") == "audio/webm;codecs=opus"
    assert negotiator.resolve_mime_type(b"unknown", "default") == "default"
