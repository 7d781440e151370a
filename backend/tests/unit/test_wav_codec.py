import io

import av
import numpy as np
import pytest
import soundfile as sf

from polyglai.adapters.wav_codec import WavCodec, create_silent_wav, encode_wav, parse_wav_header
from polyglai.domain.services.format_negotiator import FormatNegotiator
from polyglai.ports.audio import AudioDecodeError


def test_encode_wav_writes_canonical_header():
    samples = np.array([0.0, 0.5, -0.5, 1.0], dtype=np.float32)

    data = encode_wav(samples, 16000)
    header = parse_wav_header(data)

    assert len(data) == 44 + 8
    assert data[:4] == b"RIFF"
    assert header.audio_format == 1
    assert header.num_channels == 1
    assert header.sample_rate == 16000
    assert header.byte_rate == 32000
    assert header.block_align == 2
    assert header.bits_per_sample == 16
    assert header.data_size == 8
    assert header.num_frames == 4


def test_encode_wav_scales_asymmetrically_and_clips():
    samples = np.array([-1.0, 1.0, -2.0, 2.0, 0.5], dtype=np.float32)

    pcm = np.frombuffer(encode_wav(samples, 8000)[44:], dtype="<i2")

    assert pcm.tolist() == [-32768, 32767, -32768, 32767, 16383]


def test_encode_wav_interleaves_channels():
    stereo = np.array([[0.0, 1.0], [-1.0, 0.0]], dtype=np.float32)

    data = encode_wav(stereo, 44100)

    header = parse_wav_header(data)
    assert header.num_channels == 2
    assert header.block_align == 4
    assert np.frombuffer(data[44:], dtype="<i2").tolist() == [0, 32767, -32768, 0]


def test_silent_probe_clip():
    data = create_silent_wav(100)

    header = parse_wav_header(data)
    assert header.num_frames == 1600
    assert set(data[44:]) == {0}


def test_parse_wav_header_rejects_other_data():
    with pytest.raises(AudioDecodeError):
        parse_wav_header(b"not a wav file at all, just some bytes here....")
    with pytest.raises(AudioDecodeError):
        parse_wav_header(b"RIFF")


def test_codec_converts_flac_to_wav():
    samples = np.linspace(-0.5, 0.5, 800, dtype=np.float32)
    buffer = io.BytesIO()
    sf.write(buffer, samples, 8000, format="FLAC")

    wav = WavCodec().to_wav(buffer.getvalue())

    header = parse_wav_header(wav)
    assert header.sample_rate == 8000
    assert header.num_frames == 800


def test_codec_converts_webm_opus_to_wav():
    webm = _webm_opus(seconds=1.0)

    audio, mime_type = FormatNegotiator(WavCodec()).convert_to_wav(webm, "audio/webm;codecs=opus")

    header = parse_wav_header(audio)
    assert mime_type == "audio/wav"
    assert header.sample_rate == 48000
    assert header.bits_per_sample == 16
    assert abs(header.num_frames - 48000) < 4800


def test_codec_rejects_undecodable_audio():
    with pytest.raises(AudioDecodeError):
        WavCodec().to_wav(b"\x1a\x45\xdf\xa3 truncated container bytes")
    with pytest.raises(AudioDecodeError):
        WavCodec().decode(b"")


def _webm_opus(seconds: float, rate: int = 48000) -> bytes:
    """Encode a sine tone the way Chromium's MediaRecorder does."""
    try:
        av.codec.Codec("libopus", "w")
    except ValueError:
        pytest.skip("FFmpeg build without libopus")

    frames = int(rate * seconds)
    tone = (0.3 * np.sin(2 * np.pi * 440 * np.arange(frames) / rate)).astype(np.float32)
    buffer = io.BytesIO()
    with av.open(buffer, mode="w", format="webm") as container:
        stream = container.add_stream("libopus", rate=rate)
        frame = av.AudioFrame.from_ndarray(np.stack([tone, tone]), format="fltp", layout="stereo")
        frame.sample_rate = rate
        for packet in stream.encode(frame):
            container.mux(packet)
        for packet in stream.encode(None):
            container.mux(packet)
    return buffer.getvalue()
