"""WAV codec adapter: decode recorder audio, write canonical 16-bit PCM WAV."""

import io
import logging
import struct
from dataclasses import dataclass

import av
import numpy as np
import soundfile as sf

from polyglai.ports.audio import AudioDecodeError

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44
PCM_FORMAT = 1
BITS_PER_SAMPLE = 16
PROBE_SAMPLE_RATE = 16000


@dataclass(frozen=True)
class WavHeader:
    """Fields of a canonical 44-byte RIFF/WAVE header."""

    audio_format: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def num_frames(self) -> int:
        return self.data_size // self.block_align if self.block_align else 0


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode float samples in [-1, 1] as 16-bit PCM WAV.

    Args:
        samples: Array of shape (frames,) or (frames, channels)
        sample_rate: Frames per second

    Returns:
        44-byte header followed by little-endian interleaved PCM
    """
    pcm = np.asarray(samples, dtype=np.float32)
    if pcm.ndim == 1:
        pcm = pcm[:, None]
    num_channels = pcm.shape[1]

    # Asymmetric scale so -1.0 and 1.0 both land on the int16 extremes
    scaled = np.where(pcm < 0, pcm * 32768.0, pcm * 32767.0)
    data = np.ascontiguousarray(np.clip(scaled, -32768, 32767).astype("<i2")).tobytes()

    block_align = num_channels * BITS_PER_SAMPLE // 8
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + len(data),
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT,
        num_channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        len(data),
    )
    return header + data


def parse_wav_header(data: bytes) -> WavHeader:
    """Read back a canonical WAV header.

    Raises:
        AudioDecodeError: If ``data`` is not a canonical RIFF/WAVE file
    """
    if len(data) < WAV_HEADER_SIZE:
        raise AudioDecodeError(f"WAV data too short: {len(data)} bytes")

    (
        riff,
        _riff_size,
        wave,
        fmt,
        _fmt_size,
        audio_format,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_id,
        data_size,
    ) = struct.unpack("<4sI4s4sIHHIIHH4sI", data[:WAV_HEADER_SIZE])

    if riff != b"RIFF" or wave != b"WAVE" or fmt != b"fmt " or data_id != b"data":
        raise AudioDecodeError("Not a canonical RIFF/WAVE header")

    return WavHeader(
        audio_format=audio_format,
        num_channels=num_channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size,
    )


def create_silent_wav(duration_ms: int = 100, sample_rate: int = PROBE_SAMPLE_RATE) -> bytes:
    """Mono 16-bit silence, used to probe recognition endpoints."""
    frames = sample_rate * duration_ms // 1000
    return encode_wav(np.zeros(frames, dtype=np.float32), sample_rate)


class WavCodec:
    """AudioCodecPort implementation.

    libsndfile reads WAV, FLAC and OGG directly. Browser containers it does
    not understand (WebM/Opus from Chromium, MP4/AAC from Safari) are decoded
    with PyAV, the same FFmpeg bindings faster-whisper decodes with.
    """

    def decode(self, data: bytes) -> tuple[np.ndarray, int]:
        """Decode to float32 samples of shape (frames, channels).

        Raises:
            AudioDecodeError: If neither libsndfile nor FFmpeg can read the data
        """
        if not data:
            raise AudioDecodeError("No audio data to decode")
        try:
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (sf.SoundFileError, RuntimeError, ValueError) as e:
            logger.debug(f"libsndfile cannot read audio, trying FFmpeg: {e}")
            return _decode_container(data)
        return samples, int(sample_rate)

    def to_wav(self, data: bytes) -> bytes:
        samples, sample_rate = self.decode(data)
        return encode_wav(samples, sample_rate)


def _decode_container(data: bytes) -> tuple[np.ndarray, int]:
    """Decode the first audio stream of a container with PyAV."""
    planes: list[np.ndarray] = []
    sample_rate = 0
    try:
        with av.open(io.BytesIO(data)) as container:
            stream = next((s for s in container.streams if s.type == "audio"), None)
            if stream is None:
                raise AudioDecodeError("No audio stream in container")

            resampler = None
            for frame in container.decode(stream):
                if resampler is None:
                    sample_rate = frame.sample_rate
                    # Planar float: one row per channel
                    resampler = av.AudioResampler(format="fltp", layout=frame.layout.name, rate=sample_rate)
                planes.extend(f.to_ndarray() for f in resampler.resample(frame))
            if resampler is not None:
                planes.extend(f.to_ndarray() for f in resampler.resample(None))
    except av.error.FFmpegError as e:
        raise AudioDecodeError(f"Unsupported audio encoding: {e}") from e

    if not planes:
        raise AudioDecodeError("Container holds no decodable audio")
    samples = np.concatenate(planes, axis=1).T.astype(np.float32)
    return samples, int(sample_rate)
