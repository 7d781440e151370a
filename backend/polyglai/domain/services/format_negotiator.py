"""Recording format selection and WAV conversion."""

import logging

from polyglai.domain.constants import RECORDER_BITS_PER_SECOND
from polyglai.domain.entities.recording import RecordingSession
from polyglai.domain.value_objects.audio_format import (
    DEFAULT_MIME_TYPE,
    FormatChoice,
    RuntimeCapabilities,
)
from polyglai.ports.audio import AudioCodecPort, AudioDecodeError

logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"

# Recording preference, best first
PREFERRED_MIME_TYPES = (
    "audio/wav",
    "audio/webm;codecs=opus",
    "audio/webm",
)

# (offset, magic, MIME type) of the containers browsers record into
CONTAINER_SIGNATURES = (
    (0, b"RIFF", "audio/wav"),
    (0, b"\x1aE\xdf\xa3", "audio/webm"),
    (0, b"OggS", "audio/ogg"),
    (4, b"ftyp", "audio/mp4"),
)


def content_type_for(mime_type: str) -> str:
    """Content-Type header for a recorded MIME type.

    Codec parameters are dropped; anything unrecognized is sent as WAV.
    """
    mime = (mime_type or "").lower()
    if "mp4" in mime:
        return "audio/mp4"
    if "webm" in mime:
        return "audio/webm"
    if "ogg" in mime:
        return "audio/ogg"
    return WAV_MIME_TYPE


def is_wav(mime_type: str) -> bool:
    mime = (mime_type or "").lower().split(";")[0].strip()
    return mime in ("audio/wav", "audio/wave", "audio/x-wav")


def sniff_mime_type(data: bytes) -> str | None:
    """Container MIME type from the leading bytes, None if unrecognized."""
    for offset, magic, mime_type in CONTAINER_SIGNATURES:
        if data[offset : offset + len(magic)] == magic:
            return mime_type
    return None


def _names_container(mime_type: str) -> bool:
    mime = (mime_type or "").lower()
    return any(name in mime for name in ("wav", "webm", "ogg", "mp4"))


class FormatNegotiator:
    """Picks a recording format and converts audio for the backend."""

    def __init__(self, codec: AudioCodecPort) -> None:
        self._codec = codec

    def select_recording_format(self, capabilities: RuntimeCapabilities) -> FormatChoice:
        """First supported format in preference order, else the runtime default.

        Never raises.
        """
        for mime_type in PREFERRED_MIME_TYPES:
            if capabilities.supports(mime_type):
                return FormatChoice(
                    mime_type=mime_type,
                    audio_bits_per_second=RECORDER_BITS_PER_SECOND,
                )
        logger.info("No preferred recording format supported, using runtime default")
        return FormatChoice(mime_type=DEFAULT_MIME_TYPE)

    def resolve_mime_type(self, data: bytes, mime_type: str | None) -> str:
        """MIME type of recorded bytes.

        A reported container type is trusted; the runtime default (or an
        unrecognized type) is replaced by what the bytes themselves say.
        """
        if mime_type and mime_type != DEFAULT_MIME_TYPE and _names_container(mime_type):
            return mime_type
        sniffed = sniff_mime_type(data)
        if sniffed is None:
            return mime_type or DEFAULT_MIME_TYPE
        logger.info(f"Recorded container detected as {sniffed} (reported {mime_type})")
        return sniffed

    def convert_to_wav(self, data: bytes, mime_type: str) -> tuple[bytes, str]:
        """Best-effort conversion to 16-bit PCM WAV.

        Returns:
            (audio, mime_type): the WAV bytes, or the original bytes and
            MIME type when decoding fails
        """
        if is_wav(mime_type):
            return data, mime_type
        try:
            return self._codec.to_wav(data), WAV_MIME_TYPE
        except AudioDecodeError as e:
            logger.warning(f"WAV conversion failed, sending original {mime_type} audio: {e}")
            return data, mime_type

    def prepare_for_backend(self, session: RecordingSession, requires_wav: bool) -> RecordingSession:
        """Session whose audio the backend can accept."""
        if not requires_wav:
            return session
        audio, mime_type = self.convert_to_wav(session.encoded_audio, session.mime_type)
        if audio is session.encoded_audio:
            return session
        return session.with_audio(audio, mime_type)
