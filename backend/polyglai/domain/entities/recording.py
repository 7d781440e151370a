"""Recording entities for the capture lifecycle."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from polyglai.domain.constants import MIN_RECORDING_DURATION_MS
from polyglai.domain.value_objects.audio_format import FormatChoice


class RecordingState(StrEnum):
    """Recording handle states.

    RECORDING -> STOPPED (sealed into a RecordingSession)
    RECORDING -> ABANDONED (buffer dropped, nothing sealed)
    """

    RECORDING = "recording"
    STOPPED = "stopped"
    ABANDONED = "abandoned"


@dataclass
class RecordingHandle:
    """An in-progress recording.

    Attributes:
        id: Unique recording identifier (UUID v4)
        format: Container/codec the client records in
        started_at: When the input stream was opened
        chunks: Encoded chunks buffered so far
        state: Current lifecycle state
    """

    format: FormatChoice
    started_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))
    chunks: list[bytes] = field(default_factory=list)
    state: RecordingState = RecordingState.RECORDING

    @property
    def is_active(self) -> bool:
        return self.state == RecordingState.RECORDING

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    @property
    def playback_url(self) -> str:
        """Relative URL serving the raw recording once stopped."""
        return f"/api/recordings/{self.id}/audio"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "format": self.format.to_dict(),
            "started_at": self.started_at.isoformat(),
            "state": str(self.state),
            "buffered_bytes": self.buffered_bytes,
            "playback_url": self.playback_url,
        }


@dataclass(frozen=True)
class RecordingSession:
    """A sealed recording ready for transcription.

    Attributes:
        encoded_audio: The complete encoded blob
        mime_type: Declared MIME type of ``encoded_audio``
        duration_ms: Wall-clock length from start to stop
        started_at: When recording started
        recording_id: Identifier of the handle it was sealed from
    """

    encoded_audio: bytes
    mime_type: str
    duration_ms: int
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    recording_id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        if self.duration_ms < 0:
            raise ValueError(f"duration_ms must be >= 0, got {self.duration_ms}")

    @property
    def is_valid(self) -> bool:
        """Long enough to send to transcription."""
        return self.duration_ms >= MIN_RECORDING_DURATION_MS

    @property
    def size_bytes(self) -> int:
        return len(self.encoded_audio)

    def with_audio(self, encoded_audio: bytes, mime_type: str) -> "RecordingSession":
        """Copy carrying converted audio (same timing and identity)."""
        return RecordingSession(
            encoded_audio=encoded_audio,
            mime_type=mime_type,
            duration_ms=self.duration_ms,
            started_at=self.started_at,
            recording_id=self.recording_id,
        )
