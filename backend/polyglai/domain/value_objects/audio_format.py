"""Recording format value objects."""

from dataclasses import dataclass, field

DEFAULT_MIME_TYPE = "default"


@dataclass(frozen=True)
class RuntimeCapabilities:
    """What the recording runtime reports it can record.

    Replaces user-agent sniffing: the client lists the MIME types its
    recorder accepts (``MediaRecorder.isTypeSupported`` in a browser).

    Attributes:
        supported_mime_types: MIME types the recorder accepts
        microphone_permission: "granted", "denied" or "prompt"
    """

    supported_mime_types: frozenset[str] = field(default_factory=frozenset)
    microphone_permission: str = "prompt"

    def supports(self, mime_type: str) -> bool:
        return mime_type.lower() in {m.lower() for m in self.supported_mime_types}

    @property
    def permission_denied(self) -> bool:
        return self.microphone_permission == "denied"

    @classmethod
    def from_list(cls, mime_types: list[str], microphone_permission: str = "prompt") -> "RuntimeCapabilities":
        return cls(
            supported_mime_types=frozenset(m.strip() for m in mime_types if m and m.strip()),
            microphone_permission=microphone_permission,
        )


@dataclass(frozen=True)
class FormatChoice:
    """Container/codec picked for a recording.

    ``mime_type == "default"`` means the runtime picks its own format;
    no bitrate hint is sent in that case.
    """

    mime_type: str
    audio_bits_per_second: int | None = None

    @property
    def is_default(self) -> bool:
        return self.mime_type == DEFAULT_MIME_TYPE

    @property
    def is_wav(self) -> bool:
        return self.mime_type.startswith("audio/wav")

    def recorder_options(self) -> dict:
        """Options to hand to the client's recorder constructor."""
        if self.is_default:
            return {}
        options: dict = {"mimeType": self.mime_type}
        if self.audio_bits_per_second:
            options["audioBitsPerSecond"] = self.audio_bits_per_second
        return options

    def to_dict(self) -> dict:
        return {
            "mime_type": self.mime_type,
            "audio_bits_per_second": self.audio_bits_per_second,
            "recorder_options": self.recorder_options(),
        }
