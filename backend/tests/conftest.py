import asyncio
import random
from datetime import UTC, datetime

import pytest

from polyglai.domain.entities.assessment import AssessmentRecord
from polyglai.domain.entities.recording import RecordingSession
from polyglai.domain.services.format_negotiator import FormatNegotiator
from polyglai.domain.services.pronunciation_scorer import PronunciationScorer
from polyglai.domain.value_objects.transcription import SourceEngine, TranscriptionResult
from polyglai.infrastructure.usage_tracker import configure_usage_log
from polyglai.ports.audio import AudioDecodeError


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


class FakeCodec:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[bytes] = []

    def to_wav(self, data: bytes) -> bytes:
        self.calls.append(data)
        if self.fail:
            raise AudioDecodeError("cannot decode")
        return b"RIFF" + data


class FakeBackend:
    """Scripted SpeechRecognitionBackend."""

    def __init__(self, results=None, available: bool = True, requires_wav: bool = False, delay: float = 0.0):
        self.results = list(results or [])
        self.available = available
        self._requires_wav = requires_wav
        self.delay = delay
        self.calls: list[tuple[bytes, str, str]] = []

    @property
    def requires_wav(self) -> bool:
        return self._requires_wav

    def is_available(self) -> bool:
        return self.available

    async def transcribe(self, audio: bytes, mime_type: str, locale: str) -> TranscriptionResult:
        self.calls.append((audio, mime_type, locale))
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class InMemoryAssessmentStore:
    def __init__(self):
        self.records: dict[tuple[str, str, str, str], AssessmentRecord] = {}

    async def get_high_score(self, user_id, language, level, target_text):
        return self.records.get((user_id, language, level, target_text))

    async def save_assessment(self, record):
        key = (record.user_id, record.language, record.level, record.target_text)
        existing = self.records.get(key)
        if existing is not None and record.score <= existing.score:
            return False
        self.records[key] = record
        return True

    async def get_assessed_texts(self, user_id, language, level):
        return [k[3] for k in self.records if k[:3] == (user_id, language, level)]

    async def list_high_scores(self, user_id, language=None):
        return [
            r for r in self.records.values() if r.user_id == user_id and (language is None or r.language == language)
        ]


def remote_success(text: str) -> TranscriptionResult:
    return TranscriptionResult.success(text, SourceEngine.REMOTE)


def make_session(audio: bytes = b"audio-bytes", mime_type: str = "audio/webm;codecs=opus") -> RecordingSession:
    return RecordingSession(
        encoded_audio=audio,
        mime_type=mime_type,
        duration_ms=1200,
        started_at=datetime.now(UTC),
        recording_id="rec-1",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codec():
    return FakeCodec()


@pytest.fixture
def negotiator(codec):
    return FormatNegotiator(codec)


@pytest.fixture
def scorer():
    return PronunciationScorer(rng=random.Random(1234))


@pytest.fixture
def store():
    return InMemoryAssessmentStore()


@pytest.fixture(autouse=True)
def usage_log(tmp_path):
    path = tmp_path / "usage.jsonl"
    configure_usage_log(path)
    yield path
    configure_usage_log(None)
