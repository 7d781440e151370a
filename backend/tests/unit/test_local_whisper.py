from types import SimpleNamespace

import pytest

from polyglai.adapters.local_whisper import LocalWhisperAdapter
from polyglai.domain.value_objects.transcription import RecognitionStatus, SourceEngine
from polyglai.infrastructure.usage_tracker import get_usage_summary
from polyglai.ports.speech import TranscriptionError


class FakeWhisperModel:
    def __init__(self, texts, duration=1.5, error=None):
        self.texts = texts
        self.duration = duration
        self.error = error
        self.calls = []

    def transcribe(self, audio, **kwargs):
        self.calls.append((audio.read(), kwargs))
        if self.error:
            raise self.error
        segments = (SimpleNamespace(text=t) for t in self.texts)
        return segments, SimpleNamespace(duration=self.duration)


def _adapter(model) -> LocalWhisperAdapter:
    adapter = LocalWhisperAdapter(model="tiny")
    adapter._model = model
    return adapter


def test_disabled_adapter_is_unavailable():
    adapter = LocalWhisperAdapter(enabled=False)

    assert not adapter.is_available()
    assert not adapter.requires_wav


@pytest.mark.asyncio
async def test_transcribe_joins_segments():
    model = FakeWhisperModel([" Buenos ", "días. ", "  "])

    result = await _adapter(model).transcribe(b"webm-bytes", "audio/webm", "es-ES")

    assert result.text == "Buenos días."
    assert result.source_engine == SourceEngine.LOCAL_FALLBACK
    audio, kwargs = model.calls[0]
    assert audio == b"webm-bytes"
    assert kwargs["language"] == "es"
    assert get_usage_summary()["by_service"]["local_whisper"]["total_audio_seconds"] == 1.5


@pytest.mark.asyncio
async def test_empty_transcript_is_no_match():
    result = await _adapter(FakeWhisperModel([])).transcribe(b"x", "audio/wav", "en-US")

    assert result.recognition_status == RecognitionStatus.NO_MATCH


@pytest.mark.asyncio
async def test_model_failure_raises_transcription_error():
    adapter = _adapter(FakeWhisperModel([], error=RuntimeError("decoder exploded")))

    with pytest.raises(TranscriptionError, match="decoder exploded"):
        await adapter.transcribe(b"x", "audio/wav", "en-US")
