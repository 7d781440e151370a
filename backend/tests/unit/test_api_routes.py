import random

import pytest
from conftest import FakeBackend, FakeClock, InMemoryAssessmentStore, remote_success
from fastapi.testclient import TestClient

from polyglai.adapters.upload_audio_input import UploadedAudioInput
from polyglai.api.dependencies import get_assessment_service, get_audio_capture, get_audio_input
from polyglai.app import app
from polyglai.domain.services.assessment_service import AssessmentService
from polyglai.domain.services.audio_capture import AudioCapture
from polyglai.domain.services.pronunciation_scorer import PronunciationScorer
from polyglai.domain.services.transcription_service import TranscriptionService
from polyglai.domain.value_objects.transcription import SourceEngine, TranscriptionResult

WEBM = ["audio/webm;codecs=opus", "audio/webm"]


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("AZURE_SPEECH_KEY", "")
    monkeypatch.setenv("LOCAL_FALLBACK_ENABLED", "false")
    monkeypatch.setenv("ASSESSMENT_DB_PATH", str(tmp_path / "assessments.db"))
    monkeypatch.setenv("USAGE_LOG_PATH", str(tmp_path / "usage.jsonl"))


class Harness:
    """Wires the recording routes to fakes and a hand-driven clock."""

    def __init__(self, negotiator, results=None, remote_available=True):
        self.clock = FakeClock()
        self.audio_input = UploadedAudioInput()
        self.remote = FakeBackend(results or [], available=remote_available, requires_wav=True)
        self.store = InMemoryAssessmentStore()
        self.capture = AudioCapture(self.audio_input, negotiator, clock=self.clock)
        self.service = AssessmentService(
            self.capture,
            TranscriptionService(self.remote, negotiator),
            PronunciationScorer(rng=random.Random(5)),
            self.store,
        )

    def install(self) -> None:
        app.dependency_overrides[get_audio_input] = lambda: self.audio_input
        app.dependency_overrides[get_audio_capture] = lambda: self.capture
        app.dependency_overrides[get_assessment_service] = lambda: self.service


@pytest.fixture
def harness_factory(env, negotiator):
    def build(**kwargs) -> Harness:
        harness = Harness(negotiator, **kwargs)
        harness.install()
        return harness

    yield build
    app.dependency_overrides.clear()


@pytest.fixture
def client(env):
    with TestClient(app) as test_client:
        yield test_client


def _start(client, permission="granted"):
    return client.post(
        "/api/recordings/start",
        json={"supported_mime_types": WEBM, "microphone_permission": permission},
    )


def _error_code(response) -> str:
    return response.json()["detail"]["error"]["code"]


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_format_negotiation(client):
    resp = client.get("/api/recordings/format", params={"mime_types": ["audio/webm", "audio/wav"]})

    assert resp.status_code == 200
    assert resp.json()["mime_type"] == "audio/wav"
    assert resp.json()["recorder_options"] == {"mimeType": "audio/wav", "audioBitsPerSecond": 16000}


def test_format_falls_back_to_runtime_default(client):
    resp = client.get("/api/recordings/format")

    assert resp.json()["mime_type"] == "default"
    assert resp.json()["recorder_options"] == {}


def test_denied_microphone_returns_403(client):
    resp = _start(client, permission="denied")

    assert resp.status_code == 403
    assert _error_code(resp) == "MICROPHONE_PERMISSION_DENIED"


def test_second_start_returns_409(harness_factory, client):
    harness_factory()
    first = _start(client)

    resp = _start(client)

    assert first.status_code == 201
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"]["details"]["active_recording_id"] == first.json()["id"]


def test_record_stop_and_play_back(harness_factory, client):
    harness = harness_factory()
    recording_id = _start(client).json()["id"]
    client.post(f"/api/recordings/{recording_id}/chunks", content=b"first")
    client.post(f"/api/recordings/{recording_id}/chunks", content=b"second")
    harness.clock.advance_ms(1500)

    stopped = client.post(f"/api/recordings/{recording_id}/stop")
    audio = client.get(f"/api/recordings/{recording_id}/audio")

    assert stopped.status_code == 200
    assert stopped.json()["duration_ms"] == 1500
    assert stopped.json()["size_bytes"] == len(b"firstsecond")
    assert audio.content == b"firstsecond"
    assert audio.headers["content-type"] == "audio/webm"


def test_short_recording_returns_422(harness_factory, client):
    harness = harness_factory()
    recording_id = _start(client).json()["id"]
    client.post(f"/api/recordings/{recording_id}/chunks", content=b"blip")
    harness.clock.advance_ms(200)

    resp = client.post(f"/api/recordings/{recording_id}/stop")

    assert resp.status_code == 422
    assert _error_code(resp) == "RECORDING_TOO_SHORT"
    assert client.get(f"/api/recordings/{recording_id}/audio").status_code == 404


def test_abandoned_recording_refuses_chunks(harness_factory, client):
    harness_factory()
    recording_id = _start(client).json()["id"]

    deleted = client.delete(f"/api/recordings/{recording_id}")
    resp = client.post(f"/api/recordings/{recording_id}/chunks", content=b"late")

    assert deleted.status_code == 204
    assert resp.status_code == 404
    assert _error_code(resp) == "RECORDING_NOT_FOUND"


def test_assess_recording_scores_and_stores_best(harness_factory, client):
    harness = harness_factory(results=[remote_success("cat")])
    recording_id = _start(client).json()["id"]
    client.post(f"/api/recordings/{recording_id}/chunks", content=b"meow")
    harness.clock.advance_ms(900)

    resp = client.post(
        f"/api/recordings/{recording_id}/assess",
        json={"target_text": "cat", "level": "beginner", "language": "english", "user_id": "learner-1"},
    )
    history = client.get("/api/users/learner-1/assessments")

    assert resp.status_code == 200
    body = resp.json()
    assert body["transcript"] == "cat"
    assert [p["sound"] for p in body["score"]["phoneme_breakdown"]] == ["c", "a", "t"]
    assert body["is_new_high_score"] is True
    assert history.json()["assessments"][0]["target_text"] == "cat"


def test_assess_without_speech_returns_422(harness_factory, client):
    harness = harness_factory(results=[TranscriptionResult.no_match(SourceEngine.REMOTE)])
    recording_id = _start(client).json()["id"]
    client.post(f"/api/recordings/{recording_id}/chunks", content=b"silence")
    harness.clock.advance_ms(900)

    resp = client.post(f"/api/recordings/{recording_id}/assess", json={"target_text": "cat"})

    assert resp.status_code == 422
    assert _error_code(resp) == "NO_SPEECH_DETECTED"


def test_assess_without_any_recognizer_returns_503(harness_factory, client):
    harness = harness_factory(remote_available=False)
    recording_id = _start(client).json()["id"]
    client.post(f"/api/recordings/{recording_id}/chunks", content=b"audio")
    harness.clock.advance_ms(900)

    resp = client.post(f"/api/recordings/{recording_id}/assess", json={"target_text": "cat"})

    assert resp.status_code == 503
    assert _error_code(resp) == "SPEECH_NOT_CONFIGURED"


def test_score_transcript(client):
    resp = client.post(
        "/api/assessments/score",
        json={
            "target_text": "Where is the station?",
            "transcript": "where is the station",
            "level": "advanced",
        },
    )

    assert resp.status_code == 200
    metrics = resp.json()["score"]["per_metric_scores"]
    assert metrics["pronunciation"] == 98
    assert metrics["completeness"] == 100


def test_score_transcript_rejects_unknown_level(client):
    resp = client.post(
        "/api/assessments/score",
        json={"target_text": "cat", "transcript": "cat", "level": "expert"},
    )

    assert resp.status_code == 422


def test_speech_status_without_credentials(client):
    body = client.get("/api/speech/status").json()

    assert body["remote_available"] is False
    assert body["fallback_available"] is False
    assert body["remote"]["subscription_key"] == "Not configured"


def test_speech_languages(client):
    body = client.get("/api/speech/languages").json()

    assert "korean" in body["supported_languages"]
    assert body["language_locales"]["japanese"] == "ja-JP"
    assert body["recognition_languages"]["en-US"] == "English (United States)"
