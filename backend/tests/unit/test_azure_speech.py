import json
from collections import Counter

import httpx
import pytest

from polyglai.adapters.azure_speech import (
    RECOGNITION_PATH,
    AzureSpeechAdapter,
    EndpointState,
    mask_key,
    parse_recognition_payload,
)
from polyglai.adapters.wav_codec import create_silent_wav
from polyglai.domain.value_objects.transcription import RecognitionStatus
from polyglai.ports.speech import SpeechServiceNotConfiguredError, TranscriptionError

KEY = "0123456789abcdef0123456789abcdef0123"
REGION = "southeastasia"
ENDPOINT = "https://southeastasia.api.cognitive.microsoft.com"
STT_HOST = "southeastasia.stt.speech.microsoft.com"


def _adapter(handler, **kwargs) -> AzureSpeechAdapter:
    options = {"max_attempts": 1}
    options.update(kwargs)
    return AzureSpeechAdapter(
        subscription_key=options.pop("subscription_key", KEY),
        region=REGION,
        endpoint=options.pop("endpoint", ENDPOINT),
        transport=httpx.MockTransport(handler),
        **options,
    )


def _success(text: str = "Hello world.") -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "RecognitionStatus": "Success",
            "DisplayText": text,
            "Offset": 500000,
            "Duration": 12000000,
        },
    )


# =============================================================================
# Payload parsing
# =============================================================================


def test_parse_display_text_and_ticks():
    result = parse_recognition_payload(
        {"RecognitionStatus": "Success", "DisplayText": "Hola.", "Offset": 500000, "Duration": 12000000}
    )

    assert result.text == "Hola."
    assert result.recognition_status == RecognitionStatus.SUCCESS
    assert result.offset_ms == 50
    assert result.duration_ms == 1200


def test_parse_falls_back_to_nbest_fields():
    result = parse_recognition_payload(
        {
            "RecognitionStatus": "Success",
            "DisplayText": "",
            "NBest": [{"Display": "", "Lexical": "ni hao"}],
        }
    )

    assert result.text == "ni hao"


def test_parse_success_without_text_is_no_match():
    result = parse_recognition_payload({"RecognitionStatus": "Success", "NBest": []})

    assert result.recognition_status == RecognitionStatus.NO_MATCH
    assert result.text == ""


@pytest.mark.parametrize("status", ["NoMatch", "InitialSilenceTimeout", "BabbleTimeout"])
def test_parse_silence_statuses_are_no_match(status):
    assert parse_recognition_payload({"RecognitionStatus": status}).recognition_status == RecognitionStatus.NO_MATCH


def test_parse_unknown_status_is_error():
    result = parse_recognition_payload({"RecognitionStatus": "Error"})

    assert result.recognition_status == RecognitionStatus.ERROR


def test_mask_key():
    assert mask_key("") == "Not configured"
    assert mask_key(KEY) == f"{KEY[:8]}...{KEY[-4:]}"


# =============================================================================
# Configuration
# =============================================================================


def test_short_key_is_not_configured():
    adapter = _adapter(lambda request: _success(), subscription_key="short")

    assert not adapter.is_configured()
    assert not adapter.is_available()


@pytest.mark.asyncio
async def test_transcribe_without_credentials_raises():
    adapter = _adapter(lambda request: _success(), subscription_key="")

    with pytest.raises(SpeechServiceNotConfiguredError):
        await adapter.transcribe(b"audio", "audio/wav", "en-US")


def test_candidate_endpoints_are_deduplicated():
    adapter = _adapter(
        lambda request: _success(),
        alternative_endpoints=[f"https://{STT_HOST}", ENDPOINT + "/"],
    )

    candidates = adapter.candidate_endpoints()

    assert candidates[0] == ENDPOINT
    assert len(candidates) == len(set(candidates))
    assert f"https://{STT_HOST}" in candidates
    assert f"https://{REGION}.cognitiveservices.azure.com" in candidates


# =============================================================================
# Recognition
# =============================================================================


@pytest.mark.asyncio
async def test_transcribe_posts_short_audio_request(usage_log):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _success()

    adapter = _adapter(handler)
    audio = create_silent_wav(1000)

    result = await adapter.transcribe(audio, "audio/wav", "en-US")

    assert result.text == "Hello world."
    request = seen[0]
    assert request.url.host == STT_HOST
    assert request.url.path == RECOGNITION_PATH
    assert request.url.params["language"] == "en-US"
    assert request.url.params["format"] == "detailed"
    assert request.headers["Ocp-Apim-Subscription-Key"] == KEY
    assert request.headers["Content-Type"] == "audio/wav"
    entry = json.loads(usage_log.read_text().splitlines()[0])
    assert entry["audio_duration_seconds"] == pytest.approx(1.0)
    await adapter.close()


@pytest.mark.asyncio
async def test_http_error_is_reported_without_discovery():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="Access denied")

    adapter = _adapter(handler)

    with pytest.raises(TranscriptionError) as exc_info:
        await adapter.transcribe(b"audio", "audio/wav", "en-US")

    assert exc_info.value.status_code == 401
    assert exc_info.value.body == "Access denied"
    assert adapter.state == EndpointState.INITIALIZED


@pytest.mark.asyncio
async def test_unreachable_host_binds_first_answering_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == STT_HOST:
            raise httpx.ConnectError("connection refused", request=request)
        if "format" not in request.url.params:
            # Probe: a 4xx still proves the host is there
            return httpx.Response(400, text="bad probe")
        return _success("Bound.")

    adapter = _adapter(handler)

    result = await adapter.transcribe(b"audio", "audio/wav", "en-US")

    assert result.text == "Bound."
    assert adapter.state == EndpointState.BOUND
    assert adapter.bound_endpoint == ENDPOINT
    assert adapter.recognition_base_url == ENDPOINT


@pytest.mark.asyncio
async def test_not_found_endpoints_are_skipped_during_discovery():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "southeastasia.api.cognitive.microsoft.com":
            return httpx.Response(404)
        return httpx.Response(401)

    adapter = _adapter(handler)

    bound = await adapter.discover_endpoint()

    assert bound == f"https://{STT_HOST}"


@pytest.mark.asyncio
async def test_discovery_probes_each_candidate_once():
    probes: Counter = Counter()

    def handler(request: httpx.Request) -> httpx.Response:
        probes[(request.url.host, request.url.path)] += 1
        raise httpx.ConnectError("unreachable", request=request)

    adapter = _adapter(handler)

    with pytest.raises(TranscriptionError):
        await adapter.transcribe(b"audio", "audio/wav", "en-US")

    assert adapter.state == EndpointState.UNREACHABLE
    probed_hosts = {host for host, _ in probes}
    assert probed_hosts == {httpx.URL(c).host for c in adapter.candidate_endpoints()}
    # the failed recognition call plus one probe per candidate and path
    recognition_on_stt = probes.pop((STT_HOST, RECOGNITION_PATH))
    assert recognition_on_stt == 2
    assert all(count == 1 for count in probes.values())


@pytest.mark.asyncio
async def test_transport_errors_are_retried_before_discovery():
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.host)
        if len(calls) == 1:
            raise httpx.ReadTimeout("timed out", request=request)
        return _success()

    adapter = _adapter(handler, max_attempts=2)

    result = await adapter.transcribe(b"audio", "audio/wav", "en-US")

    assert result.is_success
    assert calls == [STT_HOST, STT_HOST]
    assert adapter.state == EndpointState.INITIALIZED


@pytest.mark.asyncio
async def test_diagnostics_for_missing_credentials_makes_no_requests():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    adapter = _adapter(handler, subscription_key="")

    report = await adapter.run_diagnostics()

    assert report["configuration"]["configured"] is False
    assert report["service_availability"]["reachable"] is False
    assert any("AZURE_SPEECH_KEY" in r for r in report["recommendations"])


@pytest.mark.asyncio
async def test_discovery_keeps_the_path_that_answered():
    v31 = "/speechtotext/v3.1/recognize"
    recognized: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == STT_HOST:
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path != v31:
            return httpx.Response(404)
        if "format" in request.url.params:
            recognized.append(str(request.url.copy_with(query=None)))
            return _success("Bound path.")
        return httpx.Response(400)

    adapter = _adapter(handler)

    result = await adapter.transcribe(b"audio", "audio/wav", "en-US")

    assert result.text == "Bound path."
    assert recognized == [f"{ENDPOINT}{v31}"]
    assert adapter.recognition_url == f"{ENDPOINT}{v31}"


@pytest.mark.asyncio
async def test_diagnostics_do_not_rebind_a_working_host():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == STT_HOST:
            return _success("hello")
        if request.url.path == RECOGNITION_PATH:
            return httpx.Response(404)
        return httpx.Response(401)

    adapter = _adapter(handler, endpoint="https://eastus.api.cognitive.microsoft.com")

    report = await adapter.run_diagnostics()
    result = await adapter.transcribe(b"audio", "audio/wav", "en-US")

    assert report["service_availability"]["reachable"] is True
    assert adapter.state == EndpointState.INITIALIZED
    assert adapter.bound_endpoint is None
    assert result.text == "hello"
