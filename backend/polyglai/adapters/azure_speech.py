"""Azure Speech Services adapter.

Implements SpeechRecognitionBackend over the short-audio REST API:

    POST https://{region}.stt.speech.microsoft.com/speech/recognition/
         conversation/cognitiveservices/v1?language={locale}&format=detailed

Per-call resilience is a short tenacity retry on transport failures.
Endpoint discovery is separate: when the recognition host cannot be
reached at all, each candidate endpoint is probed once per recognition path
with a short silent WAV. The first endpoint and path that answer (any status
but 404) are adopted together for the rest of the adapter's life.
"""

import logging
from enum import StrEnum
from typing import Any

import httpx

from polyglai.adapters.wav_codec import create_silent_wav, parse_wav_header
from polyglai.domain.constants import PROBE_AUDIO_DURATION_MS
from polyglai.domain.languages import RECOGNITION_LANGUAGES
from polyglai.domain.services.format_negotiator import content_type_for, is_wav
from polyglai.domain.value_objects.transcription import (
    RecognitionStatus,
    SourceEngine,
    TranscriptionResult,
)
from polyglai.infrastructure.retry import TransientError, log_retry, retry_operation
from polyglai.infrastructure.usage_tracker import log_azure_stt_usage
from polyglai.ports.audio import AudioDecodeError
from polyglai.ports.speech import SpeechServiceNotConfiguredError, TranscriptionError

logger = logging.getLogger(__name__)

RECOGNITION_PATH = "/speech/recognition/conversation/cognitiveservices/v1"
PROBE_PATHS = (
    RECOGNITION_PATH,
    "/speechtotext/v3.1/recognize",
    "/speechtotext/v3.0/recognize",
)
PROBE_LOCALE = "en-US"

# Azure reports Duration/Offset in 100-nanosecond ticks
TICKS_PER_MS = 10_000

MIN_KEY_LENGTH = 32


class EndpointState(StrEnum):
    """Endpoint discovery state.

    INITIALIZED -> PROBING -> BOUND
                          \\-> UNREACHABLE
    """

    INITIALIZED = "initialized"
    PROBING = "probing"
    BOUND = "bound"
    UNREACHABLE = "unreachable"


def mask_key(key: str) -> str:
    """First 8 and last 4 characters of a subscription key."""
    if not key:
        return "Not configured"
    if len(key) <= 12:
        return "*" * len(key)
    return f"{key[:8]}...{key[-4:]}"


class AzureSpeechAdapter:
    """Azure Speech REST adapter implementing SpeechRecognitionBackend.

    Uses lazy client initialization for connection reuse.
    """

    def __init__(
        self,
        subscription_key: str,
        region: str,
        endpoint: str,
        alternative_endpoints: list[str] | None = None,
        timeout: float = 30.0,
        max_attempts: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize adapter.

        Args:
            subscription_key: Azure Speech resource key
            region: Azure region (e.g. "southeastasia")
            endpoint: Configured resource endpoint
            alternative_endpoints: Extra endpoints to try during discovery
            timeout: Request timeout in seconds
            max_attempts: Attempts per recognition call (transport errors only)
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self._key = subscription_key or ""
        self._region = region or ""
        self._endpoint = (endpoint or "").rstrip("/")
        self._alternatives = [e.rstrip("/") for e in (alternative_endpoints or []) if e]
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._state = EndpointState.INITIALIZED
        self._bound_endpoint: str | None = None
        self._bound_path: str | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy client initialization for connection reuse."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    @property
    def requires_wav(self) -> bool:
        return True

    @property
    def state(self) -> EndpointState:
        return self._state

    @property
    def bound_endpoint(self) -> str | None:
        return self._bound_endpoint

    @property
    def recognition_base_url(self) -> str:
        """Host used for recognition calls (the discovered one once bound)."""
        return self._bound_endpoint or f"https://{self._region}.stt.speech.microsoft.com"

    @property
    def recognition_url(self) -> str:
        return f"{self.recognition_base_url}{self._bound_path or RECOGNITION_PATH}"

    def is_configured(self) -> bool:
        """Key longer than 32 characters, region and endpoint present."""
        return bool(self._key and len(self._key) > MIN_KEY_LENGTH and self._region and self._endpoint)

    def is_available(self) -> bool:
        return self.is_configured()

    def candidate_endpoints(self) -> list[str]:
        """Ordered, de-duplicated endpoints tried during discovery."""
        candidates = [self._endpoint, *self._alternatives]
        if self._region:
            candidates += [
                f"https://{self._region}.stt.speech.microsoft.com",
                f"https://{self._region}.cognitiveservices.azure.com",
                f"https://{self._region}.api.cognitive.microsoft.com",
            ]
        seen: set[str] = set()
        ordered = []
        for candidate in candidates:
            if candidate and candidate not in seen:
                seen.add(candidate)
                ordered.append(candidate)
        return ordered

    async def transcribe(self, audio: bytes, mime_type: str, locale: str) -> TranscriptionResult:
        """Recognize short audio.

        Raises:
            SpeechServiceNotConfiguredError: If credentials are missing
            TranscriptionError: Non-2xx response, unparsable body, or no
                reachable endpoint
        """
        if not self.is_configured():
            raise SpeechServiceNotConfiguredError("Azure Speech Service not configured")

        try:
            response = await retry_operation(
                self._post_recognition,
                self.recognition_url,
                audio,
                mime_type,
                locale,
                max_attempts=self._max_attempts,
                retryable_exceptions=(TransientError,),
                on_retry=log_retry("azure recognition"),
            )
        except TransientError as e:
            logger.warning(f"Azure recognition host unreachable, starting discovery: {e}")
            bound = await self.discover_endpoint()
            if bound is None:
                raise TranscriptionError(f"Azure Speech Service unreachable: {e}") from e
            try:
                response = await self._post_recognition(bound, audio, mime_type, locale)
            except TransientError as retry_error:
                raise TranscriptionError(
                    f"Azure Speech Service unreachable: {retry_error}"
                ) from retry_error

        result = self._parse_response(response)
        log_azure_stt_usage(
            audio_duration_seconds=self._audio_seconds(audio, mime_type, result),
            locale=locale,
            recognition_status=str(result.recognition_status),
        )
        return result

    async def _post_recognition(
        self, url: str, audio: bytes, mime_type: str, locale: str
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.post(
                url,
                params={"language": locale, "format": "detailed"},
                headers=self._headers(content_type_for(mime_type)),
                content=audio,
            )
        except httpx.TransportError as e:
            raise TransientError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(f"Azure Speech Service error {response.status_code}: {response.text[:200]}")
            raise TranscriptionError(
                f"Azure Speech Service error: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def _headers(self, content_type: str) -> dict[str, str]:
        return {
            "Ocp-Apim-Subscription-Key": self._key,
            "Content-Type": content_type,
            "Accept": "application/json",
        }

    def _parse_response(self, response: httpx.Response) -> TranscriptionResult:
        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionError(
                "Azure Speech Service returned invalid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e
        return parse_recognition_payload(payload)

    @staticmethod
    def _audio_seconds(audio: bytes, mime_type: str, result: TranscriptionResult) -> float:
        if is_wav(mime_type):
            try:
                header = parse_wav_header(audio)
                if header.sample_rate:
                    return header.num_frames / header.sample_rate
            except AudioDecodeError:
                pass
        return (result.duration_ms or 0) / 1000

    async def discover_endpoint(self) -> str | None:
        """Probe each candidate once and bind the first reachable one.

        Returns:
            The adopted recognition URL, or None if every candidate failed
        """
        self._state = EndpointState.PROBING
        probe_audio = create_silent_wav(PROBE_AUDIO_DURATION_MS)

        for candidate in self.candidate_endpoints():
            path = await self._probe_endpoint(candidate, probe_audio)
            if path is not None:
                self._bound_endpoint = candidate
                self._bound_path = path
                self._state = EndpointState.BOUND
                logger.info(f"Azure Speech endpoint bound: {candidate}{path}")
                return self.recognition_url

        self._state = EndpointState.UNREACHABLE
        logger.error("No Azure Speech endpoint reachable")
        return None

    async def _probe_endpoint(self, endpoint: str, probe_audio: bytes) -> str | None:
        """First recognition path on ``endpoint`` that answers, if any."""
        for path in PROBE_PATHS:
            if await self._answers(f"{endpoint}{path}", probe_audio):
                return path
        return None

    async def _answers(self, url: str, probe_audio: bytes) -> bool:
        """Any response except 404 proves the URL is reachable."""
        client = await self._get_client()
        params = {"language": PROBE_LOCALE} if url.endswith(RECOGNITION_PATH) else None
        try:
            response = await client.post(
                url,
                params=params,
                headers=self._headers("audio/wav"),
                content=probe_audio,
            )
        except httpx.TransportError as e:
            logger.debug(f"Probe {url} failed: {e}")
            return False
        logger.debug(f"Probe {url} answered {response.status_code}")
        return response.status_code != 404

    async def test_connection(self) -> bool:
        """Check the current recognition URL, rediscovering only if it is gone."""
        if await self._answers(self.recognition_url, create_silent_wav(PROBE_AUDIO_DURATION_MS)):
            return True
        logger.warning(f"Azure recognition URL not answering: {self.recognition_url}")
        return await self.discover_endpoint() is not None

    def service_info(self) -> dict[str, Any]:
        """Configuration summary with the key masked."""
        return {
            "configured": self.is_configured(),
            "subscription_key": mask_key(self._key),
            "region": self._region,
            "endpoint": self._endpoint,
            "recognition_url": self.recognition_url,
            "endpoint_state": str(self._state),
            "bound_endpoint": self._bound_endpoint,
            "supported_languages": len(RECOGNITION_LANGUAGES),
        }

    def available_languages(self) -> dict[str, str]:
        """Recognition locale -> display name."""
        return dict(RECOGNITION_LANGUAGES)

    async def run_diagnostics(self) -> dict[str, Any]:
        """Configuration, reachability and recommendations in one report."""
        configuration = self.service_info()
        recommendations: list[str] = []

        if not self._key:
            recommendations.append("Set AZURE_SPEECH_KEY to your Speech resource key.")
        elif len(self._key) <= MIN_KEY_LENGTH:
            recommendations.append("AZURE_SPEECH_KEY looks too short; copy the full key from the portal.")
        if not self._region:
            recommendations.append("Set AZURE_SPEECH_REGION (e.g. southeastasia).")
        if not self._endpoint:
            recommendations.append("Set AZURE_SPEECH_ENDPOINT to your resource endpoint.")

        reachable = False
        if self.is_configured():
            reachable = await self.test_connection()
            if not reachable:
                recommendations.append(
                    "No Speech endpoint answered. Check network access and the region/endpoint settings."
                )

        return {
            "configuration": configuration,
            "service_availability": {
                "reachable": reachable,
                "endpoint_state": str(self._state),
                "bound_endpoint": self._bound_endpoint,
                "candidates": self.candidate_endpoints(),
            },
            "recommendations": recommendations,
        }

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


def parse_recognition_payload(payload: dict[str, Any]) -> TranscriptionResult:
    """Map a detailed-format recognition response to a TranscriptionResult.

    Text candidates, first non-empty wins: DisplayText, then NBest[0]'s
    Display, Lexical, ITN, MaskedITN. A Success without text is NoMatch.
    """
    status = RecognitionStatus.from_azure(payload.get("RecognitionStatus"))
    duration_ms = _ticks_to_ms(payload.get("Duration"))
    offset_ms = _ticks_to_ms(payload.get("Offset"))

    if status == RecognitionStatus.SUCCESS:
        text = _first_text(payload)
        if text:
            return TranscriptionResult.success(
                text,
                SourceEngine.REMOTE,
                duration_ms=duration_ms,
                offset_ms=offset_ms,
            )
        return TranscriptionResult.no_match(SourceEngine.REMOTE)
    if status == RecognitionStatus.NO_MATCH:
        return TranscriptionResult.no_match(SourceEngine.REMOTE)

    logger.warning(f"Azure recognition status: {payload.get('RecognitionStatus')}")
    return TranscriptionResult.error(SourceEngine.REMOTE)


def _first_text(payload: dict[str, Any]) -> str:
    candidates = [payload.get("DisplayText")]
    nbest = payload.get("NBest")
    if isinstance(nbest, list) and nbest and isinstance(nbest[0], dict):
        best = nbest[0]
        candidates += [best.get(field) for field in ("Display", "Lexical", "ITN", "MaskedITN")]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return ""


def _ticks_to_ms(value: Any) -> int | None:
    if isinstance(value, int | float):
        return int(value) // TICKS_PER_MS
    return None
