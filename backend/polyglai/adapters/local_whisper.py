"""In-process speech recognition fallback using faster-whisper.

faster-whisper is an optional extra (``pip install polyglai[local]``); when it
is not installed the adapter reports itself unavailable and the transcription
service skips the fallback.
"""

import asyncio
import importlib.util
import io
import logging
import threading
import time

from polyglai.domain.value_objects.transcription import SourceEngine, TranscriptionResult
from polyglai.infrastructure.usage_tracker import log_local_whisper_usage
from polyglai.ports.speech import TranscriptionError

logger = logging.getLogger(__name__)


class LocalWhisperAdapter:
    """faster-whisper backend implementing SpeechRecognitionBackend.

    The model is loaded on first use and reused afterwards. Decoding is done
    by faster-whisper itself (PyAV), so any container the browser records
    is accepted without WAV conversion.
    """

    def __init__(
        self,
        model: str = "base",
        device: str = "auto",
        compute_type: str = "int8",
        enabled: bool = True,
        beam_size: int = 1,
    ) -> None:
        self._model_name = model
        self._device = device
        self._compute_type = compute_type
        self._enabled = enabled
        self._beam_size = max(1, beam_size)
        self._model = None
        self._model_lock = threading.Lock()

    @property
    def requires_wav(self) -> bool:
        return False

    def is_available(self) -> bool:
        """Enabled in config and faster-whisper importable."""
        return self._enabled and importlib.util.find_spec("faster_whisper") is not None

    async def transcribe(self, audio: bytes, mime_type: str, locale: str) -> TranscriptionResult:
        """Recognize speech in a worker thread.

        Raises:
            TranscriptionError: If the model fails to load or decode
        """
        start_time = time.time()
        language = locale.split("-")[0].lower() if locale else None
        try:
            text, duration = await asyncio.to_thread(self._run_transcribe, audio, language)
        except (RuntimeError, ValueError, OSError) as e:
            raise TranscriptionError(f"Local recognition failed: {e}") from e

        log_local_whisper_usage(
            audio_duration_seconds=duration,
            model=self._model_name,
            processing_seconds=time.time() - start_time,
        )
        if not text:
            return TranscriptionResult.no_match(SourceEngine.LOCAL_FALLBACK)
        return TranscriptionResult.success(text, SourceEngine.LOCAL_FALLBACK)

    def _run_transcribe(self, audio: bytes, language: str | None) -> tuple[str, float]:
        model = self._ensure_model()
        segments, info = model.transcribe(
            io.BytesIO(audio),
            language=language,
            beam_size=self._beam_size,
            task="transcribe",
        )
        text = " ".join(s.text.strip() for s in segments if s.text and s.text.strip())
        return text.strip(), float(getattr(info, "duration", 0.0) or 0.0)

    def _ensure_model(self):
        if self._model is None:
            with self._model_lock:
                if self._model is None:
                    # Import here to avoid loading the model runtime when not used
                    from faster_whisper import WhisperModel

                    logger.info(f"Loading Whisper model {self._model_name} on {self._device}")
                    self._model = WhisperModel(
                        self._model_name,
                        device=self._device,
                        compute_type=self._compute_type,
                    )
        return self._model
