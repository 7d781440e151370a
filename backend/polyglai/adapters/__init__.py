# Adapters layer - Concrete implementations (Azure Speech, faster-whisper, soundfile, uploads)

from .azure_speech import AzureSpeechAdapter, EndpointState, parse_recognition_payload
from .local_whisper import LocalWhisperAdapter
from .upload_audio_input import UploadedAudioInput, UploadedAudioStream
from .wav_codec import WavCodec, WavHeader, create_silent_wav, encode_wav, parse_wav_header

__all__ = [
    "AzureSpeechAdapter",
    "EndpointState",
    "parse_recognition_payload",
    "LocalWhisperAdapter",
    "UploadedAudioInput",
    "UploadedAudioStream",
    "WavCodec",
    "WavHeader",
    "create_silent_wav",
    "encode_wav",
    "parse_wav_header",
]
