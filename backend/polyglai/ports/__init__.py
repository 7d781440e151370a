# Ports layer - Abstract interfaces (Protocols)

from .assessment_store import AssessmentStore, AssessmentStoreError
from .audio import (
    AudioCaptureError,
    AudioCodecPort,
    AudioDecodeError,
    AudioInputPort,
    AudioInputStream,
    EmptyRecordingError,
    PermissionDeniedError,
    RecordingInProgressError,
    RecordingNotFoundError,
    RecordingTooShortError,
)
from .speech import (
    NoSpeechDetectedError,
    SpeechRecognitionBackend,
    SpeechServiceError,
    SpeechServiceNotConfiguredError,
    TranscriptionError,
)

__all__ = [
    "AudioInputPort",
    "AudioInputStream",
    "AudioCodecPort",
    "SpeechRecognitionBackend",
    "AssessmentStore",
    # Errors
    "AudioCaptureError",
    "AudioDecodeError",
    "PermissionDeniedError",
    "RecordingTooShortError",
    "EmptyRecordingError",
    "RecordingInProgressError",
    "RecordingNotFoundError",
    "SpeechServiceError",
    "TranscriptionError",
    "NoSpeechDetectedError",
    "SpeechServiceNotConfiguredError",
    "AssessmentStoreError",
]
