"""Application configuration loaded from environment variables.

Provides type-safe access to configuration with sensible defaults.
Production defaults are restrictive for security.
"""

import os
from pathlib import Path

DEFAULT_AZURE_REGION = "southeastasia"


def get_cors_origins() -> list[str]:
    """Get allowed CORS origins from environment.

    Environment variable: CORS_ORIGINS (comma-separated)
    Default: the Next.js dev server on localhost:3000/3001
    """
    default_origins = "http://localhost:3000,http://localhost:3001"
    origins_str = os.getenv("CORS_ORIGINS", default_origins)
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def get_cors_allow_credentials() -> bool:
    """Get CORS allow_credentials setting.

    Environment variable: CORS_ALLOW_CREDENTIALS
    Default: true for development (needed for cookies/auth)
    """
    return os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"


# Restricted HTTP methods - only what the API actually uses
CORS_ALLOWED_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]

# Restricted headers - only what's needed for the API
CORS_ALLOWED_HEADERS = [
    "Accept",
    "Accept-Language",
    "Content-Type",
    "Authorization",
    "X-Requested-With",
    "X-Recording-Mime-Type",
]


def is_production() -> bool:
    """Check if running in production environment."""
    return os.getenv("ENVIRONMENT", "development").lower() == "production"


def get_azure_speech_key() -> str:
    """Get Azure Speech resource key.

    Environment variable: AZURE_SPEECH_KEY
    Required for remote transcription.
    """
    return os.getenv("AZURE_SPEECH_KEY", "")


def get_azure_speech_region() -> str:
    """Get Azure Speech region.

    Environment variable: AZURE_SPEECH_REGION
    Default: southeastasia
    """
    return os.getenv("AZURE_SPEECH_REGION", DEFAULT_AZURE_REGION)


def get_azure_speech_endpoint() -> str:
    """Get Azure Speech resource endpoint.

    Environment variable: AZURE_SPEECH_ENDPOINT
    Default: https://{region}.api.cognitive.microsoft.com
    """
    default = f"https://{get_azure_speech_region()}.api.cognitive.microsoft.com"
    return os.getenv("AZURE_SPEECH_ENDPOINT", default)


def get_azure_alternative_endpoints() -> list[str]:
    """Get extra endpoints tried during endpoint discovery.

    Environment variable: AZURE_SPEECH_ALTERNATIVE_ENDPOINTS (comma-separated)
    Default: the region's stt.speech, api.cognitive and cognitiveservices hosts
    """
    region = get_azure_speech_region()
    default = ",".join(
        [
            f"https://{region}.stt.speech.microsoft.com",
            f"https://{region}.api.cognitive.microsoft.com",
            f"https://{region}.cognitiveservices.azure.com",
        ]
    )
    endpoints_str = os.getenv("AZURE_SPEECH_ALTERNATIVE_ENDPOINTS", default)
    return [e.strip() for e in endpoints_str.split(",") if e.strip()]


def get_azure_speech_timeout() -> float:
    """Get Azure request timeout in seconds.

    Environment variable: AZURE_SPEECH_TIMEOUT
    Default: 30
    """
    return float(os.getenv("AZURE_SPEECH_TIMEOUT", "30"))


def get_transcription_max_attempts() -> int:
    """Get attempts per recognition call (transport failures only).

    Environment variable: TRANSCRIPTION_MAX_ATTEMPTS
    Default: 2
    """
    return max(1, int(os.getenv("TRANSCRIPTION_MAX_ATTEMPTS", "2")))


def is_local_fallback_enabled() -> bool:
    """Whether the in-process Whisper fallback may be used.

    Environment variable: LOCAL_FALLBACK_ENABLED
    Default: true (still requires the faster-whisper extra)
    """
    return os.getenv("LOCAL_FALLBACK_ENABLED", "true").lower() == "true"


def get_whisper_model() -> str:
    """Get faster-whisper model size or path.

    Environment variable: WHISPER_MODEL
    Default: base
    """
    return os.getenv("WHISPER_MODEL", "base")


def get_whisper_device() -> str:
    """Get faster-whisper device.

    Environment variable: WHISPER_DEVICE
    Default: auto
    """
    return os.getenv("WHISPER_DEVICE", "auto")


def get_whisper_compute_type() -> str:
    """Get faster-whisper compute type.

    Environment variable: WHISPER_COMPUTE_TYPE
    Default: int8
    """
    return os.getenv("WHISPER_COMPUTE_TYPE", "int8")


def get_assessment_db_path() -> str:
    """Get SQLite path for stored assessment scores.

    Environment variable: ASSESSMENT_DB_PATH
    Default: data/assessments.db
    """
    return os.getenv("ASSESSMENT_DB_PATH", "data/assessments.db")


def get_usage_log_path() -> Path | None:
    """Get JSONL usage log path.

    Environment variable: USAGE_LOG_PATH
    Default: backend/logs/usage.jsonl
    """
    path = os.getenv("USAGE_LOG_PATH", "")
    return Path(path) if path else None
