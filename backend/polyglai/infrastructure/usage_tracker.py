"""Usage tracking for speech recognition.

Logs usage to a JSONL file for cost monitoring and analysis.
Services tracked: Azure Speech STT (billable) and local Whisper fallback runs.
"""

import json
import logging
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ServiceType(str, Enum):
    """Tracked recognition services."""

    AZURE_STT = "azure_stt"
    LOCAL_WHISPER = "local_whisper"


# Azure Speech standard real-time pricing (USD per audio hour)
AZURE_STT_PRICE_PER_HOUR = 1.00

# Default log path (relative to backend/)
DEFAULT_USAGE_LOG = Path(__file__).parent.parent.parent / "logs" / "usage.jsonl"

_usage_log_path: Path | None = None


def configure_usage_log(log_path: Path | None) -> None:
    """Set the process-wide usage log path (None restores the default)."""
    global _usage_log_path
    _usage_log_path = log_path


def calculate_azure_stt_cost(audio_duration_seconds: float) -> float:
    """Calculate Azure STT cost in USD."""
    hours = audio_duration_seconds / 3600
    return hours * AZURE_STT_PRICE_PER_HOUR


def _log_entry(entry: dict[str, Any], log_path: Path | None = None) -> None:
    """Internal: write a log entry to JSONL file.

    Non-blocking: failures are logged but don't raise.
    """
    log_file = log_path or _usage_log_path or DEFAULT_USAGE_LOG

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        with log_file.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as e:
        logger.warning(f"Failed to log usage: {e}")


def log_azure_stt_usage(
    audio_duration_seconds: float,
    locale: str,
    recognition_status: str,
    log_path: Path | None = None,
) -> None:
    """Log one Azure recognition request."""
    cost = calculate_azure_stt_cost(audio_duration_seconds)
    entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "service": ServiceType.AZURE_STT.value,
        "locale": locale,
        "recognition_status": recognition_status,
        "audio_duration_seconds": round(audio_duration_seconds, 3),
        "cost_usd": round(cost, 6),
    }
    _log_entry(entry, log_path)


def log_local_whisper_usage(
    audio_duration_seconds: float,
    model: str,
    processing_seconds: float,
    log_path: Path | None = None,
) -> None:
    """Log one local fallback run (no cost, tracked for latency)."""
    entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "service": ServiceType.LOCAL_WHISPER.value,
        "model": model,
        "audio_duration_seconds": round(audio_duration_seconds, 3),
        "processing_seconds": round(processing_seconds, 3),
        "cost_usd": 0.0,
    }
    _log_entry(entry, log_path)


def get_usage_summary(log_path: Path | None = None) -> dict[str, Any]:
    """Get summary of usage from log file, aggregated by service.

    Returns:
        Summary dict with per-service breakdowns and totals.
    """
    log_file = log_path or _usage_log_path or DEFAULT_USAGE_LOG

    if not log_file.exists():
        return {
            "total_cost_usd": 0.0,
            "total_requests": 0,
            "by_service": {},
        }

    by_service: dict[str, dict[str, Any]] = {}
    total_cost = 0.0
    total_requests = 0

    with log_file.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue

            service = entry.get("service", "unknown")
            cost = entry.get("cost_usd", 0)
            total_cost += cost
            total_requests += 1

            stats = by_service.setdefault(
                service, {"count": 0, "cost_usd": 0.0, "total_audio_seconds": 0.0}
            )
            stats["count"] += 1
            stats["cost_usd"] += cost
            stats["total_audio_seconds"] += entry.get("audio_duration_seconds", 0)

    for service_data in by_service.values():
        service_data["cost_usd"] = round(service_data["cost_usd"], 4)
        service_data["total_audio_seconds"] = round(service_data["total_audio_seconds"], 3)

    return {
        "total_cost_usd": round(total_cost, 4),
        "total_requests": total_requests,
        "by_service": by_service,
    }
