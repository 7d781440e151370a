"""Infrastructure layer - external system integrations."""

from .assessment_store import SQLiteAssessmentStore
from .retry import (
    RetryableError,
    TransientError,
    log_retry,
    retry_operation,
)
from .usage_tracker import (
    ServiceType,
    calculate_azure_stt_cost,
    configure_usage_log,
    get_usage_summary,
    log_azure_stt_usage,
    log_local_whisper_usage,
)

__all__ = [
    "SQLiteAssessmentStore",
    "RetryableError",
    "TransientError",
    "log_retry",
    "retry_operation",
    # Usage tracking
    "ServiceType",
    "configure_usage_log",
    "calculate_azure_stt_cost",
    "log_azure_stt_usage",
    "log_local_whisper_usage",
    "get_usage_summary",
]
