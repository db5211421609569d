from app.models.outcomes import (
    BackendCallOutcome,
    BackendConfig,
    BackendError,
    RequestLogRecord,
    Success,
    Timeout,
    TransportError,
)
from app.models.load_test import LoadTestSummary

__all__ = [
    "BackendCallOutcome",
    "BackendConfig",
    "BackendError",
    "LoadTestSummary",
    "RequestLogRecord",
    "Success",
    "Timeout",
    "TransportError",
]
