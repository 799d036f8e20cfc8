"""
Telemetry - structured logging with request context and secret masking.
"""

from interview_ai.telemetry.logger import (
    PACKAGE_LOGGER,
    JsonFormatter,
    LogContext,
    SensitiveDataMasker,
    ServiceLogger,
    TextFormatter,
    configure_logging,
    get_log_context,
    get_logger,
    operation_context,
)

__all__ = [
    "PACKAGE_LOGGER",
    "JsonFormatter",
    "LogContext",
    "SensitiveDataMasker",
    "ServiceLogger",
    "TextFormatter",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "operation_context",
]
