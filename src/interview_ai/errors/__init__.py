"""
Error hierarchy for interview-ai.

Raw failures (transport, remote, breaker) are classified into ErrorKind and
normalized into ErrorEnvelope before reaching callers.
"""

from interview_ai.errors.base import (
    CircuitOpenError,
    ErrorContext,
    ErrorEnvelope,
    InterviewAiError,
    NetworkError,
    OperationCancelledError,
    RemoteError,
    RequestTimeoutError,
    TransportError,
)
from interview_ai.errors.classification import (
    DEFAULT_RETRYABLE_KINDS,
    NON_RETRYABLE_KINDS,
    ErrorKind,
    RecoveryStrategy,
    Severity,
    classify,
    classify_http_error,
    extract_retry_after_ms,
    get_recovery_strategy,
    get_severity,
    is_retryable,
)
from interview_ai.errors.messages import UserMessage, get_user_message

__all__ = [
    # Base errors
    "CircuitOpenError",
    "ErrorContext",
    "ErrorEnvelope",
    "InterviewAiError",
    "NetworkError",
    "OperationCancelledError",
    "RemoteError",
    "RequestTimeoutError",
    "TransportError",
    # Classification
    "DEFAULT_RETRYABLE_KINDS",
    "ErrorKind",
    "NON_RETRYABLE_KINDS",
    "RecoveryStrategy",
    "Severity",
    "classify",
    "classify_http_error",
    "extract_retry_after_ms",
    "get_recovery_strategy",
    "get_severity",
    "is_retryable",
    # Messages
    "UserMessage",
    "get_user_message",
]
