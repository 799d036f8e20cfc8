"""
Error classification for the AI call layer.

Maps raw failures (transport errors, HTTP responses, breaker rejections) onto
a fixed set of error kinds, and derives severity and recovery strategy from
the kind.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Standard error classification."""

    VALIDATION_ERROR = "validation_error"
    """Input or response failed structural/length checks."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    """Request window full, locally or as reported by the service."""

    ADAPTIVE_THROTTLED = "adaptive_throttled"
    """Admission blocked by the failure-driven cooldown."""

    CIRCUIT_OPEN = "circuit_open"
    """Circuit breaker is open; no call was attempted."""

    TIMEOUT = "timeout"
    """Request timed out."""

    NETWORK_ERROR = "network_error"
    """Connection failure."""

    SERVER_ERROR = "server_error"
    """Transient server-side failure (5xx)."""

    SERVICE_UNAVAILABLE = "service_unavailable"
    """Service or gateway temporarily unavailable."""

    QUOTA_EXCEEDED = "quota_exceeded"
    """Account usage limit reached."""

    MODEL_ERROR = "model_error"
    """The model failed to process the request."""

    CONTENT_FILTER = "content_filter"
    """Content rejected by the service's content policy."""

    AUTHENTICATION = "authentication"
    """Missing or invalid credentials."""

    PERMISSION_DENIED = "permission_denied"
    """Authenticated but not permitted."""

    CANCELLED = "cancelled"
    """Aborted by the caller's cancellation token or deadline."""

    UNKNOWN = "unknown"
    """Anything else."""


class Severity(str, Enum):
    """Error severity for UI presentation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecoveryStrategy(str, Enum):
    """Recommended reaction for calling code."""

    RETRY = "retry"
    FALLBACK = "fallback"
    IGNORE = "ignore"


# Never retried, whatever the policy says
NON_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.VALIDATION_ERROR,
        ErrorKind.AUTHENTICATION,
        ErrorKind.PERMISSION_DENIED,
        ErrorKind.CONTENT_FILTER,
        ErrorKind.CANCELLED,
    }
)

# Retried by the default retry condition
DEFAULT_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.TIMEOUT,
        ErrorKind.NETWORK_ERROR,
        ErrorKind.SERVER_ERROR,
        ErrorKind.SERVICE_UNAVAILABLE,
        ErrorKind.RATE_LIMIT_EXCEEDED,
    }
)

# Kinds a caller may simply try again later
_CALLER_RETRYABLE_KINDS: frozenset[ErrorKind] = DEFAULT_RETRYABLE_KINDS | {
    ErrorKind.ADAPTIVE_THROTTLED,
    ErrorKind.CIRCUIT_OPEN,
    ErrorKind.MODEL_ERROR,
}

# Service-reported ``type`` field
_TYPE_MAPPING: dict[str, ErrorKind] = {
    "rate_limit_exceeded": ErrorKind.RATE_LIMIT_EXCEEDED,
    "timeout": ErrorKind.TIMEOUT,
    "validation_error": ErrorKind.VALIDATION_ERROR,
    "service_unavailable": ErrorKind.SERVICE_UNAVAILABLE,
    "quota_exceeded": ErrorKind.QUOTA_EXCEEDED,
    "model_error": ErrorKind.MODEL_ERROR,
    "content_filter": ErrorKind.CONTENT_FILTER,
}

_STATUS_MAPPING: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION_ERROR,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.PERMISSION_DENIED,
    408: ErrorKind.TIMEOUT,
    413: ErrorKind.VALIDATION_ERROR,  # Payload too large
    429: ErrorKind.RATE_LIMIT_EXCEEDED,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.SERVICE_UNAVAILABLE,
    503: ErrorKind.SERVICE_UNAVAILABLE,
    504: ErrorKind.TIMEOUT,
}

_QUOTA_PATTERNS = ("quota", "billing", "usage limit", "insufficient_quota")

_SEVERITY: dict[ErrorKind, Severity] = {
    ErrorKind.VALIDATION_ERROR: Severity.LOW,
    ErrorKind.RATE_LIMIT_EXCEEDED: Severity.MEDIUM,
    ErrorKind.ADAPTIVE_THROTTLED: Severity.MEDIUM,
    ErrorKind.CIRCUIT_OPEN: Severity.HIGH,
    ErrorKind.TIMEOUT: Severity.MEDIUM,
    ErrorKind.NETWORK_ERROR: Severity.MEDIUM,
    ErrorKind.SERVER_ERROR: Severity.HIGH,
    ErrorKind.SERVICE_UNAVAILABLE: Severity.HIGH,
    ErrorKind.QUOTA_EXCEEDED: Severity.HIGH,
    ErrorKind.MODEL_ERROR: Severity.HIGH,
    ErrorKind.CONTENT_FILTER: Severity.MEDIUM,
    ErrorKind.AUTHENTICATION: Severity.HIGH,
    ErrorKind.PERMISSION_DENIED: Severity.HIGH,
    ErrorKind.CANCELLED: Severity.LOW,
    ErrorKind.UNKNOWN: Severity.MEDIUM,
}


def classify(error: BaseException) -> ErrorKind:
    """Classify a raw failure into an error kind.

    Pure function of the exception's type and explicit fields.

    Args:
        error: The exception to classify

    Returns:
        ErrorKind for the failure
    """
    from interview_ai.errors.base import (
        CircuitOpenError,
        ErrorEnvelope,
        NetworkError,
        OperationCancelledError,
        RemoteError,
        RequestTimeoutError,
        TransportError,
    )

    if isinstance(error, ErrorEnvelope):
        return error.kind
    if isinstance(error, CircuitOpenError):
        return ErrorKind.CIRCUIT_OPEN
    if isinstance(error, (OperationCancelledError, asyncio.CancelledError)):
        return ErrorKind.CANCELLED
    if isinstance(error, RequestTimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(error, NetworkError):
        return ErrorKind.NETWORK_ERROR
    if isinstance(error, RemoteError):
        return classify_http_error(error.status_code, error.body, error.error_type)
    if isinstance(error, TransportError):
        return ErrorKind.NETWORK_ERROR
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.UNKNOWN


def classify_http_error(
    status_code: int,
    body: dict[str, Any] | None = None,
    error_type: str | None = None,
) -> ErrorKind:
    """Classify an HTTP error response.

    Args:
        status_code: HTTP status code
        body: Response body (parsed JSON)
        error_type: Service-reported error type

    Returns:
        ErrorKind representing the error
    """
    # The service's own type is more specific than the status code
    if error_type and error_type in _TYPE_MAPPING:
        return _TYPE_MAPPING[error_type]

    # 429 may be quota exhaustion rather than a rate limit
    if status_code == 429 and body:
        message = (extract_error_message(body) or "").lower()
        if any(pattern in message for pattern in _QUOTA_PATTERNS):
            return ErrorKind.QUOTA_EXCEEDED

    if status_code in _STATUS_MAPPING:
        return _STATUS_MAPPING[status_code]
    if 500 <= status_code < 600:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN


def extract_retry_after_ms(error: BaseException) -> float | None:
    """Get a server or limiter backoff hint from an error, if any."""
    from interview_ai.errors.base import CircuitOpenError, ErrorEnvelope, RemoteError

    if isinstance(error, (ErrorEnvelope, RemoteError, CircuitOpenError)):
        return error.retry_after_ms
    return None


def is_retryable(kind: ErrorKind) -> bool:
    """Check whether a caller may retry an operation that failed with ``kind``."""
    return kind in _CALLER_RETRYABLE_KINDS


def get_severity(kind: ErrorKind) -> Severity:
    """Get the presentation severity for an error kind."""
    return _SEVERITY.get(kind, Severity.MEDIUM)


def get_recovery_strategy(kind: ErrorKind, *, has_fallback: bool = False) -> RecoveryStrategy:
    """Get the recommended recovery strategy for an error kind.

    Args:
        kind: Error kind
        has_fallback: Whether the caller configured a fallback producer

    Returns:
        RecoveryStrategy for calling code
    """
    if kind in (
        ErrorKind.VALIDATION_ERROR,
        ErrorKind.CONTENT_FILTER,
        ErrorKind.AUTHENTICATION,
        ErrorKind.PERMISSION_DENIED,
        ErrorKind.CANCELLED,
    ):
        return RecoveryStrategy.IGNORE
    if kind in (ErrorKind.QUOTA_EXCEEDED, ErrorKind.MODEL_ERROR):
        return RecoveryStrategy.FALLBACK
    if kind in (ErrorKind.SERVICE_UNAVAILABLE, ErrorKind.CIRCUIT_OPEN) and has_fallback:
        return RecoveryStrategy.FALLBACK
    return RecoveryStrategy.RETRY


def extract_error_message(body: dict[str, Any] | None) -> str | None:
    """Extract an error message from a response body.

    Supports ``{"error": {"message": ...}}``, ``{"error": "..."}``,
    ``{"message": ...}`` and ``{"detail": ...}`` envelopes.
    """
    if not body:
        return None

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            msg = error.get("message")
            if isinstance(msg, str):
                return msg
        elif isinstance(error, str):
            return error

    if "message" in body:
        msg = body["message"]
        if isinstance(msg, str):
            return msg

    if "detail" in body:
        detail = body["detail"]
        if isinstance(detail, str):
            return detail
        if isinstance(detail, list) and detail:
            return str(detail[0])

    return None
