"""
Base error classes for interview-ai.

Provides a layered error hierarchy:
- InterviewAiError: Base class for all library errors
- TransportError: Network failures raised by a transport (NetworkError,
  RequestTimeoutError)
- RemoteError: Non-2xx responses from the inference service
- OperationCancelledError: A caller cancel token fired mid-call
- CircuitOpenError: Fast-fail rejection from an open circuit breaker
- ErrorEnvelope: The classified, user-facing error every caller receives
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from interview_ai.errors.classification import (
        ErrorKind,
        RecoveryStrategy,
        Severity,
    )


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'history[2].answer')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'transport', 'remote', 'validation')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class InterviewAiError(Exception):
    """Base class for all interview-ai errors.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> InterviewAiError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class TransportError(InterviewAiError):
    """Failure to obtain any response from the inference service."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class NetworkError(TransportError):
    """Connection could not be established or was dropped."""


class RequestTimeoutError(TransportError):
    """The service did not answer within the request timeout."""


class RemoteError(InterviewAiError):
    """Non-2xx response from the inference service.

    Attributes:
        status_code: HTTP status code
        body: Parsed response body, if any
        error_type: Service-reported error type (body ``type`` field)
        retry_after_ms: Server-specified backoff hint in milliseconds
        request_id: Request identifier echoed by the service
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: dict[str, Any] | None = None,
        error_type: str | None = None,
        retry_after_ms: float | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["status_code"] = status_code
        if error_type:
            ctx.details["error_type"] = error_type
        if request_id:
            ctx.details["request_id"] = request_id
        super().__init__(message, ctx)

        self.status_code = status_code
        self.body = body or {}
        self.error_type = error_type
        self.retry_after_ms = retry_after_ms
        self.request_id = request_id

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> RemoteError:
        """Create RemoteError from an HTTP response.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON)
            headers: Response headers

        Returns:
            RemoteError carrying the service's hints
        """
        from interview_ai.errors.classification import extract_error_message

        message = extract_error_message(body) or f"HTTP {status_code}"

        error_type = None
        if body:
            raw_type = body.get("type")
            if not isinstance(raw_type, str) and isinstance(body.get("error"), dict):
                raw_type = body["error"].get("type")
            if isinstance(raw_type, str):
                error_type = raw_type

        # Retry-After header is seconds; body hints are milliseconds
        retry_after_ms = None
        if headers:
            lowered = {k.lower(): v for k, v in headers.items()}
            retry_after_str = lowered.get("retry-after")
            if retry_after_str:
                with contextlib.suppress(ValueError):
                    retry_after_ms = float(retry_after_str) * 1000.0
        if retry_after_ms is None and body:
            hint = body.get("retryAfter") or body.get("resetTime")
            if isinstance(hint, (int, float)) and hint > 0:
                retry_after_ms = float(hint)

        request_id = None
        if headers:
            lowered = {k.lower(): v for k, v in headers.items()}
            request_id = lowered.get("x-request-id") or lowered.get("request-id")

        return cls(
            message=message,
            status_code=status_code,
            body=body,
            error_type=error_type,
            retry_after_ms=retry_after_ms,
            request_id=request_id,
        )


class OperationCancelledError(InterviewAiError):
    """Raised when a caller-supplied cancel token fires during a call.

    Attributes:
        reason: Cancellation reason reported by the token
    """

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(
            f"Operation cancelled ({reason})" if reason else "Operation cancelled",
            ErrorContext(source="cancel"),
        )
        self.reason = reason


class CircuitOpenError(InterviewAiError):
    """Raised when the circuit is open and the call is rejected."""

    def __init__(
        self,
        message: str = "AI service circuit breaker is open",
        retry_after_ms: float | None = None,
    ) -> None:
        super().__init__(message, ErrorContext(source="circuit_breaker"))
        self.retry_after_ms = retry_after_ms


class ErrorEnvelope(InterviewAiError):
    """Classified error surfaced to callers.

    Every terminal failure leaving the call layer is normalized into this
    shape so UI code can react on ``kind``, ``severity`` and
    ``recovery_strategy`` without inspecting internals.

    Attributes:
        kind: Error classification
        severity: low, medium or high
        retryable: Whether the caller may try again later
        retry_after_ms: Suggested wait before trying again
        user_message: Concise, actionable message for display
        title: Short heading for display
        suggestion: Follow-up advice for the user
        recovery_strategy: retry, fallback or ignore
        violations: Specific validation failures, if any
        cause: The underlying exception
    """

    def __init__(
        self,
        kind: ErrorKind,
        *,
        severity: Severity,
        retryable: bool,
        user_message: str,
        recovery_strategy: RecoveryStrategy,
        retry_after_ms: float | None = None,
        title: str | None = None,
        suggestion: str | None = None,
        violations: list[str] | None = None,
        cause: BaseException | None = None,
        detail: str | None = None,
    ) -> None:
        ctx = ErrorContext(source=kind.value)
        if violations:
            ctx.details["violations"] = list(violations)
        super().__init__(detail or user_message, ctx)

        self.kind = kind
        self.severity = severity
        self.retryable = retryable
        self.retry_after_ms = retry_after_ms
        self.user_message = user_message
        self.title = title
        self.suggestion = suggestion
        self.recovery_strategy = recovery_strategy
        self.violations = list(violations or [])
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def build(
        cls,
        kind: ErrorKind,
        *,
        cause: BaseException | None = None,
        retry_after_ms: float | None = None,
        violations: list[str] | None = None,
        has_fallback: bool = False,
        detail: str | None = None,
    ) -> ErrorEnvelope:
        """Create an envelope whose presentation fields derive from ``kind``."""
        from interview_ai.errors.classification import (
            get_recovery_strategy,
            get_severity,
            is_retryable,
        )
        from interview_ai.errors.messages import get_user_message

        message = get_user_message(kind, retry_after_ms=retry_after_ms)
        return cls(
            kind,
            severity=get_severity(kind),
            retryable=is_retryable(kind),
            user_message=message.message,
            title=message.title,
            suggestion=message.suggestion,
            recovery_strategy=get_recovery_strategy(kind, has_fallback=has_fallback),
            retry_after_ms=retry_after_ms,
            violations=violations,
            cause=cause,
            detail=detail,
        )

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        *,
        has_fallback: bool = False,
    ) -> ErrorEnvelope:
        """Normalize any exception into an envelope.

        Envelopes pass through unchanged.
        """
        if isinstance(error, ErrorEnvelope):
            return error

        from interview_ai.errors.classification import classify, extract_retry_after_ms

        return cls.build(
            classify(error),
            cause=error,
            retry_after_ms=extract_retry_after_ms(error),
            has_fallback=has_fallback,
            detail=str(error) or None,
        )

    @classmethod
    def validation(
        cls,
        violations: list[str],
        *,
        detail: str | None = None,
    ) -> ErrorEnvelope:
        """Create a ``validation_error`` envelope listing ``violations``."""
        from interview_ai.errors.classification import ErrorKind

        return cls.build(
            ErrorKind.VALIDATION_ERROR,
            violations=violations,
            detail=detail or f"Invalid request parameters: {', '.join(violations)}",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for UI consumption."""
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "retry_after_ms": self.retry_after_ms,
            "title": self.title,
            "user_message": self.user_message,
            "suggestion": self.suggestion,
            "recovery_strategy": self.recovery_strategy.value,
            "violations": list(self.violations),
        }
