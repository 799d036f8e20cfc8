"""Tests for error classification and envelopes."""

import asyncio

import pytest

from interview_ai.errors import (
    CircuitOpenError,
    ErrorEnvelope,
    ErrorKind,
    NetworkError,
    OperationCancelledError,
    RecoveryStrategy,
    RemoteError,
    RequestTimeoutError,
    Severity,
    TransportError,
    classify,
    classify_http_error,
    extract_retry_after_ms,
    get_recovery_strategy,
    get_severity,
    get_user_message,
    is_retryable,
)
from interview_ai.errors.classification import extract_error_message


class TestRemoteError:
    """Tests for RemoteError.from_response."""

    def test_basic(self) -> None:
        """Test message and status extraction."""
        error = RemoteError.from_response(500, {"error": {"message": "Internal failure"}})
        assert error.status_code == 500
        assert error.message == "Internal failure"
        assert error.retry_after_ms is None

    def test_fallback_message(self) -> None:
        """Test a body without a message falls back to the status."""
        error = RemoteError.from_response(502, None)
        assert error.message == "HTTP 502"

    def test_retry_after_header_in_seconds(self) -> None:
        """Test Retry-After is converted to milliseconds."""
        error = RemoteError.from_response(
            429, {"message": "slow down"}, {"Retry-After": "12", "X-Request-ID": "req_1"}
        )
        assert error.retry_after_ms == 12_000
        assert error.request_id == "req_1"

    def test_retry_after_body_hint(self) -> None:
        """Test body resetTime hints are read as milliseconds."""
        error = RemoteError.from_response(429, {"message": "slow down", "resetTime": 4500})
        assert error.retry_after_ms == 4500

    def test_error_type(self) -> None:
        """Test the service type field is captured."""
        error = RemoteError.from_response(
            400, {"error": {"message": "flagged", "type": "content_filter"}}
        )
        assert error.error_type == "content_filter"
        assert classify(error) == ErrorKind.CONTENT_FILTER


class TestClassify:
    """Tests for classify and classify_http_error."""

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.VALIDATION_ERROR),
            (401, ErrorKind.AUTHENTICATION),
            (403, ErrorKind.PERMISSION_DENIED),
            (408, ErrorKind.TIMEOUT),
            (429, ErrorKind.RATE_LIMIT_EXCEEDED),
            (500, ErrorKind.SERVER_ERROR),
            (502, ErrorKind.SERVICE_UNAVAILABLE),
            (503, ErrorKind.SERVICE_UNAVAILABLE),
            (504, ErrorKind.TIMEOUT),
            (507, ErrorKind.SERVER_ERROR),
            (404, ErrorKind.UNKNOWN),
        ],
    )
    def test_status_mapping(self, status: int, kind: ErrorKind) -> None:
        """Test HTTP status classification."""
        assert classify_http_error(status) == kind

    def test_type_overrides_status(self) -> None:
        """Test the service-reported type wins over the status."""
        assert classify_http_error(500, error_type="model_error") == ErrorKind.MODEL_ERROR
        assert classify_http_error(400, error_type="quota_exceeded") == ErrorKind.QUOTA_EXCEEDED

    def test_quota_detected_from_message(self) -> None:
        """Test a 429 mentioning quota is quota_exceeded."""
        body = {"error": {"message": "You exceeded your current quota"}}
        assert classify_http_error(429, body) == ErrorKind.QUOTA_EXCEEDED

    def test_exception_types(self) -> None:
        """Test classification of raw exception types."""
        assert classify(RequestTimeoutError("slow")) == ErrorKind.TIMEOUT
        assert classify(NetworkError("down")) == ErrorKind.NETWORK_ERROR
        assert classify(TransportError("odd")) == ErrorKind.NETWORK_ERROR
        assert classify(CircuitOpenError()) == ErrorKind.CIRCUIT_OPEN
        assert classify(OperationCancelledError()) == ErrorKind.CANCELLED
        assert classify(asyncio.CancelledError()) == ErrorKind.CANCELLED
        assert classify(TimeoutError()) == ErrorKind.TIMEOUT
        assert classify(ConnectionResetError()) == ErrorKind.NETWORK_ERROR
        assert classify(ValueError("bug")) == ErrorKind.UNKNOWN

    def test_envelope_keeps_kind(self) -> None:
        """Test envelopes classify as their own kind."""
        envelope = ErrorEnvelope.build(ErrorKind.QUOTA_EXCEEDED)
        assert classify(envelope) == ErrorKind.QUOTA_EXCEEDED

    def test_extract_retry_after(self) -> None:
        """Test retry hints are read from hint-carrying errors only."""
        assert extract_retry_after_ms(CircuitOpenError(retry_after_ms=5.0)) == 5.0
        assert extract_retry_after_ms(RemoteError("x", status_code=429, retry_after_ms=9.0)) == 9.0
        assert extract_retry_after_ms(NetworkError("down")) is None


class TestSeverityAndRecovery:
    """Tests for severity, retryability and recovery strategy."""

    def test_severity(self) -> None:
        """Test severity mapping."""
        assert get_severity(ErrorKind.VALIDATION_ERROR) == Severity.LOW
        assert get_severity(ErrorKind.TIMEOUT) == Severity.MEDIUM
        assert get_severity(ErrorKind.CIRCUIT_OPEN) == Severity.HIGH

    def test_retryable(self) -> None:
        """Test caller-facing retryability."""
        assert is_retryable(ErrorKind.TIMEOUT)
        assert is_retryable(ErrorKind.CIRCUIT_OPEN)
        assert not is_retryable(ErrorKind.VALIDATION_ERROR)
        assert not is_retryable(ErrorKind.QUOTA_EXCEEDED)

    def test_recovery_strategy(self) -> None:
        """Test recovery strategy depends on fallback availability."""
        assert get_recovery_strategy(ErrorKind.VALIDATION_ERROR) == RecoveryStrategy.IGNORE
        assert get_recovery_strategy(ErrorKind.QUOTA_EXCEEDED) == RecoveryStrategy.FALLBACK
        assert get_recovery_strategy(ErrorKind.CIRCUIT_OPEN) == RecoveryStrategy.RETRY
        assert (
            get_recovery_strategy(ErrorKind.CIRCUIT_OPEN, has_fallback=True)
            == RecoveryStrategy.FALLBACK
        )


class TestErrorEnvelope:
    """Tests for ErrorEnvelope."""

    def test_from_exception(self) -> None:
        """Test normalizing a raw error."""
        cause = RemoteError("busy", status_code=429, retry_after_ms=2_000)
        envelope = ErrorEnvelope.from_exception(cause)

        assert envelope.kind == ErrorKind.RATE_LIMIT_EXCEEDED
        assert envelope.retry_after_ms == 2_000
        assert envelope.cause is cause
        assert envelope.__cause__ is cause
        assert envelope.title == "Too Many Requests"
        assert "2 seconds" in envelope.suggestion

    def test_from_exception_passes_envelopes_through(self) -> None:
        """Test an envelope is not wrapped twice."""
        envelope = ErrorEnvelope.validation(["too short"])
        assert ErrorEnvelope.from_exception(envelope) is envelope

    def test_validation(self) -> None:
        """Test validation envelopes list their violations."""
        envelope = ErrorEnvelope.validation(["Role is required", "History must be a list"])

        assert envelope.kind == ErrorKind.VALIDATION_ERROR
        assert envelope.severity == Severity.LOW
        assert envelope.retryable is False
        assert envelope.violations == ["Role is required", "History must be a list"]
        assert "Role is required" in envelope.message

    def test_to_dict(self) -> None:
        """Test the UI-facing dictionary."""
        data = ErrorEnvelope.build(ErrorKind.ADAPTIVE_THROTTLED, retry_after_ms=1_500).to_dict()

        assert data["kind"] == "adaptive_throttled"
        assert data["severity"] == "medium"
        assert data["retryable"] is True
        assert data["retry_after_ms"] == 1_500
        assert data["suggestion"] == "Please wait 2 seconds before trying again."
        assert data["recovery_strategy"] == "retry"
        assert data["violations"] == []


class TestMessages:
    """Tests for user messages and message extraction."""

    def test_every_kind_has_a_message(self) -> None:
        """Test every kind resolves to display text."""
        for kind in ErrorKind:
            message = get_user_message(kind)
            assert message.title
            assert message.message
            assert "{seconds}" not in message.suggestion

    def test_rate_limit_default_wait(self) -> None:
        """Test the default wait is quoted without a hint."""
        message = get_user_message(ErrorKind.RATE_LIMIT_EXCEEDED)
        assert message.suggestion == "Please wait 60 seconds before trying again."

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ({"error": {"message": "nested"}}, "nested"),
            ({"error": "flat"}, "flat"),
            ({"message": "top"}, "top"),
            ({"detail": "detail"}, "detail"),
            ({"detail": ["first", "second"]}, "first"),
            ({}, None),
            (None, None),
        ],
    )
    def test_extract_error_message(self, body: dict | None, expected: str | None) -> None:
        """Test supported error body shapes."""
        assert extract_error_message(body) == expected
