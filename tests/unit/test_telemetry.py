"""Tests for telemetry module."""

import asyncio
import io
import json
import logging

import pytest

from interview_ai.telemetry import (
    PACKAGE_LOGGER,
    JsonFormatter,
    LogContext,
    SensitiveDataMasker,
    TextFormatter,
    configure_logging,
    get_log_context,
    get_logger,
    operation_context,
)


def _record(msg: str, **fields: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="interview_ai.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if fields:
        record.fields = fields
    return record


class TestLogContext:
    """Tests for request-scoped log context."""

    def test_to_dict_skips_empty(self) -> None:
        """Test empty fields are omitted."""
        ctx = LogContext(request_id="req_1", operation="analyze_resume")
        assert ctx.to_dict() == {"request_id": "req_1", "operation": "analyze_resume"}

    def test_operation_context_restores_previous(self) -> None:
        """Test the context is visible inside the block and reset after it."""
        assert get_log_context() == LogContext()

        with operation_context("analyze_resume", "resume-analysis", "req_2") as ctx:
            assert get_log_context() is ctx
            with operation_context("check_health", "health", "req_3"):
                assert get_log_context().service == "health"
            assert get_log_context().request_id == "req_2"

        assert get_log_context().to_dict() == {}

    @pytest.mark.asyncio
    async def test_concurrent_operations_are_isolated(self) -> None:
        """Test each task logs with its own request id."""
        seen: dict[str, str | None] = {}

        async def operation(request_id: str) -> None:
            with operation_context("analyze_resume", "resume-analysis", request_id):
                await asyncio.sleep(0)
                seen[request_id] = get_log_context().request_id

        await asyncio.gather(operation("req_a"), operation("req_b"))
        assert seen == {"req_a": "req_a", "req_b": "req_b"}


class TestSensitiveDataMasker:
    """Tests for SensitiveDataMasker."""

    def test_masks_bearer_tokens(self) -> None:
        """Test bearer credentials are redacted."""
        masked = SensitiveDataMasker().mask("Authorization: Bearer abc123")
        assert "abc123" not in masked
        assert "REDACTED" in masked

    def test_masks_env_assignment(self) -> None:
        """Test the API key variable is redacted."""
        masked = SensitiveDataMasker().mask("INTERVIEW_AI_API_KEY=super-secret")
        assert "super-secret" not in masked

    def test_masks_registered_secret(self) -> None:
        """Test the configured API key is redacted wherever it appears."""
        masker = SensitiveDataMasker(["prod-key-123", None, "ab"])
        masked = masker.mask("request failed for prod-key-123 at https://ai.test")
        assert masked == "request failed for ***REDACTED*** at https://ai.test"
        assert masker.mask("ab cd") == "ab cd"

    def test_mask_fields(self) -> None:
        """Test credential fields are redacted recursively."""
        masker = SensitiveDataMasker()
        data = masker.mask_fields(
            {
                "api_key": "abc",
                "nested": {"auth_header": "xyz", "attempt": 2},
                "items": [{"token": "t"}, "plain"],
            }
        )
        assert data["api_key"] == "***REDACTED***"
        assert data["nested"] == {"auth_header": "***REDACTED***", "attempt": 2}
        assert data["items"] == [{"token": "***REDACTED***"}, "plain"]

    def test_documents_reduced_to_length(self) -> None:
        """Test resume and job description text never reach the log."""
        data = SensitiveDataMasker().mask_fields(
            {"resumeText": "Jane Doe, 555-0100", "job_description_text": "Backend role"}
        )
        assert data == {"resumeText": "<18 chars>", "job_description_text": "<12 chars>"}


class TestFormatters:
    """Tests for JSON and text formatters."""

    def test_json_formatter(self) -> None:
        """Test JSON output includes fields and context."""
        with operation_context("get_interview_question", "interview-question", "req_3"):
            output = JsonFormatter(include_timestamp=False).format(
                _record("Rate limit exceeded", retry_after_ms=1200)
            )

        data = json.loads(output)
        assert data["level"] == "WARNING"
        assert data["message"] == "Rate limit exceeded"
        assert data["retry_after_ms"] == 1200
        assert data["context"] == {
            "request_id": "req_3",
            "service": "interview-question",
            "operation": "get_interview_question",
        }
        assert "timestamp" not in data

    def test_json_timestamp(self) -> None:
        """Test timestamps are UTC with millisecond precision."""
        data = json.loads(JsonFormatter().format(_record("tick")))
        assert data["timestamp"].endswith("Z")
        assert len(data["timestamp"]) == len("2024-01-01T00:00:00.000Z")

    def test_text_formatter(self) -> None:
        """Test text output appends key=value fields."""
        output = TextFormatter(include_context=False).format(
            _record("Circuit breaker opened", failure_count=5)
        )
        assert "Circuit breaker opened" in output
        assert output.endswith("| failure_count=5")

    def test_text_formatter_masks_message(self) -> None:
        """Test secrets in the message are masked."""
        output = TextFormatter(include_context=False).format(_record("sending Bearer abc.def"))
        assert "abc.def" not in output


class TestConfigureLogging:
    """Tests for configure_logging and get_logger."""

    def test_json_stream_with_debug(self) -> None:
        """Test debug records reach a JSON stream with secrets masked."""
        stream = io.StringIO()
        configure_logging(debug=True, format="json", stream=stream, secrets=["k-live-999"])
        logger = get_logger("interview_ai.test.configured")

        logger.info("AI request succeeded", attempt=1)
        logger.debug("Sent with k-live-999", service_name="resume-analysis")

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert lines[0]["message"] == "AI request succeeded"
        assert lines[0]["attempt"] == 1
        assert lines[1]["message"] == "Sent with ***REDACTED***"
        assert lines[1]["service_name"] == "resume-analysis"

    def test_info_level_drops_debug(self) -> None:
        """Test debug records are dropped unless debug is enabled."""
        stream = io.StringIO()
        configure_logging(stream=stream)
        logger = get_logger("interview_ai.test.filtered")

        logger.debug("hidden")
        logger.warning("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_reconfigure_replaces_own_handler(self) -> None:
        """Test repeated configuration keeps a single package handler."""
        package = logging.getLogger(PACKAGE_LOGGER)
        user_handler = logging.NullHandler()
        package.addHandler(user_handler)
        try:
            first = configure_logging()
            second = configure_logging(format="json")

            assert first not in package.handlers
            assert second in package.handlers
            assert user_handler in package.handlers
            assert package.propagate is False
        finally:
            package.removeHandler(user_handler)

    def test_exception_includes_traceback(self) -> None:
        """Test exception() attaches the active traceback."""
        stream = io.StringIO()
        configure_logging(format="json", stream=stream)
        logger = get_logger("interview_ai.test.exception")

        try:
            raise RuntimeError("mock broken")
        except RuntimeError:
            logger.exception("Fallback failed", reason="mock")

        data = json.loads(stream.getvalue())
        assert data["reason"] == "mock"
        assert "RuntimeError: mock broken" in data["exception"]
