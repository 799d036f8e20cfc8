"""
Structured logging for interview-ai.

Modules log through ``get_logger`` and pass fields as keywords. Records
carry the context of the client operation in progress, and credentials and
candidate documents are masked before anything is written.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import TextIO

PACKAGE_LOGGER = "interview_ai"
REDACTED = "***REDACTED***"


@dataclass(frozen=True)
class LogContext:
    """Fields of the client operation in progress.

    Attributes:
        request_id: ``X-Request-ID`` sent to the service
        service: Resilience service name (e.g. 'resume-analysis')
        operation: Client operation (e.g. 'analyze_resume')
    """

    request_id: str | None = None
    service: str | None = None
    operation: str | None = None

    def to_dict(self) -> dict[str, str]:
        return {name: value for name, value in asdict(self).items() if value}


_current_context: ContextVar[LogContext] = ContextVar(
    "interview_ai_log_context", default=LogContext()
)


def get_log_context() -> LogContext:
    """Context of the operation running in the current task."""
    return _current_context.get()


@contextmanager
def operation_context(operation: str, service: str, request_id: str) -> Iterator[LogContext]:
    """Attach operation fields to every record logged inside the block.

    Concurrent operations each see their own context, since asyncio tasks
    run in a copy of the caller's context.
    """
    context = LogContext(request_id=request_id, service=service, operation=operation)
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


class SensitiveDataMasker:
    """Redacts credentials and candidate documents.

    Text is scrubbed of bearer tokens, API-key assignments and every secret
    registered with the masker (the configured API key). Fields whose name
    marks a credential are replaced outright; resume and job description
    text is reduced to its length.
    """

    TEXT_PATTERNS: ClassVar[tuple[tuple[re.Pattern[str], str], ...]] = (
        (re.compile(r"(Bearer\s+)\S+", re.IGNORECASE), rf"\1{REDACTED}"),
        (
            re.compile(r"(api[_-]?key[\"']?\s*[:=]\s*[\"']?)[^\"'\s,]+", re.IGNORECASE),
            rf"\1{REDACTED}",
        ),
        (re.compile(r"\bsk-[A-Za-z0-9_-]{20,}"), REDACTED),
    )
    CREDENTIAL_MARKERS: ClassVar[tuple[str, ...]] = ("key", "token", "secret", "password", "auth")
    DOCUMENT_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"resume_text", "resumeText", "job_description_text", "jobDescriptionText"}
    )

    def __init__(self, secrets: Iterable[str | None] = ()) -> None:
        self._secrets: set[str] = set()
        for secret in secrets:
            self.add_secret(secret)

    def add_secret(self, secret: str | None) -> None:
        """Redact ``secret`` wherever it appears; very short values are ignored."""
        if secret and len(secret) >= 4:
            self._secrets.add(secret)

    def mask(self, text: str) -> str:
        """Mask sensitive data in text."""
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        for pattern, replacement in self.TEXT_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def mask_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Mask structured log fields, recursing into nested containers."""
        return {key: self._mask_field(str(key), value) for key, value in fields.items()}

    def _mask_field(self, name: str, value: Any) -> Any:
        lowered = name.lower()
        if any(marker in lowered for marker in self.CREDENTIAL_MARKERS):
            return REDACTED
        if name in self.DOCUMENT_FIELDS and isinstance(value, str):
            return f"<{len(value)} chars>"
        return self._scrub(value)

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_fields(value)
        if isinstance(value, (list, tuple)):
            return [self._scrub(item) for item in value]
        return value


def _record_fields(record: logging.LogRecord, masker: SensitiveDataMasker) -> dict[str, Any]:
    fields = getattr(record, "fields", None)
    return masker.mask_fields(fields) if fields else {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_timestamp: bool = True,
    ) -> None:
        super().__init__()
        self.masker = masker or SensitiveDataMasker()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}
        if self.include_timestamp:
            created = datetime.fromtimestamp(record.created, timezone.utc)
            entry["timestamp"] = created.isoformat(timespec="milliseconds").replace(
                "+00:00", "Z"
            )
        entry["level"] = record.levelname
        entry["logger"] = record.name
        entry["message"] = self.masker.mask(record.getMessage())

        context = get_log_context().to_dict()
        if context:
            entry["context"] = context
        entry.update(_record_fields(record, self.masker))

        if record.exc_info:
            entry["exception"] = self.masker.mask(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``time | LEVEL | logger | message | key=value ...`` lines."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_context: bool = True,
    ) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.masker = masker or SensitiveDataMasker()
        self.include_context = include_context

    def formatMessage(self, record: logging.LogRecord) -> str:
        return self.masker.mask(super().formatMessage(record))

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = get_log_context().to_dict() if self.include_context else {}
        fields.update(_record_fields(record, self.masker))
        if fields:
            line = f"{line} | " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    debug: bool = False,
    format: str = "text",
    stream: TextIO | None = None,
    secrets: Iterable[str | None] = (),
) -> logging.Handler:
    """Route package logs to ``stream`` (stderr by default).

    Replaces the handler installed by a previous call; handlers the
    application added to the ``interview_ai`` logger are left alone.

    Args:
        debug: Emit debug records such as successful results
        format: 'json' for one object per line, anything else for text
        stream: Destination stream
        secrets: Values to redact wherever they appear, e.g. the API key

    Returns:
        The installed handler
    """
    global _installed_handler

    masker = SensitiveDataMasker(secrets)
    formatter: logging.Formatter
    if format == "json":
        formatter = JsonFormatter(masker=masker)
    else:
        formatter = TextFormatter(masker=masker)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    package = logging.getLogger(PACKAGE_LOGGER)
    if _installed_handler is not None:
        package.removeHandler(_installed_handler)
    package.addHandler(handler)
    package.setLevel(logging.DEBUG if debug else logging.INFO)
    package.propagate = False
    _installed_handler = handler
    return handler


class ServiceLogger:
    """Stdlib logger taking structured fields as keyword arguments.

    Example:
        >>> logger = get_logger("interview_ai.resilience.circuit_breaker")
        >>> logger.warning("Circuit breaker opened", failure_count=5)
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        if self._logger.isEnabledFor(level):
            extra = {"fields": fields} if fields else None
            self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._log(logging.ERROR, msg, fields, exc_info=True)


def get_logger(name: str) -> ServiceLogger:
    """Get a logger below the ``interview_ai`` package logger.

    The package logger gets a stderr text handler at INFO on first use
    unless ``configure_logging`` already ran.
    """
    if _installed_handler is None:
        configure_logging()
    return ServiceLogger(logging.getLogger(name))
