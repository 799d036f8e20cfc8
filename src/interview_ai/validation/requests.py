"""
Request validation.

Checks caller input before any admission slot is consumed, and normalizes it
into the request models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from interview_ai.errors import ErrorEnvelope
from interview_ai.types import HistoryEntry, InterviewQuestionRequest, ResumeAnalysisRequest

MIN_RESUME_LENGTH = 50
MAX_RESUME_LENGTH = 50_000
MIN_JOB_DESCRIPTION_LENGTH = 20
MAX_JOB_DESCRIPTION_LENGTH = 10_000
MAX_HISTORY_LENGTH = 50

VALID_SESSION_TYPES: tuple[str, ...] = ("Behavioral", "Technical", "Case Study")
VALID_ROLES: tuple[str, ...] = (
    "Software Engineer",
    "Product Manager",
    "Data Scientist",
    "Designer",
    "Marketing Manager",
    "Sales Representative",
    "Business Analyst",
    "DevOps Engineer",
    "QA Engineer",
    "Project Manager",
)


@dataclass
class ValidationResult:
    """Result of validation.

    Attributes:
        valid: Whether validation passed
        errors: List of violations
        data: Normalized request model (when valid)
    """

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    data: Any = None

    def __bool__(self) -> bool:
        """Return True if validation passed."""
        return self.valid

    def raise_if_invalid(self) -> None:
        """Raise a ``validation_error`` envelope if validation failed."""
        if not self.valid:
            raise ErrorEnvelope.validation(self.errors)


def _check_text(
    value: Any,
    label: str,
    min_length: int,
    max_length: int,
    errors: list[str],
) -> None:
    if not value or not isinstance(value, str):
        errors.append(f"{label} is required and must be a string")
    elif len(value.strip()) < min_length:
        errors.append(f"{label} is too short (minimum {min_length} characters)")
    elif len(value) > max_length:
        errors.append(f"{label} is too long (maximum {max_length:,} characters)")


def validate_resume_request(
    resume_text: Any,
    job_description_text: Any,
    *,
    priority: str | None = None,
    analysis_depth: str | None = None,
) -> ValidationResult:
    """Validate resume analysis input.

    Length limits apply to the stripped text for the minimum and to the raw
    text for the maximum.

    Returns:
        ValidationResult whose ``data`` is a ResumeAnalysisRequest
    """
    errors: list[str] = []
    _check_text(resume_text, "Resume text", MIN_RESUME_LENGTH, MAX_RESUME_LENGTH, errors)
    _check_text(
        job_description_text,
        "Job description",
        MIN_JOB_DESCRIPTION_LENGTH,
        MAX_JOB_DESCRIPTION_LENGTH,
        errors,
    )

    if errors:
        return ValidationResult(valid=False, errors=errors)

    return ValidationResult(
        data=ResumeAnalysisRequest(
            resume_text=resume_text.strip(),
            job_description_text=job_description_text.strip(),
            priority=priority,
            analysis_depth=analysis_depth,
        )
    )


def _history_field(item: Any, *names: str) -> Any:
    if isinstance(item, HistoryEntry):
        item = item.model_dump()
    for name in names:
        value = item.get(name)
        if value:
            return value
    return None


def validate_interview_request(
    role: Any,
    session_type: Any,
    history: Any = None,
    *,
    difficulty: str | None = None,
    focus_areas: list[str] | None = None,
    time_limit: int | None = None,
) -> ValidationResult:
    """Validate interview question input.

    History entries may be HistoryEntry models or mappings using either the
    short (``q``/``a``) or long (``question``/``answer``) keys.

    Returns:
        ValidationResult whose ``data`` is an InterviewQuestionRequest
    """
    errors: list[str] = []
    history = [] if history is None else history

    if not role or not isinstance(role, str):
        errors.append("Role is required and must be a string")
    elif role not in VALID_ROLES:
        errors.append(f"Invalid role. Must be one of: {', '.join(VALID_ROLES)}")

    if not session_type or not isinstance(session_type, str):
        errors.append("Session type is required and must be a string")
    elif session_type not in VALID_SESSION_TYPES:
        errors.append(
            f"Invalid session type. Must be one of: {', '.join(VALID_SESSION_TYPES)}"
        )

    entries: list[HistoryEntry] = []
    if not isinstance(history, (list, tuple)):
        errors.append("History must be a list")
    elif len(history) > MAX_HISTORY_LENGTH:
        errors.append(f"History is too long (maximum {MAX_HISTORY_LENGTH} interactions)")
    else:
        for index, item in enumerate(history):
            if not isinstance(item, (Mapping, HistoryEntry)):
                errors.append(f"History item {index} must be an object")
                continue
            question = _history_field(item, "q", "question")
            answer = _history_field(item, "a", "answer")
            if not question:
                errors.append(f"History item {index} must have a question (q or question field)")
            if not answer:
                errors.append(f"History item {index} must have an answer (a or answer field)")
            if question and answer:
                entries.append(
                    HistoryEntry(
                        question=str(question),
                        answer=str(answer),
                        timestamp=_history_field(item, "timestamp"),
                    )
                )

    if errors:
        return ValidationResult(valid=False, errors=errors)

    return ValidationResult(
        data=InterviewQuestionRequest(
            role=role.strip(),
            session_type=session_type.strip(),
            history=entries,
            difficulty=difficulty,
            focus_areas=focus_areas,
            time_limit=time_limit,
        )
    )
