"""
Response sanitizing.

Normalizes raw service payloads into result models: coerces and clamps the
score, trims and caps lists, fills defaults. Structural violations raise a
``validation_error`` envelope; a partial result is never returned.
"""

from __future__ import annotations

import math
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from interview_ai.errors import ErrorEnvelope
from interview_ai.types import InterviewQuestion, ResultMetadata, ResumeAnalysis

REQUIRED_RESUME_FIELDS = (
    "matchScore",
    "missingKeywords",
    "actionVerbAnalysis",
    "formatSuggestions",
)
MAX_KEYWORDS = 20
MAX_SUGGESTIONS = 10
MAX_ACTION_VERB_ANALYSIS_LENGTH = 1000
MIN_QUESTION_LENGTH = 10
MAX_QUESTION_LENGTH = 1000
MAX_TAGS = 5
MAX_FOLLOW_UPS = 3
DEFAULT_ESTIMATED_TIME = 300
NO_ACTION_VERB_ANALYSIS = "No action verb analysis available."


def generate_id(prefix: str) -> str:
    """Identifier like ``analysis_1700000000000_3f9a1c2b7``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_score(value: Any) -> int:
    """Coerce a match score into an integer in [0, 100].

    Non-numeric values and NaN become 0; halves round up.
    """
    if not _is_number(value) or math.isnan(value):
        return 0
    if math.isinf(value):
        return 100 if value > 0 else 0
    return max(0, min(100, math.floor(value + 0.5)))


def clean_strings(values: Any, limit: int) -> list[str]:
    """Trim string entries, drop blanks and non-strings, cap at ``limit``."""
    if not isinstance(values, list):
        return []
    cleaned = [v.strip() for v in values if isinstance(v, str) and v.strip()]
    return cleaned[:limit]


def _metadata(response: dict[str, Any]) -> ResultMetadata:
    processing_time = response.get("processingTime")
    model_version = response.get("modelVersion")
    confidence = response.get("confidence")
    return ResultMetadata(
        processing_time=processing_time if _is_number(processing_time) else None,
        model_version=model_version if isinstance(model_version, str) else None,
        confidence=confidence if _is_number(confidence) else None,
    )


def _invalid(violations: list[str]) -> ErrorEnvelope:
    return ErrorEnvelope.validation(
        violations,
        detail=f"Invalid response from AI service: {', '.join(violations)}",
    )


def _build(model: type[Any], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise _invalid(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e


def sanitize_resume_analysis(response: Any) -> ResumeAnalysis:
    """Normalize a raw resume analysis payload.

    Args:
        response: Parsed JSON body from the service or a fallback producer

    Returns:
        ResumeAnalysis

    Raises:
        ErrorEnvelope: ``validation_error`` when the payload is not an object
            or lacks a required field
    """
    if not isinstance(response, dict):
        raise _invalid(["Invalid response format from AI service"])

    missing = [name for name in REQUIRED_RESUME_FIELDS if name not in response]
    if missing:
        raise _invalid([f"Missing required fields in response: {', '.join(missing)}"])

    analysis = response["actionVerbAnalysis"]
    if not isinstance(analysis, str):
        analysis = NO_ACTION_VERB_ANALYSIS

    return _build(
        ResumeAnalysis,
        {
            "matchScore": coerce_score(response["matchScore"]),
            "missingKeywords": clean_strings(response["missingKeywords"], MAX_KEYWORDS),
            "actionVerbAnalysis": analysis.strip()[:MAX_ACTION_VERB_ANALYSIS_LENGTH],
            "formatSuggestions": clean_strings(response["formatSuggestions"], MAX_SUGGESTIONS),
            "analysisId": response.get("analysisId") or generate_id("analysis"),
            "timestamp": response.get("timestamp") or utc_timestamp(),
            "metadata": _metadata(response),
        },
    )


def sanitize_interview_question(response: Any) -> InterviewQuestion:
    """Normalize a raw interview question payload.

    Args:
        response: Parsed JSON body from the service or a fallback producer

    Returns:
        InterviewQuestion

    Raises:
        ErrorEnvelope: ``validation_error`` when the question text is missing
            or outside 10-1000 characters
    """
    if not isinstance(response, dict):
        raise _invalid(["Invalid response format from AI service"])

    question_text = response.get("questionText")
    if not question_text or not isinstance(question_text, str):
        raise _invalid(["Missing or invalid questionText in response"])

    question_text = question_text.strip()
    if len(question_text) < MIN_QUESTION_LENGTH:
        raise _invalid(["Question text is too short"])
    if len(question_text) > MAX_QUESTION_LENGTH:
        raise _invalid(["Question text is too long"])

    estimated_time = response.get("estimatedTime")
    if (
        not _is_number(estimated_time)
        or not math.isfinite(estimated_time)
        or estimated_time <= 0
    ):
        estimated_time = DEFAULT_ESTIMATED_TIME

    tags = response.get("tags")
    follow_ups = response.get("followUpSuggestions")

    return _build(
        InterviewQuestion,
        {
            "questionText": question_text,
            "questionId": response.get("questionId") or generate_id("question"),
            "category": response.get("category") or "General",
            "role": response.get("role") or "General",
            "difficulty": response.get("difficulty") or "medium",
            "tags": tags[:MAX_TAGS] if isinstance(tags, list) else [],
            "estimatedTime": int(estimated_time),
            "followUpSuggestions": (
                follow_ups[:MAX_FOLLOW_UPS] if isinstance(follow_ups, list) else []
            ),
            "timestamp": response.get("timestamp") or utc_timestamp(),
            "metadata": _metadata(response),
        },
    )
