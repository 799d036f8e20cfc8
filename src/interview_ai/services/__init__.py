"""
Operation services - endpoints, payload shaping and offline fallbacks.
"""

from interview_ai.services.interview import (
    INTERVIEW_QUESTION_ENDPOINT,
    PLACEHOLDER_ANSWER,
    calculate_difficulty,
    format_interview_request,
)
from interview_ai.services.mock import MockResponder
from interview_ai.services.resume import (
    RATE_RESUME_ENDPOINT,
    format_resume_request,
)

HEALTH_CHECK_ENDPOINT = "/api/health"

__all__ = [
    "HEALTH_CHECK_ENDPOINT",
    "INTERVIEW_QUESTION_ENDPOINT",
    "MockResponder",
    "PLACEHOLDER_ANSWER",
    "RATE_RESUME_ENDPOINT",
    "calculate_difficulty",
    "format_interview_request",
    "format_resume_request",
]
