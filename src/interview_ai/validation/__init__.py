"""
Validation - request checks and response sanitizing.
"""

from interview_ai.validation.requests import (
    VALID_ROLES,
    VALID_SESSION_TYPES,
    ValidationResult,
    validate_interview_request,
    validate_resume_request,
)
from interview_ai.validation.responses import (
    coerce_score,
    clean_strings,
    sanitize_interview_question,
    sanitize_resume_analysis,
)

__all__ = [
    "VALID_ROLES",
    "VALID_SESSION_TYPES",
    "ValidationResult",
    "clean_strings",
    "coerce_score",
    "sanitize_interview_question",
    "sanitize_resume_analysis",
    "validate_interview_request",
    "validate_resume_request",
]
