"""
interview-ai: resilient AI call layer for interview preparation.

Wraps every call to the inference service (resume scoring, interview
question generation) with rate limiting, adaptive throttling, a circuit
breaker, retry with backoff, response sanitizing and graceful degradation.
"""

from __future__ import annotations

from interview_ai.client import CancelReason, CancelToken, InterviewAiClient
from interview_ai.config import ServiceConfig
from interview_ai.errors import ErrorEnvelope, ErrorKind, InterviewAiError
from interview_ai.resilience import ResilienceConfig, ResilienceRegistry
from interview_ai.types import (
    BatchAnalysisResult,
    HealthStatus,
    HistoryEntry,
    InterviewQuestion,
    QuestionSet,
    QuestionSuggestions,
    ResumeAnalysis,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "CancelReason",
    "CancelToken",
    "InterviewAiClient",
    # Config
    "ResilienceConfig",
    "ResilienceRegistry",
    "ServiceConfig",
    # Errors
    "ErrorEnvelope",
    "ErrorKind",
    "InterviewAiError",
    # Types
    "BatchAnalysisResult",
    "HealthStatus",
    "HistoryEntry",
    "InterviewQuestion",
    "QuestionSet",
    "QuestionSuggestions",
    "ResumeAnalysis",
    # Version
    "__version__",
]
