"""
Type definitions for interview-ai operations.
"""

from interview_ai.types.operations import (
    BatchAnalysisResult,
    BatchItemError,
    BatchSummary,
    HealthStatus,
    HistoryEntry,
    InterviewQuestion,
    InterviewQuestionRequest,
    OperationResult,
    ProfileSummary,
    QuestionSet,
    QuestionSetMetadata,
    QuestionSuggestions,
    ResultMetadata,
    ResumeAnalysis,
    ResumeAnalysisRequest,
    SuggestionGroup,
)

__all__ = [
    "BatchAnalysisResult",
    "BatchItemError",
    "BatchSummary",
    "HealthStatus",
    "HistoryEntry",
    "InterviewQuestion",
    "InterviewQuestionRequest",
    "OperationResult",
    "ProfileSummary",
    "QuestionSet",
    "QuestionSetMetadata",
    "QuestionSuggestions",
    "ResultMetadata",
    "ResumeAnalysis",
    "ResumeAnalysisRequest",
    "SuggestionGroup",
]
