"""
Request and result models for the AI operations.

Field aliases follow the service's camelCase wire format; Python code uses
the snake_case names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """One asked question and the candidate's answer."""

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(description="Question text")
    answer: str = Field(description="Answer text")
    timestamp: str | None = Field(default=None, description="ISO-8601 time of the answer")


class ResumeAnalysisRequest(BaseModel):
    """Validated resume analysis request."""

    model_config = ConfigDict(populate_by_name=True)

    resume_text: str = Field(alias="resumeText")
    job_description_text: str = Field(alias="jobDescriptionText")
    priority: str | None = Field(default=None)
    analysis_depth: str | None = Field(default=None, alias="analysisDepth")


class InterviewQuestionRequest(BaseModel):
    """Validated interview question request."""

    model_config = ConfigDict(populate_by_name=True)

    role: str
    session_type: str = Field(alias="sessionType")
    history: list[HistoryEntry] = Field(default_factory=list)
    difficulty: str | None = Field(default=None)
    focus_areas: list[str] | None = Field(default=None, alias="focusAreas")
    time_limit: int | None = Field(default=None, alias="timeLimit")


class ResultMetadata(BaseModel):
    """Service-reported processing details."""

    model_config = ConfigDict(populate_by_name=True)

    processing_time: float | None = Field(default=None, alias="processingTime")
    model_version: str | None = Field(default=None, alias="modelVersion")
    confidence: float | None = Field(default=None)


class OperationResult(BaseModel):
    """Base for operation results.

    ``degraded`` is True when the result came from a fallback producer
    instead of the inference service; ``degraded_reason`` then holds the
    kind of the failure that triggered the fallback.
    """

    model_config = ConfigDict(populate_by_name=True)

    degraded: bool = Field(default=False)
    degraded_reason: str | None = Field(default=None, alias="degradedReason")


class ResumeAnalysis(OperationResult):
    """Sanitized resume analysis."""

    match_score: int = Field(alias="matchScore", ge=0, le=100)
    missing_keywords: list[str] = Field(default_factory=list, alias="missingKeywords")
    action_verb_analysis: str = Field(alias="actionVerbAnalysis")
    format_suggestions: list[str] = Field(default_factory=list, alias="formatSuggestions")
    analysis_id: str = Field(alias="analysisId")
    timestamp: str
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)


class InterviewQuestion(OperationResult):
    """Sanitized interview question."""

    question_text: str = Field(alias="questionText")
    question_id: str = Field(alias="questionId")
    category: str = "General"
    role: str = "General"
    difficulty: str = "medium"
    tags: list[Any] = Field(default_factory=list)
    estimated_time: int = Field(default=300, alias="estimatedTime")
    follow_up_suggestions: list[Any] = Field(default_factory=list, alias="followUpSuggestions")
    timestamp: str
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)


class BatchItemError(BaseModel):
    """Failure of one batch item."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    index: int
    error: Exception


class BatchSummary(BaseModel):
    total: int
    successful: int
    failed: int


class BatchAnalysisResult(BaseModel):
    """Outcome of a batch resume analysis.

    ``results`` and ``errors`` are each ordered by item index.
    """

    results: list[ResumeAnalysis] = Field(default_factory=list)
    errors: list[BatchItemError] = Field(default_factory=list)
    summary: BatchSummary


class QuestionSetMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    requested: int
    generated: int
    role: str
    session_type: str = Field(alias="sessionType")
    timestamp: str


class QuestionSet(BaseModel):
    """Sequentially generated interview questions."""

    questions: list[InterviewQuestion]
    metadata: QuestionSetMetadata


class SuggestionGroup(BaseModel):
    """Questions suggested for one session type."""

    model_config = ConfigDict(populate_by_name=True)

    session_type: str = Field(alias="sessionType")
    questions: list[InterviewQuestion]


class ProfileSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: str
    experience_level: str | None = Field(default=None, alias="experienceLevel")
    target_industry: str | None = Field(default=None, alias="targetIndustry")


class QuestionSuggestions(BaseModel):
    """Question suggestions for a candidate profile.

    ``suggestions`` follows the requested session type order; types whose
    generation failed are listed in ``failed_session_types`` instead.
    """

    model_config = ConfigDict(populate_by_name=True)

    suggestions: list[SuggestionGroup] = Field(default_factory=list)
    user_profile: ProfileSummary = Field(alias="userProfile")
    failed_session_types: list[str] = Field(default_factory=list, alias="failedSessionTypes")
    timestamp: str


class HealthStatus(BaseModel):
    """Result of a health check."""

    model_config = ConfigDict(extra="allow")

    status: str
    timestamp: str
    error: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"
