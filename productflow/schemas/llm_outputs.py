"""
Schemas for structured LLM outputs.

The provider is asked to follow a strict JSON schema, but nothing guarantees
it did; every payload is re-validated here before anything is persisted.
Numeric fields are clamped into their documented ranges instead of rejected.
"""

from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Priority = Literal["critical", "high", "medium", "low"]
Severity = Literal["critical", "high", "medium", "low"]
OverallSentiment = Literal["positive", "negative", "neutral", "mixed"]
FindingSentiment = Literal["positive", "negative", "neutral"]
Effort = Literal["small", "medium", "large", "xlarge"]
TaskCategory = Literal["frontend", "backend", "database", "api", "testing", "devops", "design"]
SourceType = Literal["review", "forum", "social_media", "news", "blog", "support", "other"]


def _number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ValueError("expected a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError("expected a number") from exc


def _clamp(value: Any, low: float, high: float) -> float:
    return max(low, min(high, _number(value)))


class _LlmModel(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())


# ============================================================================
# Analysis
# ============================================================================

class Theme(_LlmModel):
    name: str
    description: str
    frequency: float
    sentiment: OverallSentiment

    @field_validator("frequency", mode="before")
    @classmethod
    def clamp_frequency(cls, v):
        return _clamp(v, 1, 100)


class PainPoint(_LlmModel):
    title: str
    description: str
    severity: Severity
    frequency: float

    @field_validator("frequency", mode="before")
    @classmethod
    def clamp_frequency(cls, v):
        return _clamp(v, 1, 100)


class FeatureRequest(_LlmModel):
    title: str
    description: str
    request_count: float
    priority: Priority

    @field_validator("request_count", mode="before")
    @classmethod
    def clamp_request_count(cls, v):
        return _clamp(v, 1, 100)


class SentimentSummary(_LlmModel):
    overall: OverallSentiment
    positive_percent: float
    negative_percent: float
    neutral_percent: float
    highlights: List[str] = Field(default_factory=list)

    @field_validator("positive_percent", "negative_percent", "neutral_percent", mode="before")
    @classmethod
    def clamp_percent(cls, v):
        return _clamp(v, 0, 100)


class AnalysisPayload(_LlmModel):
    themes: List[Theme]
    pain_points: List[PainPoint]
    feature_requests: List[FeatureRequest]
    sentiment_summary: SentimentSummary


# ============================================================================
# Proposals and tasks
# ============================================================================

class ProposalDraft(_LlmModel):
    title: str = Field(..., min_length=1)
    problem_statement: str
    proposed_solution: str
    ui_changes: str = ""
    data_model_changes: str = ""
    workflow_changes: str = ""
    priority: Priority = "medium"
    effort: Effort = "medium"


class ProposalsPayload(_LlmModel):
    proposals: List[ProposalDraft]


class TaskDraft(_LlmModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    category: TaskCategory
    priority: Priority
    estimated_hours: float

    @field_validator("estimated_hours", mode="before")
    @classmethod
    def non_negative_hours(cls, v):
        return max(0.0, _number(v))


class TasksPayload(_LlmModel):
    tasks: List[TaskDraft]


# ============================================================================
# Company research
# ============================================================================

class FindingDraft(_LlmModel):
    source: str
    source_url: str = ""
    source_type: SourceType = "other"
    title: str
    content: str
    sentiment: FindingSentiment
    sentiment_score: int
    category: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("sentiment_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return int(round(_clamp(v, -100, 100)))


class GatherPayload(_LlmModel):
    """Stage A: company identity plus raw findings."""

    company_name: str
    company_description: str = ""
    findings: List[FindingDraft]


class InsightItem(_LlmModel):
    title: str
    description: str
    evidence_count: int = 0

    @field_validator("evidence_count", mode="before")
    @classmethod
    def non_negative_count(cls, v):
        return max(0, int(round(_number(v))))


class Recommendation(_LlmModel):
    title: str
    description: str
    priority: Priority
    category: str = ""


class SynthesisPayload(_LlmModel):
    """Stage B: executive synthesis over the gathered findings."""

    summary: str
    overall_sentiment: OverallSentiment
    key_strengths: List[InsightItem]
    key_weaknesses: List[InsightItem]
    recommendations: List[Recommendation]
