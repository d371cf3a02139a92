"""
Data models for the business discovery pipeline.
Every provider produces a BusinessRecord; every analysis consumes one.
"""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_business_id() -> str:
    return "biz_" + secrets.token_hex(6)


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


# Models
class Review(BaseModel):
    author: str = "Anonymous"
    rating: int = 0  # 0 means the rating could not be read
    date: str = ""
    text: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value):
        try:
            value = int(value or 0)
        except (TypeError, ValueError):
            return 0
        return max(0, min(value, 5))

    @field_validator("author", mode="before")
    @classmethod
    def _default_author(cls, value):
        return value or "Anonymous"


class BusinessRecord(BaseModel):
    """Canonical business record shared by every provider."""

    id: str = Field(default_factory=generate_business_id)
    name: str
    category: str = "Business"
    rating: float = 0.0
    review_count: int = 0
    address: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    hours: Optional[str] = None
    price_level: Optional[str] = None
    source_url: str = ""
    scraped_at: str = Field(default_factory=utc_now)
    reviews: List[Review] = Field(default_factory=list)
    # Set when canned reviews were added because none could be scraped
    reviews_are_synthetic: bool = False

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value):
        try:
            value = float(value or 0)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(value, 5.0))

    @field_validator("review_count", mode="before")
    @classmethod
    def _non_negative(cls, value):
        try:
            return max(0, int(value or 0))
        except (TypeError, ValueError):
            return 0


class DiscoveryResult(BaseModel):
    business: BusinessRecord
    provider: Literal["browserbase", "apify", "mock"] = "mock"
    remote_session_id: Optional[str] = None
    remote_session_url: Optional[str] = None


# Feedback models
class FeedbackEdit(BaseModel):
    text: str
    created_at: str = Field(default_factory=utc_now)


class Feedback(BaseModel):
    thumbs_up: int = 0
    thumbs_down: int = 0
    edits: List[FeedbackEdit] = Field(default_factory=list)


# Task models
Priority = Literal["critical", "high", "medium", "low"]
TaskCategory = Literal[
    "reviews", "operations", "marketing", "competitive", "customer_experience"
]
TaskStatus = Literal["pending", "in_progress", "completed", "dismissed"]
MetricType = Literal["boolean", "number", "percentage"]


class EvalMetric(BaseModel):
    metric: str = "metric"
    description: str = ""
    type: MetricType = "boolean"
    target: Optional[float] = None
    current: Optional[float] = None


class BusinessTask(BaseModel):
    id: str
    title: str = "Untitled Task"
    description: str = ""
    priority: Priority = "medium"
    category: TaskCategory = "operations"
    reasoning: str = ""
    evidence: List[str] = Field(default_factory=list)
    actions: List[str] = Field(default_factory=list)
    eval_harness: List[EvalMetric] = Field(default_factory=list)
    estimated_impact: str = ""
    status: TaskStatus = "pending"
    feedback: Feedback = Field(default_factory=Feedback)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class BusinessProfile(BaseModel):
    business: BusinessRecord
    tasks: List[BusinessTask] = Field(default_factory=list)
    summary: str = ""
    top_issue: str = ""
    sentiment_score: int = 50
    analyzed_at: str = Field(default_factory=utc_now)
    remote_session_id: Optional[str] = None
    remote_session_url: Optional[str] = None
    analysis_source: Literal["llm", "mock"] = "llm"


# Workflow analysis models
Severity = Literal["low", "medium", "high", "critical"]
ToolType = Literal[
    "browser", "voice", "tts", "image_model", "video",
    "sms", "email", "calendar", "llm", "camera",
]
CheckType = Literal[
    "exact_match",
    "contains_keyword",
    "sentiment_positive",
    "response_under_seconds",
    "llm_judge",
]
WorkflowStatus = Literal["suggested", "active", "dismissed"]


class PainPoint(BaseModel):
    issue: str = "unknown"
    label: str = "Unknown Issue"
    frequency: int = 1
    severity: Severity = "medium"
    example_quotes: List[str] = Field(default_factory=list)


class Strength(BaseModel):
    label: str = "Unknown"
    mentions: int = 1


class EvalCheck(BaseModel):
    name: str = "metric"
    description: str = ""
    type: CheckType = "llm_judge"
    target: Optional[str] = None


class Workflow(BaseModel):
    id: str
    name: str = "Unnamed Workflow"
    description: str = ""
    trigger: str = "Manual"
    tools_used: List[ToolType] = Field(default_factory=lambda: ["llm"])
    user_facing: bool = False
    actions: List[str] = Field(default_factory=list)
    eval_metrics: List[EvalCheck] = Field(default_factory=list)
    pain_point_id: str = ""
    confidence: float = 0.8
    status: WorkflowStatus = "suggested"
    feedback: Feedback = Field(default_factory=Feedback)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class BusinessAnalysis(BaseModel):
    business_id: str
    business_type: str = "Business"
    pain_points: List[PainPoint] = Field(default_factory=list)
    strengths: List[Strength] = Field(default_factory=list)
    unanswered_questions: List[str] = Field(default_factory=list)
    workflows: List[Workflow] = Field(default_factory=list)
    analyzed_at: str = Field(default_factory=utc_now)
    analysis_source: Literal["llm", "mock"] = "llm"
