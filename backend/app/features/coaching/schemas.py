"""
Pydantic schemas for coaching analysis and chat.
"""

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.features.runs.schemas import RunMetrics


class Insight(BaseModel):
    title: str
    detail: str
    type: Literal["tip", "positive", "warning"]


class Recommendation(BaseModel):
    title: str
    detail: str


class AnalysisResult(BaseModel):
    """Structured output expected from the coaching model."""

    model_config = ConfigDict(extra="ignore")

    summary: str
    insights: list[Insight]
    recommendations: list[Recommendation]


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    run_data: RunMetrics = Field(..., alias="runData")


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    summary: str
    insights: list[Insight] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    from_cache: bool = Field(
        default=False,
        validation_alias=AliasChoices("from_cache", "fromCache"),
        serialization_alias="fromCache",
    )


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1)
    run_data: RunMetrics = Field(..., alias="runData")


class ChatResponse(BaseModel):
    answer: str


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: Optional[str] = None
