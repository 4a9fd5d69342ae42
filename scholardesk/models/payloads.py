"""Shapes the generation service is asked to return.

Model output is validated against these before it is turned into the
domain dataclasses; anything that does not fit is rejected whole.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CitedPassagePayload(_Payload):
    text: str
    page: int = Field(ge=1)
    confidence: float = Field(ge=0.0, le=1.0)


class AnalysisPayload(_Payload):
    summary: str
    key_insights: list[str] = Field(default_factory=list)
    citations: list[CitedPassagePayload] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    analysis_date: str | None = None


class ChatSourcePayload(_Payload):
    page: int = Field(ge=1)
    text: str


class ChatPayload(_Payload):
    answer: str
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[ChatSourcePayload] = Field(default_factory=list)


class MatchedSourcePayload(_Payload):
    source: str
    overlap_snippet: str = ""
    similarity: float = Field(ge=0.0, le=1.0)


class PlagiarismScorePayload(_Payload):
    score: float = Field(ge=0.0, le=100.0)
    matched_sources: list[MatchedSourcePayload] = Field(default_factory=list)
    reasoning: str = ""


class AIDetectionPayload(_Payload):
    is_ai: bool = Field(alias="isAI")
    confidence: float = Field(ge=0.0, le=1.0)
    comment: str = ""


class PlagiarismPayload(_Payload):
    plagiarism: PlagiarismScorePayload
    ai_detection: AIDetectionPayload
    word_count: int | None = Field(default=None, ge=0)
