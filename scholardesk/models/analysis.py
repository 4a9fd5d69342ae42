"""Analysis result data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from scholardesk.models.common import isoformat, utcnow


@dataclass
class CitedPassage:
    """A passage the analysis cites, before it is filed as a Citation."""

    text: str
    page: int
    confidence: float

    def to_dict(self) -> dict:
        return {"text": self.text, "page": self.page, "confidence": self.confidence}


@dataclass
class AnalysisResult:
    """Structured output of one document analysis request."""

    document_name: str
    summary: str
    key_insights: list[str] = field(default_factory=list)
    citations: list[CitedPassage] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    analysis_date: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=lambda: uuid4().hex)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "documentName": self.document_name,
            "summary": self.summary,
            "keyInsights": list(self.key_insights),
            "citations": [c.to_dict() for c in self.citations],
            "topics": list(self.topics),
            "analysisDate": isoformat(self.analysis_date),
        }
