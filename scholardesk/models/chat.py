"""Question-answering data model."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ChatSource:
    page: int
    text: str


@dataclass
class ChatAnswer:
    """Answer to a follow-up question about a document."""

    answer: str
    confidence: float
    sources: list[ChatSource] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "answer": self.answer,
            "confidence": self.confidence,
            "sources": [{"page": s.page, "text": s.text} for s in self.sources],
        }
