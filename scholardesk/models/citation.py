"""Citation data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from scholardesk.models.analysis import AnalysisResult
from scholardesk.models.common import isoformat, utcnow


class CitationStyle(Enum):
    APA = "apa"
    MLA = "mla"
    CHICAGO = "chicago"


@dataclass
class Citation:
    """A cited passage attributed to an analyzed document."""

    id: str
    text: str
    page: int
    confidence: float
    document_name: str
    document_id: str
    category: str | None = None
    is_favorite: bool = False
    date_added: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "page": self.page,
            "confidence": self.confidence,
            "documentName": self.document_name,
            "documentId": self.document_id,
            "category": self.category,
            "isFavorite": self.is_favorite,
            "dateAdded": isoformat(self.date_added),
        }


def citations_from_analysis(
    analysis: AnalysisResult, category: str = "analysis"
) -> list[Citation]:
    """File every passage of an analysis as a Citation.

    Ids are ``{analysis id}-{index}``; the analysis date becomes dateAdded.
    """
    return [
        Citation(
            id=f"{analysis.id}-{index}",
            text=passage.text,
            page=passage.page,
            confidence=passage.confidence,
            document_name=analysis.document_name,
            document_id=analysis.id,
            category=category,
            date_added=analysis.analysis_date,
        )
        for index, passage in enumerate(analysis.citations)
    ]
