"""Session event log and the dashboard statistics derived from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from scholardesk.models.common import isoformat, utcnow
from scholardesk.models.document import DocumentStatus


class EventKind(Enum):
    UPLOAD = "upload"
    ANALYSIS_STARTED = "analysis-started"
    ANALYSIS_COMPLETE = "analysis-complete"
    ANALYSIS_FAILED = "analysis-failed"
    CITATION_INGEST = "citation-ingest"
    QUESTION_ASKED = "question-asked"


@dataclass(frozen=True)
class SessionEvent:
    """One completed action, in the order it happened."""

    kind: EventKind
    document_name: str | None = None
    insights: int = 0
    topics: tuple[str, ...] = ()
    citation_count: int = 0
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class RecentDocument:
    name: str
    upload_date: datetime
    status: DocumentStatus

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "uploadDate": isoformat(self.upload_date),
            "status": self.status.value,
        }


@dataclass
class ActivityRecord:
    type: str
    description: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "description": self.description,
            "timestamp": isoformat(self.timestamp),
        }


@dataclass
class DashboardStats:
    documents_uploaded: int = 0
    citations_generated: int = 0
    questions_asked: int = 0
    insights_extracted: int = 0
    top_topics: list[str] = field(default_factory=list)
    topic_mentions: dict[str, int] = field(default_factory=dict)
    recent_documents: list[RecentDocument] = field(default_factory=list)
    recent_activity: list[ActivityRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "documentsUploaded": self.documents_uploaded,
            "citationsGenerated": self.citations_generated,
            "questionsAsked": self.questions_asked,
            "insightsExtracted": self.insights_extracted,
            "topTopics": list(self.top_topics),
            "topicMentions": dict(self.topic_mentions),
            "recentDocuments": [d.to_dict() for d in self.recent_documents],
            "recentActivity": [a.to_dict() for a in self.recent_activity],
        }
