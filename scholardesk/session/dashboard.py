"""Dashboard aggregation — derives DashboardStats from the session event log."""

from __future__ import annotations

from collections.abc import Iterable

from scholardesk.models.dashboard import (
    ActivityRecord,
    DashboardStats,
    EventKind,
    RecentDocument,
    SessionEvent,
)
from scholardesk.models.document import DocumentStatus

TOP_TOPICS = 5
RECENT_DOCUMENTS = 5
RECENT_ACTIVITY = 10


def recompute(events: Iterable[SessionEvent]) -> DashboardStats:
    """Fold the complete event log, in occurrence order, into DashboardStats.

    Every counter only grows as events are appended. ``top_topics`` holds the
    first distinct topics in order of first appearance, not the most frequent.
    """
    stats = DashboardStats()
    mentions: dict[str, int] = {}
    # name -> RecentDocument, most recently selected last
    documents: dict[str, RecentDocument] = {}
    activity: list[ActivityRecord] = []

    for event in events:
        kind = event.kind
        if kind is EventKind.UPLOAD:
            stats.documents_uploaded += 1
            documents.pop(event.document_name, None)
            documents[event.document_name] = RecentDocument(
                name=event.document_name,
                upload_date=event.timestamp,
                status=DocumentStatus.PROCESSING,
            )
            activity.append(
                ActivityRecord("upload", f"Uploaded {event.document_name}", event.timestamp)
            )
        elif kind is EventKind.ANALYSIS_STARTED:
            if event.document_name in documents:
                documents[event.document_name].status = DocumentStatus.PROCESSING
        elif kind is EventKind.ANALYSIS_COMPLETE:
            stats.insights_extracted += event.insights
            for topic in dict.fromkeys(event.topics):
                mentions[topic] = mentions.get(topic, 0) + 1
            if event.document_name in documents:
                documents[event.document_name].status = DocumentStatus.COMPLETED
            activity.append(
                ActivityRecord("analysis", f"Analyzed {event.document_name}", event.timestamp)
            )
        elif kind is EventKind.ANALYSIS_FAILED:
            if event.document_name in documents:
                documents[event.document_name].status = DocumentStatus.ERROR
        elif kind is EventKind.CITATION_INGEST:
            stats.citations_generated += event.citation_count
        elif kind is EventKind.QUESTION_ASKED:
            stats.questions_asked += 1

    # dicts keep insertion order, so the first keys are the first topics seen
    stats.top_topics = list(mentions)[:TOP_TOPICS]
    stats.topic_mentions = {t: mentions[t] for t in stats.top_topics}
    stats.recent_documents = list(reversed(documents.values()))[:RECENT_DOCUMENTS]
    stats.recent_activity = list(reversed(activity))[:RECENT_ACTIVITY]
    return stats
