"""Session orchestrator — the single owner of a research session's state."""

from __future__ import annotations

import logging
from enum import Enum
from uuid import uuid4

from scholardesk.backends.base import GenerationBackend
from scholardesk.config import Settings, settings
from scholardesk.errors import NotFound, ValidationError
from scholardesk.models.analysis import AnalysisResult
from scholardesk.models.chat import ChatAnswer
from scholardesk.models.citation import Citation, citations_from_analysis
from scholardesk.models.dashboard import DashboardStats, EventKind, SessionEvent
from scholardesk.models.document import Document, DocumentStatus
from scholardesk.models.plagiarism import PlagiarismResult
from scholardesk.orchestrator.analyzer import AnalysisResultCache, Analyzer
from scholardesk.orchestrator.chat import ChatService
from scholardesk.orchestrator.plagiarism import PlagiarismChecker
from scholardesk.session.citations import CitationStore
from scholardesk.session.dashboard import recompute

logger = logging.getLogger(__name__)


class View(Enum):
    DASHBOARD = "dashboard"
    RESEARCH = "research"
    CITATIONS = "citations"
    PLAGIARISM = "plagiarism"


class SessionOrchestrator:
    """Routes user actions into the analysis cache, citation store and event log.

    State changes only through the methods below. Dashboard statistics are
    never stored; they are recomputed from the event log on demand, so
    ``stats.citations_generated`` always equals ``len(self.citations)``.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        config: Settings = settings,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid4().hex
        self.analyses = AnalysisResultCache(Analyzer(backend, config.analysis_model))
        self.chat = ChatService(backend, config.chat_model)
        self.plagiarism = PlagiarismChecker(backend, config.plagiarism_model)
        self.citations = CitationStore()
        self.documents: dict[str, Document] = {}
        self.events: list[SessionEvent] = []
        self.view = View.DASHBOARD
        self.selected_document: str | None = None
        self.current_analysis: AnalysisResult | None = None
        self.last_plagiarism: PlagiarismResult | None = None

    # -- Derived state --

    @property
    def stats(self) -> DashboardStats:
        return recompute(self.events)

    def document(self, name: str) -> Document:
        try:
            return self.documents[name]
        except KeyError:
            raise NotFound(f"Document {name} not found") from None

    # -- Documents and analysis --

    def select_document(self, name: str) -> Document:
        """Register ``name`` for processing and make it the selected document."""
        if not name or not name.strip():
            raise ValidationError("No document name provided")
        document = Document(name=name, status=DocumentStatus.PROCESSING)
        self.documents[name] = document
        self.selected_document = name
        self.current_analysis = None
        self._append(SessionEvent(EventKind.UPLOAD, document_name=name))
        logger.info("Session %s selected %s", self.id, name)
        return document

    async def analyze_document(
        self, name: str, file_type: str | None = None
    ) -> AnalysisResult:
        """Request an analysis and fold it, and its citations, into the session.

        On failure of any kind the document is marked as errored and the error
        re-raised.
        """
        document = self.document(name)
        document.status = DocumentStatus.PROCESSING
        self._append(SessionEvent(EventKind.ANALYSIS_STARTED, document_name=name))
        try:
            result = await self.analyses.request_analysis(
                name, file_type or document.file_type
            )
        except Exception as exc:
            self.fail_analysis(name, exc)
            raise
        self.complete_analysis(result)
        self.record_citations(citations_from_analysis(result))
        return result

    async def reanalyze(self, name: str) -> AnalysisResult:
        """Analyze a known document again; the new result replaces the old one."""
        return await self.analyze_document(name)

    def complete_analysis(self, result: AnalysisResult) -> None:
        self.analyses.put(result)
        self._append(
            SessionEvent(
                EventKind.ANALYSIS_COMPLETE,
                document_name=result.document_name,
                insights=len(result.key_insights),
                topics=tuple(result.topics),
            )
        )
        document = self.documents.get(result.document_name)
        if document is not None:
            document.status = DocumentStatus.COMPLETED
        # A late result for a document that is no longer selected must not
        # replace what the user is looking at.
        if result.document_name == self.selected_document:
            self.current_analysis = result
        else:
            logger.info(
                "Session %s: analysis of %s finished after selection moved to %s",
                self.id, result.document_name, self.selected_document,
            )

    def fail_analysis(self, name: str, error: Exception) -> None:
        logger.error("Session %s: analysis of %s failed: %s", self.id, name, error)
        document = self.documents.get(name)
        if document is not None:
            document.status = DocumentStatus.ERROR
        self._append(SessionEvent(EventKind.ANALYSIS_FAILED, document_name=name))

    def record_citations(self, citations: list[Citation]) -> int:
        added = self.citations.ingest(citations)
        self._append(SessionEvent(EventKind.CITATION_INGEST, citation_count=added))
        return added

    # -- Questions and checks --

    def record_question(self) -> None:
        self._append(SessionEvent(EventKind.QUESTION_ASKED, document_name=self.selected_document))

    async def ask_question(self, question: str, context: str | None = None) -> ChatAnswer:
        """Ask about the currently displayed analysis."""
        if self.current_analysis is None:
            raise ValidationError("No analyzed document selected")
        answer = await self.chat.ask(question, self.current_analysis.id, context)
        self.record_question()
        return answer

    async def check_plagiarism(
        self, document_name: str, file_type: str, file_text: str
    ) -> PlagiarismResult:
        result = await self.plagiarism.check(document_name, file_type, file_text)
        self.last_plagiarism = result
        return result

    # -- Views --

    def change_view(self, view: View | str) -> View:
        if not isinstance(view, View):
            try:
                view = View(view)
            except ValueError:
                raise ValidationError(f"Unknown view {view!r}") from None
        self.view = view
        return view

    def render(self) -> dict:
        """Payload for the active view. Read-only."""
        if self.view is View.RESEARCH:
            selected = self.documents.get(self.selected_document) if self.selected_document else None
            return {
                "view": self.view.value,
                "selectedDocument": selected.to_dict() if selected else None,
                "analysis": self.current_analysis.to_dict() if self.current_analysis else None,
                "documents": [d.to_dict() for d in self.documents.values()],
            }
        if self.view is View.CITATIONS:
            return {
                "view": self.view.value,
                "citations": [c.to_dict() for c in self.citations],
                "categories": self.citations.categories(),
            }
        if self.view is View.PLAGIARISM:
            return {
                "view": self.view.value,
                "result": self.last_plagiarism.to_dict() if self.last_plagiarism else None,
            }
        return {"view": self.view.value, "stats": self.stats.to_dict()}

    def _append(self, event: SessionEvent) -> None:
        self.events.append(event)
