"""ScholarDesk — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from scholardesk.backends.base import GenerationBackend
from scholardesk.backends.registry import build_backend
from scholardesk.config import settings
from scholardesk.errors import NotFound, ScholarDeskError
from scholardesk.models.citation import CitationStyle
from scholardesk.orchestrator.analyzer import Analyzer
from scholardesk.orchestrator.chat import ChatService
from scholardesk.orchestrator.plagiarism import PlagiarismChecker
from scholardesk.session.citations import ALL
from scholardesk.session.controller import SessionOrchestrator, View
from scholardesk.session.registry import SessionRegistry

logger = logging.getLogger(__name__)

sessions = SessionRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Using %s generation backend", settings.generation_backend)
    yield
    sessions.clear()


app = FastAPI(
    title="ScholarDesk",
    description="AI research assistant: analysis, citations, Q&A and plagiarism checks",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_backend() -> GenerationBackend:
    return build_backend(settings)


def get_session(session_id: str) -> SessionOrchestrator:
    return sessions.get(session_id)


# --- Error handling ---


@app.exception_handler(ScholarDeskError)
async def scholardesk_error_handler(request: Request, exc: ScholarDeskError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.public_message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Unexpected error"})


# --- Request / Response models ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(_CamelModel):
    document_name: str
    file_type: str = "pdf"


class ChatRequest(_CamelModel):
    question: str
    document_id: str
    context: str | None = None


class PlagiarismRequest(_CamelModel):
    document_name: str = "untitled"
    file_type: str = "txt"
    file_text: str = ""


class SelectDocumentRequest(_CamelModel):
    document_name: str
    file_type: str | None = None


class QuestionRequest(_CamelModel):
    question: str
    context: str | None = None


class ViewRequest(_CamelModel):
    view: View


class AnalyzeResponse(_CamelModel):
    success: bool = True
    analysis: dict


class ChatResponse(_CamelModel):
    success: bool = True
    answer: str
    confidence: float
    sources: list[dict]


# --- Stateless AI routes ---


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(req: AnalyzeRequest, backend: GenerationBackend = Depends(get_backend)):
    """Analyze a document by name and type only; no content is transmitted."""
    analyzer = Analyzer(backend, settings.analysis_model)
    result = await analyzer.analyze(req.document_name, req.file_type)
    return AnalyzeResponse(analysis=result.to_dict())


@app.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, backend: GenerationBackend = Depends(get_backend)):
    service = ChatService(backend, settings.chat_model)
    answer = await service.ask(req.question, req.document_id, req.context)
    return ChatResponse(**answer.to_dict())


@app.post("/plagiarism")
async def plagiarism(req: PlagiarismRequest, backend: GenerationBackend = Depends(get_backend)):
    """Check the submitted text for plagiarism and AI authorship."""
    checker = PlagiarismChecker(backend, settings.plagiarism_model)
    result = await checker.check(req.document_name, req.file_type, req.file_text)
    return result.to_dict()


# --- Session routes ---


@app.post("/sessions", status_code=201)
async def create_session(backend: GenerationBackend = Depends(get_backend)):
    session = sessions.create(backend)
    return {"sessionId": session.id}


@app.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    sessions.remove(session_id)
    return {"success": True}


@app.post("/sessions/{session_id}/documents", status_code=202)
async def select_document(
    req: SelectDocumentRequest,
    background_tasks: BackgroundTasks,
    session: SessionOrchestrator = Depends(get_session),
):
    """Select a document and analyze it in the background.

    Poll the dashboard or the analysis route for the outcome.
    """
    document = session.select_document(req.document_name)
    background_tasks.add_task(_run_analysis, session, req.document_name, req.file_type)
    return {"success": True, "document": document.to_dict()}


@app.post("/sessions/{session_id}/documents/reanalyze", response_model=AnalyzeResponse)
async def reanalyze_document(
    req: SelectDocumentRequest, session: SessionOrchestrator = Depends(get_session)
):
    result = await session.reanalyze(req.document_name)
    return AnalyzeResponse(analysis=result.to_dict())


@app.get("/sessions/{session_id}/analysis", response_model=AnalyzeResponse)
async def get_analysis(
    document_name: str = Query(alias="documentName"),
    session: SessionOrchestrator = Depends(get_session),
):
    result = session.analyses.get(document_name)
    if result is None:
        raise NotFound(f"No analysis for {document_name}")
    return AnalyzeResponse(analysis=result.to_dict())


@app.post("/sessions/{session_id}/questions", response_model=ChatResponse)
async def ask_question(req: QuestionRequest, session: SessionOrchestrator = Depends(get_session)):
    answer = await session.ask_question(req.question, req.context)
    return ChatResponse(**answer.to_dict())


@app.post("/sessions/{session_id}/plagiarism")
async def session_plagiarism(
    req: PlagiarismRequest, session: SessionOrchestrator = Depends(get_session)
):
    result = await session.check_plagiarism(req.document_name, req.file_type, req.file_text)
    return result.to_dict()


@app.get("/sessions/{session_id}/dashboard")
async def dashboard(session: SessionOrchestrator = Depends(get_session)):
    return session.stats.to_dict()


@app.get("/sessions/{session_id}/citations")
async def list_citations(
    search: str = "",
    category: str = ALL,
    session: SessionOrchestrator = Depends(get_session),
):
    return {
        "citations": [c.to_dict() for c in session.citations.query(search, category)],
        "categories": session.citations.categories(),
    }


@app.get("/sessions/{session_id}/citations/export")
async def export_citations(
    style: CitationStyle = CitationStyle.APA,
    search: str = "",
    category: str = ALL,
    session: SessionOrchestrator = Depends(get_session),
):
    filename, body = session.citations.export(style, search, category)
    return Response(
        content=body,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/sessions/{session_id}/citations/{citation_id}/favorite")
async def toggle_favorite(citation_id: str, session: SessionOrchestrator = Depends(get_session)):
    return session.citations.toggle_favorite(citation_id).to_dict()


@app.get("/sessions/{session_id}/view")
async def current_view(session: SessionOrchestrator = Depends(get_session)):
    return session.render()


@app.put("/sessions/{session_id}/view")
async def change_view(req: ViewRequest, session: SessionOrchestrator = Depends(get_session)):
    session.change_view(req.view)
    return session.render()


# --- Background analysis ---


async def _run_analysis(
    session: SessionOrchestrator, document_name: str, file_type: str | None
) -> None:
    """Analyze a selected document; failures are recorded on the session."""
    try:
        await session.analyze_document(document_name, file_type)
    except ScholarDeskError as exc:
        logger.warning("Background analysis of %s failed: %s", document_name, exc)
    except Exception:
        logger.exception("Background analysis of %s crashed", document_name)


def run() -> None:
    import uvicorn

    uvicorn.run("scholardesk.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
