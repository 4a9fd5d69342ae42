"""Tests for the session orchestrator."""

import asyncio

import pytest

from scholardesk.errors import InvalidAIResponse, NotFound, UpstreamUnavailable, ValidationError
from scholardesk.models.analysis import AnalysisResult
from scholardesk.models.document import DocumentStatus
from scholardesk.session.controller import SessionOrchestrator, View

from conftest import FakeBackend, analysis_json, plagiarism_json


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session(backend):
    return SessionOrchestrator(backend)


def test_select_document_registers_processing(session):
    document = session.select_document("paper.pdf")

    assert document.status is DocumentStatus.PROCESSING
    assert session.selected_document == "paper.pdf"
    assert session.current_analysis is None
    assert session.stats.documents_uploaded == 1
    assert session.stats.recent_activity[0].description == "Uploaded paper.pdf"


def test_select_blank_document(session):
    with pytest.raises(ValidationError):
        session.select_document("")


@pytest.mark.asyncio
async def test_analyze_document_updates_every_store(session, backend):
    backend.queue(analysis_json(citations=(("one", 1, 0.9), ("two", 2, 0.8))))
    session.select_document("paper.pdf")
    result = await session.analyze_document("paper.pdf")

    assert session.current_analysis is result
    assert session.analyses.get("paper.pdf") is result
    assert session.document("paper.pdf").status is DocumentStatus.COMPLETED
    assert [c.id for c in session.citations] == [f"{result.id}-0", f"{result.id}-1"]

    stats = session.stats
    assert stats.citations_generated == len(session.citations) == 2
    assert stats.insights_extracted == 2
    assert stats.top_topics == ["Machine Learning", "Ethics"]
    assert "File Type: pdf" in backend.prompts[0]


@pytest.mark.asyncio
async def test_file_type_defaults_to_extension(session, backend):
    backend.queue(analysis_json(document_name="notes.docx"))
    session.select_document("notes.docx")
    await session.analyze_document("notes.docx")
    assert "File Type: docx" in backend.prompts[0]


@pytest.mark.asyncio
async def test_reanalysis_replaces_analysis_and_appends_citations(session, backend):
    backend.queue(analysis_json(), analysis_json(insights=("new",)))
    session.select_document("paper.pdf")
    first = await session.analyze_document("paper.pdf")
    second = await session.reanalyze("paper.pdf")

    assert session.analyses.get("paper.pdf") is second
    assert session.current_analysis is second
    assert len(session.citations) == 2
    assert {c.document_id for c in session.citations} == {first.id, second.id}
    assert session.stats.citations_generated == 2
    assert session.stats.insights_extracted == 3
    assert session.stats.documents_uploaded == 1


@pytest.mark.asyncio
async def test_reanalyze_unknown_document(session):
    with pytest.raises(NotFound):
        await session.reanalyze("missing.pdf")


def test_late_completion_does_not_replace_newer_selection(session):
    session.select_document("a.pdf")
    session.select_document("b.pdf")
    late = AnalysisResult(document_name="a.pdf", summary="late", key_insights=["x"])
    session.complete_analysis(late)

    assert session.current_analysis is None
    assert session.analyses.get("a.pdf") is late
    assert session.document("a.pdf").status is DocumentStatus.COMPLETED
    assert session.stats.insights_extracted == 1


@pytest.mark.asyncio
async def test_failed_analysis_marks_document_and_reraises(session, backend):
    backend.queue("not json")
    session.select_document("paper.pdf")
    with pytest.raises(InvalidAIResponse):
        await session.analyze_document("paper.pdf")

    assert session.document("paper.pdf").status is DocumentStatus.ERROR
    assert session.stats.recent_documents[0].status is DocumentStatus.ERROR
    assert len(session.citations) == 0
    assert session.current_analysis is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [UpstreamUnavailable("Gemini returned a non-JSON body"), RuntimeError("boom")],
    ids=["upstream", "unexpected"],
)
async def test_any_analysis_failure_marks_document_errored(session, backend, error):
    backend.queue(error)
    session.select_document("paper.pdf")
    with pytest.raises(type(error)):
        await session.analyze_document("paper.pdf")

    assert session.document("paper.pdf").status is DocumentStatus.ERROR
    assert session.stats.recent_documents[0].status is DocumentStatus.ERROR


@pytest.mark.asyncio
async def test_document_and_dashboard_agree_during_reanalysis(session, backend):
    backend.queue(analysis_json(), analysis_json(insights=("new",)))
    session.select_document("paper.pdf")
    await session.analyze_document("paper.pdf")

    release = asyncio.Event()
    generate = backend.generate

    async def held_generate(prompt, model=None):
        await release.wait()
        return await generate(prompt, model)

    backend.generate = held_generate
    task = asyncio.create_task(session.reanalyze("paper.pdf"))
    await asyncio.sleep(0)

    assert session.document("paper.pdf").status is DocumentStatus.PROCESSING
    assert session.stats.recent_documents[0].status is DocumentStatus.PROCESSING

    release.set()
    await task

    assert session.document("paper.pdf").status is DocumentStatus.COMPLETED
    assert session.stats.recent_documents[0].status is DocumentStatus.COMPLETED


@pytest.mark.asyncio
async def test_ask_question_requires_analysis(session, backend):
    with pytest.raises(ValidationError):
        await session.ask_question("What is it about?")
    assert backend.prompts == []


@pytest.mark.asyncio
async def test_ask_question_counts_answered_questions(session, backend):
    backend.queue(
        analysis_json(),
        '{"answer": "It is about ML.", "confidence": 0.8, "sources": [{"page": 2, "text": "ML"}]}',
    )
    session.select_document("paper.pdf")
    result = await session.analyze_document("paper.pdf")
    answer = await session.ask_question("What is it about?")

    assert answer.answer == "It is about ML."
    assert f"Document ID: {result.id}" in backend.prompts[1]
    assert session.stats.questions_asked == 1


@pytest.mark.asyncio
async def test_plagiarism_result_is_kept_for_display(session, backend):
    backend.queue(plagiarism_json())
    session.change_view("plagiarism")
    await session.check_plagiarism("essay.txt", "txt", "some words here")

    rendered = session.render()
    assert rendered["view"] == "plagiarism"
    assert rendered["result"]["plagiarism"]["score"] == 12
    assert session.stats.documents_uploaded == 0


def test_change_view_has_no_data_side_effects(session):
    session.select_document("paper.pdf")
    before = session.stats.to_dict()

    for view in ("research", "citations", "plagiarism", View.DASHBOARD):
        session.change_view(view)

    assert session.view is View.DASHBOARD
    assert session.stats.to_dict() == before
    assert len(session.events) == 1


def test_change_view_rejects_unknown(session):
    with pytest.raises(ValidationError):
        session.change_view("settings")


def test_render_views(session):
    session.select_document("paper.pdf")

    assert session.render()["stats"]["documentsUploaded"] == 1

    session.change_view("research")
    rendered = session.render()
    assert rendered["selectedDocument"]["name"] == "paper.pdf"
    assert rendered["analysis"] is None

    session.change_view("citations")
    assert session.render() == {"view": "citations", "citations": [], "categories": []}
