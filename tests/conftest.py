"""Pytest configuration and shared fixtures."""

import json

import pytest
from fastapi.testclient import TestClient

from scholardesk.main import app, get_backend, sessions


class FakeBackend:
    """Generation backend that replays queued replies and records prompts."""

    name = "Fake"

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate(self, prompt, model=None):
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("Unexpected call to the generation service")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def analysis_json(
    document_name="paper.pdf",
    insights=("Finding one", "Finding two"),
    citations=(("A cited passage", 3, 0.9),),
    topics=("Machine Learning", "Ethics"),
    analysis_date="2023-05-01T00:00:00Z",
    **extra,
) -> str:
    payload = {
        "id": "unique-id",
        "documentName": document_name,
        "summary": f"Summary of {document_name}",
        "keyInsights": list(insights),
        "citations": [
            {"text": text, "page": page, "confidence": confidence}
            for text, page, confidence in citations
        ],
        "topics": list(topics),
        "analysisDate": analysis_date,
    }
    payload.update(extra)
    return json.dumps(payload)


def plagiarism_json(**overrides) -> str:
    payload = {
        "plagiarism": {
            "score": 12,
            "matchedSources": [
                {"source": "Wikipedia", "overlapSnippet": "the quick brown fox", "similarity": 0.4}
            ],
            "reasoning": "Mostly original wording.",
        },
        "aiDetection": {"isAI": False, "confidence": 0.2, "comment": "Varied sentence length."},
        "wordCount": 9,
    }
    payload.update(overrides)
    return json.dumps(payload)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def test_client(fake_backend) -> TestClient:
    """FastAPI test client wired to the fake generation backend."""
    app.dependency_overrides[get_backend] = lambda: fake_backend
    sessions.clear()
    yield TestClient(app)
    app.dependency_overrides = {}
    sessions.clear()
