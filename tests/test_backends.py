"""Tests for the generation backends and backend selection."""

import httpx
import pytest

from scholardesk.backends.claude import ClaudeBackend
from scholardesk.backends.gemini import GeminiBackend
from scholardesk.backends.openai_compat import OpenAICompatibleBackend
from scholardesk.backends.registry import build_backend
from scholardesk.config import Settings
from scholardesk.errors import UpstreamUnavailable


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient through a handler set by the test."""
    state = {}
    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(state["handler"])
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return state


@pytest.mark.asyncio
async def test_gemini_returns_candidate_text(mock_http):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": '{"a": '}, {"text": "1}"}]}}]}
        )

    mock_http["handler"] = handler
    text = await GeminiBackend(api_key="k").generate("prompt", model="gemini-test")

    assert text == '{"a": 1}'
    assert seen["url"].endswith("/models/gemini-test:generateContent")
    assert seen["key"] == "k"


@pytest.mark.asyncio
async def test_gemini_http_error_is_upstream_unavailable(mock_http):
    mock_http["handler"] = lambda request: httpx.Response(503, json={"error": "overloaded"})
    with pytest.raises(UpstreamUnavailable):
        await GeminiBackend(api_key="k").generate("prompt")


@pytest.mark.asyncio
async def test_gemini_without_candidates(mock_http):
    mock_http["handler"] = lambda request: httpx.Response(200, json={"promptFeedback": {}})
    with pytest.raises(UpstreamUnavailable):
        await GeminiBackend(api_key="k").generate("prompt")


@pytest.mark.asyncio
@pytest.mark.parametrize("backend_cls", [GeminiBackend, ClaudeBackend, OpenAICompatibleBackend])
async def test_html_body_with_200_is_upstream_unavailable(mock_http, backend_cls):
    mock_http["handler"] = lambda request: httpx.Response(
        200, text="<html>proxy login</html>", headers={"content-type": "text/html"}
    )
    with pytest.raises(UpstreamUnavailable):
        await backend_cls(api_key="k").generate("prompt")


@pytest.mark.asyncio
async def test_claude_unexpected_envelope_is_upstream_unavailable(mock_http):
    mock_http["handler"] = lambda request: httpx.Response(200, json=["not", "an", "object"])
    with pytest.raises(UpstreamUnavailable):
        await ClaudeBackend(api_key="k").generate("prompt")


@pytest.mark.asyncio
async def test_timeout_is_upstream_unavailable(mock_http):
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    mock_http["handler"] = handler
    with pytest.raises(UpstreamUnavailable):
        await ClaudeBackend(api_key="k", timeout=0.1).generate("prompt")


@pytest.mark.asyncio
async def test_claude_returns_text_block(mock_http):
    mock_http["handler"] = lambda request: httpx.Response(
        200, json={"content": [{"type": "text", "text": "{}"}]}
    )
    assert await ClaudeBackend(api_key="k").generate("prompt") == "{}"


@pytest.mark.asyncio
async def test_openai_compatible_uses_base_url(mock_http):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"choices": [{"message": {"content": "{}"}}]})

    mock_http["handler"] = handler
    backend = OpenAICompatibleBackend(api_key="k", base_url="https://api.aimlapi.com/v1/")

    assert await backend.generate("prompt") == "{}"
    assert seen["url"] == "https://api.aimlapi.com/v1/chat/completions"


@pytest.mark.parametrize(
    "name, backend_cls",
    [
        ("gemini", GeminiBackend),
        ("anthropic", ClaudeBackend),
        ("OpenAI", OpenAICompatibleBackend),
    ],
)
def test_build_backend(name, backend_cls):
    backend = build_backend(Settings(generation_backend=name, generation_timeout=5.0))
    assert isinstance(backend, backend_cls)
    assert backend.timeout == 5.0


def test_build_unknown_backend():
    with pytest.raises(ValueError):
        build_backend(Settings(generation_backend="llama"))


@pytest.mark.parametrize("backend_cls", [GeminiBackend, ClaudeBackend, OpenAICompatibleBackend])
def test_zero_timeout_is_kept(backend_cls):
    assert backend_cls(api_key="k", timeout=0.0).timeout == 0.0
