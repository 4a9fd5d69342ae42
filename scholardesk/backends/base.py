"""Base protocol for generation backends and shared response handling."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol, runtime_checkable

import httpx

from scholardesk.errors import InvalidAIResponse, UpstreamUnavailable

logger = logging.getLogger(__name__)

# Only the outermost delimiters; fences quoted inside the reply are kept.
_FENCE_RE = re.compile(
    r"\A\s*```(?:json)?[ \t]*\n?(.*?)\s*(?:```)?\s*\Z",
    re.IGNORECASE | re.DOTALL,
)


@runtime_checkable
class GenerationBackend(Protocol):
    """Interface that all text-generation backends must implement."""

    name: str

    async def generate(self, prompt: str, model: str | None = None) -> str:
        """Send a prompt asking for JSON only and return the raw text reply.

        Raises UpstreamUnavailable when the service cannot be used.
        """
        ...


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence delimiters wrapped around a JSON reply."""
    match = _FENCE_RE.match(text)
    return (match.group(1) if match else text).strip()


def parse_json_response(raw_text: str) -> Any:
    """Parse model output as JSON, retrying once with code fences stripped."""
    try:
        return json.loads(raw_text)
    except (json.JSONDecodeError, TypeError):
        pass

    try:
        return json.loads(strip_code_fences(raw_text or ""))
    except json.JSONDecodeError as exc:
        logger.error("Still invalid JSON after cleaning: %r", raw_text)
        raise InvalidAIResponse(f"Unparseable model output: {exc}", raw_text=raw_text) from exc


def build_user_message(prompt: str) -> list[dict]:
    """Single-turn chat message list used by the chat-style backends."""
    return [{"role": "user", "content": prompt}]


def read_json_body(response: httpx.Response, backend_name: str) -> Any:
    """Decode an upstream envelope, treating a non-JSON body as an outage."""
    try:
        return response.json()
    except ValueError as exc:
        logger.error(
            "%s returned a non-JSON body (%s): %s",
            backend_name, response.headers.get("content-type", "unknown"), response.text[:500],
        )
        raise UpstreamUnavailable(f"{backend_name} returned a non-JSON body") from exc
