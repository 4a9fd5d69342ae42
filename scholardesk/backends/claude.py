"""Claude generation backend — Anthropic Messages API via httpx."""

from __future__ import annotations

import logging

import httpx

from scholardesk.backends.base import build_user_message, read_json_body
from scholardesk.config import settings
from scholardesk.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-sonnet-4-5"

SYSTEM_PROMPT = (
    "You are an expert research analyst. Always respond with valid JSON only, "
    "with no prose and no Markdown code fences."
)


class ClaudeBackend:
    """Generation backend using Anthropic's Claude API."""

    name: str = "Claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model
        self.timeout = settings.generation_timeout if timeout is None else timeout

    async def generate(self, prompt: str, model: str | None = None) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    ANTHROPIC_API_URL,
                    headers={
                        "x-api-key": self.api_key,
                        "anthropic-version": "2023-06-01",
                        "content-type": "application/json",
                    },
                    json={
                        "model": model or self.model,
                        "max_tokens": 4096,
                        "system": SYSTEM_PROMPT,
                        "messages": build_user_message(prompt),
                    },
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Claude request failed: %s", exc)
            raise UpstreamUnavailable(f"Claude request failed: {exc}") from exc

        data = read_json_body(response, self.name)
        blocks = data.get("content") if isinstance(data, dict) else None
        for block in blocks or []:
            if isinstance(block, dict) and block.get("type") == "text":
                return block.get("text") or ""
        logger.error("Claude returned no text block: %s", str(data)[:500])
        raise UpstreamUnavailable("Claude returned no text")
