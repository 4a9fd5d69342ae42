"""OpenAI-compatible generation backend (OpenAI, AIML API, xAI, ...)."""

from __future__ import annotations

import logging

import httpx

from scholardesk.backends.base import build_user_message, read_json_body
from scholardesk.config import settings
from scholardesk.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

SYSTEM_PROMPT = (
    "You are a research assistant expert who provides accurate, well-cited "
    "answers about academic documents. Always respond with valid JSON."
)


class OpenAICompatibleBackend:
    """Generation backend for any chat-completions endpoint."""

    name: str = "OpenAI"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model
        self.timeout = settings.generation_timeout if timeout is None else timeout

    async def generate(self, prompt: str, model: str | None = None) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": model or self.model,
                        "messages": [
                            {"role": "system", "content": SYSTEM_PROMPT},
                            *build_user_message(prompt),
                        ],
                        "response_format": {"type": "json_object"},
                        "temperature": 0.7,
                    },
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("%s request failed: %s", self.name, exc)
            raise UpstreamUnavailable(f"{self.name} request failed: {exc}") from exc

        data = read_json_body(response, self.name)
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("%s returned no choices: %s", self.name, str(data)[:500])
            raise UpstreamUnavailable(f"{self.name} returned no content") from exc
