"""Gemini generation backend — Google Generative Language API."""

from __future__ import annotations

import logging

import httpx

from scholardesk.backends.base import read_json_body
from scholardesk.config import settings
from scholardesk.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

GENERATE_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiBackend:
    """Generation backend using Gemini with a JSON response MIME type."""

    name: str = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_api_key
        self.model = model
        self.timeout = settings.generation_timeout if timeout is None else timeout

    async def generate(self, prompt: str, model: str | None = None) -> str:
        model = model or self.model
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    GENERATE_URL.format(model=model),
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self.api_key,
                    },
                    json={
                        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                        "generationConfig": {"responseMimeType": "application/json"},
                    },
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Gemini request failed: %s", exc)
            raise UpstreamUnavailable(f"Gemini request failed: {exc}") from exc

        data = read_json_body(response, self.name)
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            logger.error("Gemini returned no candidates: %s", str(data)[:500])
            raise UpstreamUnavailable("Gemini returned no content") from exc
