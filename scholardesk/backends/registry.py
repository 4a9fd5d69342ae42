"""Backend selection from configuration."""

from __future__ import annotations

from scholardesk.backends.base import GenerationBackend
from scholardesk.backends.claude import ClaudeBackend
from scholardesk.backends.gemini import GeminiBackend
from scholardesk.backends.openai_compat import OpenAICompatibleBackend
from scholardesk.config import Settings, settings

BACKEND_NAMES = ("gemini", "anthropic", "openai")


def build_backend(config: Settings = settings) -> GenerationBackend:
    """Instantiate the backend named by ``generation_backend``."""
    name = config.generation_backend.lower()
    timeout = config.generation_timeout
    if name == "gemini":
        return GeminiBackend(api_key=config.google_api_key, timeout=timeout)
    if name == "anthropic":
        return ClaudeBackend(api_key=config.anthropic_api_key, timeout=timeout)
    if name == "openai":
        return OpenAICompatibleBackend(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout=timeout,
        )
    raise ValueError(
        f"Unknown generation backend {config.generation_backend!r}; "
        f"expected one of {', '.join(BACKEND_NAMES)}"
    )
