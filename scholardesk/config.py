"""ScholarDesk configuration — loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SCHOLARDESK_", "env_file": ".env"}

    # Generation service: "gemini", "anthropic" or "openai"
    generation_backend: str = "gemini"
    generation_timeout: float = 60.0

    # LLM API keys
    google_api_key: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"

    # Per-operation model overrides; empty means the backend default
    analysis_model: str = ""
    chat_model: str = ""
    plagiarism_model: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"


settings = Settings()
