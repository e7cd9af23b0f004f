import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load API keys and overrides from .env
load_dotenv()


def _csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings(BaseModel):
    app_env: str = os.getenv("APP_ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # LLM backends: primary=OpenAI, secondary=Anthropic, tertiary=Gemini
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-7-sonnet-20250219")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    max_tokens: int = Field(default_factory=lambda: os.getenv("MAX_TOKENS", "1024"), validate_default=True)

    # Chat defaults, overridable per request
    default_provider: str = os.getenv("AI_PROVIDER", "primary")
    default_language: str = os.getenv("CHAT_LANGUAGE", "es")
    tts_enabled: bool = os.getenv("TTS_ENABLED", "false").lower() in ("1", "true", "yes")

    # Server
    cors_origins: List[str] = _csv(os.getenv("CORS_ORIGINS", "*"))
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = Field(default_factory=lambda: os.getenv("PORT", "8000"), validate_default=True)
    # The in-memory store lives in the worker process; keep 1 unless a durable store is used
    workers: int = Field(default_factory=lambda: os.getenv("WORKERS", "1"), validate_default=True)


settings = Settings()
