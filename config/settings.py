from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. The API key is only
    checked when the model is first called, so a missing key fails requests
    rather than startup.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY") or None
        self.anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
        self.max_tokens: int = int(os.getenv("MAX_TOKENS", "1024"))
        self.history_limit: int = int(os.getenv("HISTORY_LIMIT", "20"))
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3000"))
        self.static_dir: Optional[str] = os.getenv("STATIC_DIR") or None
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
