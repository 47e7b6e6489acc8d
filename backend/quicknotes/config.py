"""
Client settings for Quick Notes, loaded from the environment and .env.
"""

from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings
from functools import lru_cache

import os

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    API_BASE_URL: str = "http://localhost:8787/api"
    API_KEY: str = os.environ.get("QUICKNOTES_API_KEY") or ""
    NOTES_COLLECTION: str = "notes"

    REMOTE_TIMEOUT_SECONDS: float = 10.0
    REMOTE_MAX_RETRIES: int = 2
    REMOTE_RETRY_BASE_SECONDS: float = 0.5
    REMOTE_RETRY_MAX_SECONDS: float = 4.0

    SESSION_DB_PATH: str = "database/session.db"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    DEBUG: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    @model_validator(mode="after")
    def resolve_relative_paths(self):
        db_path = Path(self.SESSION_DB_PATH)
        if not db_path.is_absolute():
            self.SESSION_DB_PATH = str((BASE_DIR / db_path).resolve())

        self.API_BASE_URL = self.API_BASE_URL.rstrip("/")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()


settings = get_settings()
