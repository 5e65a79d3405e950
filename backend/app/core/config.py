"""Application configuration powered by Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Strongly typed application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: Literal["dev", "staging", "prod"] = Field(default="dev")
    project_name: str = Field(default="TSK Directory API")
    version: str = Field(default="0.1.0")
    cors_allowed_origins: list[str] = Field(default_factory=list)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    database_url: str = Field(default="sqlite+aiosqlite:///./data/tsk.db")
    page_size: int = Field(default=20, ge=1, le=100)
    top_liked_limit: int = Field(default=5, ge=1, le=50)

    openai_api_key: str | None = Field(default=None, min_length=1)
    openai_api_base: str | None = None

    # Backup credentials tried after the primary key, in order.
    classifier_api_keys: list[str] = Field(default_factory=list)
    classifier_models: list[str] = Field(
        default_factory=lambda: ["gpt-4o-mini", "gpt-4.1-nano", "gpt-5-mini"],
        min_length=1,
    )
    classifier_min_confidence: int = Field(default=60, ge=0, le=100)
    classifier_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    classifier_output_format: Literal["codes", "json"] = Field(default="codes")
    classifier_timeout_seconds: float = Field(default=60.0, gt=0)

    search_handoff_url: str = Field(default="https://www.google.com/search")

    def credential_pool(self) -> list[str]:
        """Return API keys in priority order, primary first, without duplicates."""

        pool: list[str] = []
        for key in [self.openai_api_key, *self.classifier_api_keys]:
            cleaned = (key or "").strip()
            if cleaned and cleaned not in pool:
                pool.append(cleaned)
        return pool


@lru_cache
def get_settings() -> AppSettings:
    """Provide a cached singleton settings instance."""

    return AppSettings()
