from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="", env_file=(".env", ".env.local"), extra="ignore"
    )

    app_name: str = Field(default="Career Search")
    environment: Literal["local", "staging", "production", "test"] = Field(
        default="local"
    )
    debug: bool = Field(default=True)
    api_version: str = Field(default="2.0.0")

    serpapi_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("serpapi_key", "serp_api_key"),
    )
    serpapi_url: str = Field(default="https://serpapi.com/search.json")
    serpapi_engine: str = Field(default="google")
    serpapi_timeout: float = Field(default=15.0, gt=0.0)
    serpapi_connect_timeout: float = Field(default=5.0, gt=0.0)
    search_locale_country: str = Field(default="us")
    search_locale_language: str = Field(default="en")
    search_query_suffix: str = Field(default="career guide resources learning")
    search_result_limit: int = Field(default=10, ge=1, le=10)

    openai_api_key: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout: float = Field(default=30.0, gt=0.0)
    openai_max_attempts: int = Field(default=3, ge=1, le=5)
    insights_temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    search_cache_max_entries: int = Field(default=100, ge=1)
    search_cache_ttl_seconds: int = Field(default=3600, ge=1)

    cors_origins: list[str] = Field(default_factory=list)

    @property
    def search_enabled(self) -> bool:
        """Return True when the search provider credential is configured."""

        return bool(self.serpapi_key and self.serpapi_key.strip())

    @property
    def ai_enabled(self) -> bool:
        """Return True when the completion provider credential is configured."""

        return bool(self.openai_api_key and self.openai_api_key.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
