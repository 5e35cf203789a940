"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitHubSettings(BaseModel):
    api_base_url: AnyHttpUrl = Field(default="https://api.github.com")
    token: SecretStr | None = Field(
        default=None,
        description="Personal access token; anonymous calls get a lower hourly budget.",
    )
    request_timeout_seconds: int = Field(default=15, ge=1, le=120)

    @field_validator("token", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class StorageSettings(BaseModel):
    dsn: str = Field(
        default="sqlite:///partnergrid.db",
        description="SQLAlchemy DSN of the key/value medium backing cache and rate state.",
    )
    echo: bool = False


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=300, ge=1)


class OrchestratorSettings(BaseModel):
    debounce_seconds: float = Field(default=0.5, ge=0)
    page_size: int = Field(default=50, ge=1, le=100)
    bootstrap_query: str = Field(default="javascript", min_length=1)
    fallback_query: str = Field(default="followers:>10", min_length=1)
    max_indexable_results: int = Field(default=1000, ge=1)
    low_rate_limit_threshold: int = Field(default=10, ge=0)


class FinderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__"
    )

    environment: str = "dev"
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)


@lru_cache
def get_settings() -> FinderSettings:
    """Return cached settings instance."""

    return FinderSettings()


__all__ = [
    "CacheSettings",
    "FinderSettings",
    "GitHubSettings",
    "OrchestratorSettings",
    "StorageSettings",
    "get_settings",
]
