"""Pydantic models shared across the client, filter and orchestration layers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SortField = Literal["followers", "repositories", "joined"]
SortOrder = Literal["asc", "desc"]
ExperienceLevel = Literal["junior", "mid", "senior"]


class SearchFilters(BaseModel):
    """User intent for one decision cycle; replaced, never edited."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    language: str | None = None
    location: str | None = None
    min_repos: int | None = Field(default=None, ge=0)
    min_followers: int | None = Field(default=None, ge=0)
    sort_by: SortField = "followers"
    order: SortOrder = "desc"
    experience_level: ExperienceLevel | None = None

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, value):
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    @field_validator("language", "location", "experience_level", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("min_repos", "min_followers", mode="before")
    @classmethod
    def _zero_to_none(cls, value):
        if value in (0, "", "0"):
            return None
        return value

    def has_active_filters(self) -> bool:
        return any(
            (
                self.language,
                self.location,
                self.min_repos,
                self.min_followers,
                self.experience_level,
            )
        )


class UserRecord(BaseModel):
    """Provider profile payload; extra provider fields are carried through untouched."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    login: str
    avatar_url: str | None = None
    html_url: str | None = None
    name: str | None = None
    company: str | None = None
    blog: str | None = None
    location: str | None = None
    email: str | None = None
    bio: str | None = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RepoRecord(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    name: str
    full_name: str
    description: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: datetime | None = None
    size: int = 0


class ResultSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: list[UserRecord] = Field(default_factory=list)
    total_count: int = 0
    incomplete: bool = False


class SearchUsersResponse(BaseModel):
    """Wire shape of ``GET /search/users``."""

    items: list[UserRecord]
    total_count: int
    incomplete_results: bool = False


class RateLimitState(BaseModel):
    remaining: int
    reset_at: int
    total: int


class CacheEntry(BaseModel):
    key: str
    payload: Any
    stored_at: int


__all__ = [
    "CacheEntry",
    "ExperienceLevel",
    "RateLimitState",
    "RepoRecord",
    "ResultSet",
    "SearchFilters",
    "SearchUsersResponse",
    "SortField",
    "SortOrder",
    "UserRecord",
]
