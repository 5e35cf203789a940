"""GitHub REST client with response caching and rate-limit bookkeeping."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from partnergrid.config import GitHubSettings
from partnergrid.domain.models import (
    RepoRecord,
    ResultSet,
    SearchFilters,
    SearchUsersResponse,
    UserRecord,
)
from partnergrid.logging import logger
from partnergrid.services.cache import CacheStore, make_cache_key
from partnergrid.services.exceptions import DecodeFailure, RateLimitExceeded, RequestFailed
from partnergrid.services.query_builder import build_query
from partnergrid.services.rate_limit import RateLimitTracker

T = TypeVar("T")

RATE_LIMIT_STATUSES = frozenset({403, 429})
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later or add a GitHub token."

_SEARCH_ADAPTER = TypeAdapter(SearchUsersResponse)
_USER_ADAPTER = TypeAdapter(UserRecord)
_REPOS_ADAPTER = TypeAdapter(list[RepoRecord])
_LANGUAGES_ADAPTER = TypeAdapter(dict[str, int])


class GitHubClient:
    """Executes single logical requests: cache first, network on miss, never retries."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache: CacheStore,
        rate_limits: RateLimitTracker,
        settings: GitHubSettings | None = None,
    ) -> None:
        self._client = http_client
        self._cache = cache
        self._rate_limits = rate_limits
        self._settings = settings or GitHubSettings()
        self._token = self._read_secret(self._settings.token)

    @property
    def rate_limits(self) -> RateLimitTracker:
        return self._rate_limits

    def set_token(self, token: str | None) -> None:
        self._token = token or None

    async def search_users(
        self, filters: SearchFilters, page: int = 1, per_page: int = 30
    ) -> ResultSet:
        params = {
            "q": build_query(filters),
            "sort": filters.sort_by or "followers",
            "order": filters.order or "desc",
            "page": str(page),
            "per_page": str(per_page),
        }
        result = await self._fetch_with_cache("/search/users", params, _SEARCH_ADAPTER)
        return ResultSet(
            items=result.items,
            total_count=result.total_count,
            incomplete=result.incomplete_results,
        )

    async def get_user(self, login: str) -> UserRecord:
        return await self._fetch_with_cache(f"/users/{login}", None, _USER_ADAPTER)

    async def get_user_repos(
        self, login: str, page: int = 1, per_page: int = 100
    ) -> list[RepoRecord]:
        params = {
            "sort": "updated",
            "direction": "desc",
            "page": str(page),
            "per_page": str(per_page),
        }
        return await self._fetch_with_cache(f"/users/{login}/repos", params, _REPOS_ADAPTER)

    async def get_repo_languages(self, owner: str, repo: str) -> dict[str, int]:
        return await self._fetch_with_cache(
            f"/repos/{owner}/{repo}/languages", None, _LANGUAGES_ADAPTER
        )

    async def _fetch_with_cache(
        self,
        path: str,
        params: dict[str, str] | None,
        adapter: TypeAdapter[T],
    ) -> T:
        url = f"{self._base_url()}{path}"
        cache_key = make_cache_key("GET", url, params)

        cached = self._cache.get(cache_key)
        if cached is not None:
            try:
                return adapter.validate_python(cached)
            except ValidationError:
                logger.warning("cache_payload_invalid", path=path)
                self._cache.invalidate(cache_key)

        try:
            response = await self._client.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self._settings.request_timeout_seconds,
            )
        except httpx.RequestError as exc:
            raise RequestFailed(None, str(exc)) from exc

        self._rate_limits.update_from_headers(response.headers)
        logger.info("github_request", path=path, status=response.status_code)

        if response.status_code in RATE_LIMIT_STATUSES:
            state = self._rate_limits.read()
            raise RateLimitExceeded(RATE_LIMIT_MESSAGE, reset_at=state.reset_at if state else None)
        if not 200 <= response.status_code < 300:
            raise RequestFailed(response.status_code, response.reason_phrase)

        try:
            data: Any = response.json()
        except ValueError as exc:
            raise DecodeFailure(f"GitHub returned a non-JSON body for {path}.") from exc
        try:
            result = adapter.validate_python(data)
        except ValidationError as exc:
            raise DecodeFailure(f"Unexpected response shape for {path}: {exc.error_count()} errors.") from exc

        self._cache.set(cache_key, data)
        return result

    def _base_url(self) -> str:
        return str(self._settings.api_base_url).rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    @staticmethod
    def _read_secret(secret: Any) -> str | None:
        if not secret:
            return None
        try:
            return secret.get_secret_value()
        except AttributeError:
            return str(secret)


__all__ = ["GitHubClient", "RATE_LIMIT_MESSAGE"]
