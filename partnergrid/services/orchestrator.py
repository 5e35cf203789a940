"""Decides, per intent change, between a remote search and a local re-filter.

All work runs on one event loop. The only suspension points are the debounce
sleep and the network exchange inside ``GitHubClient``; cache lookups and
local filtering complete synchronously. In-flight searches are never
cancelled. Instead every intent change and every decision bumps a generation
counter, and a response is applied only while its generation is current.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Protocol

from partnergrid.config import OrchestratorSettings
from partnergrid.domain.models import RateLimitState, ResultSet, SearchFilters
from partnergrid.logging import logger
from partnergrid.services.exceptions import ServiceError
from partnergrid.services.filters import apply_client_filters, apply_client_only_filters
from partnergrid.services.rate_limit import RateLimitTracker


class SearchState(str, Enum):
    IDLE = "idle"
    AWAITING_DEBOUNCE = "awaiting_debounce"
    REMOTE_SEARCHING = "remote_searching"
    LOCALLY_FILTERING = "locally_filtering"
    ERROR = "error"


class UserSearcher(Protocol):
    async def search_users(
        self, filters: SearchFilters, page: int = 1, per_page: int = 30
    ) -> ResultSet: ...


@dataclass(slots=True, frozen=True)
class OrchestratorSnapshot:
    state: SearchState
    filters: SearchFilters
    results: ResultSet
    page: int
    has_more: bool
    error: str | None
    rate_limit: RateLimitState | None
    rate_limit_low: bool
    last_query: str | None


Listener = Callable[[OrchestratorSnapshot], None]


class SearchOrchestrator:
    def __init__(
        self,
        client: UserSearcher,
        rate_limits: RateLimitTracker,
        settings: OrchestratorSettings | None = None,
    ) -> None:
        self._client = client
        self._rate_limits = rate_limits
        self._settings = settings or OrchestratorSettings()

        self._state = SearchState.IDLE
        self._filters = SearchFilters()
        self._fetched = ResultSet()
        self._results = ResultSet()
        self._page = 1
        self._has_more = False
        self._error: str | None = None
        self._last_request: SearchFilters | None = None
        self._last_local_filters: SearchFilters | None = None

        self._generation = 0
        self._debounce_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def filters(self) -> SearchFilters:
        return self._filters

    @property
    def results(self) -> ResultSet:
        return self._results

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> OrchestratorSnapshot:
        rate_limit = self._rate_limits.read()
        return OrchestratorSnapshot(
            state=self._state,
            filters=self._filters,
            results=self._results,
            page=self._page,
            has_more=self._has_more,
            error=self._error,
            rate_limit=rate_limit,
            rate_limit_low=(
                rate_limit is not None
                and rate_limit.remaining < self._settings.low_rate_limit_threshold
            ),
            last_query=self._last_request.query if self._last_request else None,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # Intents

    def change_filters(self, filters: SearchFilters) -> None:
        """Record new filters and (re)start the debounce window."""

        loop = asyncio.get_running_loop()
        self._cancel_debounce()
        self._filters = filters
        self._generation += 1
        self._debounce_task = self._spawn(loop, self._debounce(self._generation))
        self._set_state(SearchState.AWAITING_DEBOUNCE)

    async def submit_search(self, text: str) -> bool:
        """Explicit free-text search; skips the debounce and the remote/local choice."""

        query = (text or "").strip()
        if not query:
            raise ValueError("Search query required.")
        self._cancel_debounce()
        request = SearchFilters(
            query=query,
            sort_by=self._filters.sort_by,
            order=self._filters.order,
        )
        return await self._remote_search(request, page=1, append=False)

    async def go_home(self) -> bool:
        """Reset filters and re-issue the bootstrap load."""

        self._cancel_debounce()
        self._filters = SearchFilters()
        request = SearchFilters(query=self._settings.bootstrap_query)
        return await self._remote_search(request, page=1, append=False)

    async def load_more(self) -> bool:
        if self._state in (
            SearchState.ERROR,
            SearchState.AWAITING_DEBOUNCE,
            SearchState.REMOTE_SEARCHING,
        ):
            logger.info("load_more_rejected", state=self._state.value)
            return False
        if not self._has_more or self._last_request is None:
            return False
        return await self._remote_search(
            self._last_request,
            page=self._page + 1,
            append=True,
            local_filters=self._last_local_filters,
        )

    async def drain(self) -> None:
        """Wait for pending debounce timers and in-flight decisions."""

        pending = [task for task in self._tasks if not task.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [task for task in self._tasks if not task.done()]

    async def aclose(self) -> None:
        self._cancel_debounce()
        await self.drain()

    # Decisions

    async def _debounce(self, generation: int) -> None:
        await asyncio.sleep(self._settings.debounce_seconds)
        # Past this point the decision is committed and must not be cancelled.
        self._debounce_task = None
        if generation != self._generation:
            return
        await self._decide()

    async def _decide(self) -> None:
        filters = self._filters
        if filters.has_active_filters():
            query = filters.language.lower() if filters.language else self._settings.fallback_query
            request = SearchFilters(
                query=query,
                language=filters.language,
                location=filters.location,
                min_repos=filters.min_repos,
                min_followers=filters.min_followers,
                sort_by=filters.sort_by,
                order=filters.order,
            )
            logger.info("orchestration_decision", mode="remote", query=query)
            await self._remote_search(
                request,
                page=1,
                append=False,
                local_filters=SearchFilters(experience_level=filters.experience_level),
            )
        else:
            logger.info("orchestration_decision", mode="local")
            self._filter_locally()

    def _filter_locally(self) -> None:
        self._generation += 1
        self._set_state(SearchState.LOCALLY_FILTERING)
        self._results = apply_client_filters(self._fetched, self._filters)
        self._error = None
        self._set_state(SearchState.IDLE)

    async def _remote_search(
        self,
        request: SearchFilters,
        *,
        page: int,
        append: bool,
        local_filters: SearchFilters | None = None,
    ) -> bool:
        """Fetch one page; ``local_filters`` narrows what becomes visible, ``None`` shows all."""

        self._generation += 1
        generation = self._generation
        per_page = self._settings.page_size
        self._set_state(SearchState.REMOTE_SEARCHING)

        try:
            result = await self._client.search_users(request, page, per_page)
        except ServiceError as exc:
            if generation != self._generation:
                logger.info("stale_response_discarded", generation=generation, error=str(exc))
                return False
            logger.warning("search_failed", query=request.query, page=page, error=str(exc))
            self._error = str(exc)
            self._set_state(SearchState.ERROR)
            return False

        if generation != self._generation:
            logger.info(
                "stale_response_discarded",
                generation=generation,
                current=self._generation,
                query=request.query,
            )
            return False

        if local_filters is None:
            new_visible = list(result.items)
        else:
            new_visible = apply_client_only_filters(result.items, local_filters)
        if append:
            fetched_items = [*self._fetched.items, *result.items]
            visible_items = [*self._results.items, *new_visible]
        else:
            fetched_items = list(result.items)
            visible_items = new_visible

        self._fetched = ResultSet(
            items=fetched_items,
            total_count=result.total_count,
            incomplete=result.incomplete,
        )
        self._results = ResultSet(
            items=visible_items,
            total_count=result.total_count,
            incomplete=result.incomplete,
        )
        self._page = page
        self._has_more = self._more_available(len(result.items), page, per_page, result.total_count)
        self._last_request = request
        self._last_local_filters = local_filters
        self._error = None
        self._set_state(SearchState.IDLE)
        return True

    def _more_available(self, received: int, page: int, per_page: int, total_count: int) -> bool:
        reachable = min(total_count, self._settings.max_indexable_results)
        return received == per_page and page * per_page < reachable

    # Plumbing

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    def _spawn(self, loop: asyncio.AbstractEventLoop, coro: Awaitable[None]) -> asyncio.Task:
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("orchestrator_task_failed", error=repr(exc))

    def _set_state(self, state: SearchState) -> None:
        previous = self._state
        self._state = state
        if previous is not state:
            logger.debug("orchestrator_state_changed", previous=previous.value, state=state.value)
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("orchestrator_listener_failed")


__all__ = [
    "OrchestratorSnapshot",
    "SearchOrchestrator",
    "SearchState",
    "UserSearcher",
]
