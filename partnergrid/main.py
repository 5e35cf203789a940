"""Application entrypoint."""

from __future__ import annotations

import asyncio
import sys
from typing import Sequence

import httpx

from partnergrid.config import get_settings
from partnergrid.db.session import Database
from partnergrid.db.store import SqlKeyValueStore
from partnergrid.logging import configure_logging, logger
from partnergrid.services.cache import CacheStore
from partnergrid.services.github import GitHubClient
from partnergrid.services.insights import ProfileInsight, describe_profile
from partnergrid.services.orchestrator import OrchestratorSnapshot, SearchOrchestrator
from partnergrid.services.rate_limit import RateLimitTracker


def log_snapshot(snapshot: OrchestratorSnapshot) -> None:
    logger.info(
        "search_snapshot",
        state=snapshot.state.value,
        query=snapshot.last_query,
        shown=len(snapshot.results.items),
        total=snapshot.results.total_count,
        page=snapshot.page,
        has_more=snapshot.has_more,
        error=snapshot.error,
        rate_remaining=snapshot.rate_limit.remaining if snapshot.rate_limit else None,
        rate_limit_low=snapshot.rate_limit_low,
    )


def log_profile(insight: ProfileInsight) -> None:
    logger.info(
        "developer_profile",
        login=insight.login,
        primary_language=insight.primary_language,
        top_repo=insight.top_repo,
        languages={share.language: share.percentage for share in insight.languages},
        suggested_skills=insight.suggested_skills,
    )


async def main(argv: Sequence[str] | None = None) -> OrchestratorSnapshot | ProfileInsight:
    """Search for developers, or with a single ``@login`` argument describe one."""

    configure_logging()
    settings = get_settings()
    args = list(sys.argv[1:] if argv is None else argv)

    database = Database(settings=settings)
    store = SqlKeyValueStore(database)
    cache = CacheStore(store, ttl_ms=settings.cache.ttl_seconds * 1000)
    rate_limits = RateLimitTracker(store)

    try:
        async with httpx.AsyncClient() as http_client:
            client = GitHubClient(http_client, cache, rate_limits, settings=settings.github)

            logger.info("finder_starting", environment=settings.environment)
            if len(args) == 1 and args[0].startswith("@") and len(args[0]) > 1:
                insight = await describe_profile(client, args[0][1:])
                log_profile(insight)
                return insight

            orchestrator = SearchOrchestrator(client, rate_limits, settings=settings.orchestrator)
            query = " ".join(args).strip()
            if query:
                await orchestrator.submit_search(query)
            else:
                await orchestrator.go_home()
            await orchestrator.aclose()

            snapshot = orchestrator.snapshot()
            log_snapshot(snapshot)
            for user in snapshot.results.items:
                logger.info("developer", login=user.login, followers=user.followers)
            return snapshot
    finally:
        database.dispose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
