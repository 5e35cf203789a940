"""Tests for logging configuration and the async entrypoint."""

from __future__ import annotations

import httpx
import pytest
import structlog

from partnergrid import main as main_module
from partnergrid.config import FinderSettings, OrchestratorSettings, StorageSettings
from partnergrid.logging import configure_logging
from partnergrid.services.orchestrator import SearchState


def test_configure_logging_outputs_json(capsys):
    configure_logging()
    logger = structlog.get_logger()
    logger.info("unit-test", foo="bar")
    out = capsys.readouterr().out
    assert "unit-test" in out
    assert "foo" in out


def _patch_runtime(monkeypatch, handler):
    settings = FinderSettings(
        storage=StorageSettings(dsn="sqlite:///:memory:"),
        orchestrator=OrchestratorSettings(page_size=2),
    )
    real_client = httpx.AsyncClient

    monkeypatch.setattr(main_module, "configure_logging", lambda: None)
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)
    monkeypatch.setattr(
        main_module.httpx,
        "AsyncClient",
        lambda: real_client(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_main_without_arguments_loads_home(monkeypatch, user_factory):
    queries: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        queries.append(request.url.params["q"])
        return httpx.Response(
            200,
            json={
                "items": [user_factory(1, "yyx990803"), user_factory(2, "gaearon")],
                "total_count": 2,
                "incomplete_results": False,
            },
            headers={
                "X-RateLimit-Remaining": "4999",
                "X-RateLimit-Reset": "1700000000",
                "X-RateLimit-Limit": "5000",
            },
        )

    _patch_runtime(monkeypatch, handler)
    snapshot = await main_module.main([])

    assert queries == ["javascript type:user"]
    assert snapshot.state is SearchState.IDLE
    assert [user.login for user in snapshot.results.items] == ["yyx990803", "gaearon"]
    assert snapshot.rate_limit.remaining == 4999


@pytest.mark.asyncio
async def test_main_with_arguments_submits_search(monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["q"] == "rust embedded type:user"
        return httpx.Response(403, json={"message": "API rate limit exceeded"})

    _patch_runtime(monkeypatch, handler)
    snapshot = await main_module.main(["rust", "embedded"])

    assert snapshot.state is SearchState.ERROR
    assert "Rate limit exceeded" in snapshot.error
    assert snapshot.results.items == []


@pytest.mark.asyncio
async def test_main_with_login_describes_profile(monkeypatch):
    paths: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path == "/users/gvanrossum/repos":
            return httpx.Response(
                200,
                json=[
                    {
                        "id": 1,
                        "name": "patma",
                        "full_name": "gvanrossum/patma",
                        "language": "Python",
                        "stargazers_count": 1000,
                    }
                ],
            )
        return httpx.Response(200, json={"Python": 3, "C": 1})

    _patch_runtime(monkeypatch, handler)
    insight = await main_module.main(["@gvanrossum"])

    assert "/search/users" not in paths
    assert insight.login == "gvanrossum"
    assert insight.top_repo == "patma"
    assert [share.percentage for share in insight.languages] == [75, 25]
    assert insight.suggested_skills == ["JavaScript", "TypeScript", "Go", "Rust"]
