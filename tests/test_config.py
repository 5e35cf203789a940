"""Tests for environment-driven settings."""

from __future__ import annotations

from partnergrid.config import FinderSettings, get_settings


def test_defaults_match_provider_budget_constants(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    settings = FinderSettings()

    assert settings.cache.ttl_seconds == 300
    assert settings.orchestrator.debounce_seconds == 0.5
    assert settings.orchestrator.page_size == 50
    assert settings.orchestrator.bootstrap_query == "javascript"
    assert settings.orchestrator.max_indexable_results == 1000
    assert str(settings.github.api_base_url).startswith("https://api.github.com")
    assert settings.github.token is None


def test_nested_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FINDER_GITHUB__TOKEN", "ghp_env")
    monkeypatch.setenv("FINDER_ORCHESTRATOR__PAGE_SIZE", "30")
    monkeypatch.setenv("FINDER_STORAGE__DSN", "sqlite:///:memory:")

    settings = FinderSettings()

    assert settings.github.token.get_secret_value() == "ghp_env"
    assert settings.orchestrator.page_size == 30
    assert settings.storage.dsn == "sqlite:///:memory:"


def test_blank_token_is_anonymous(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FINDER_GITHUB__TOKEN", "  ")
    assert FinderSettings().github.token is None


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
