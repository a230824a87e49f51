"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from databasin.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("DATABASIN_TOKEN", "DATABASIN_TIMEOUT", "DATABASIN_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.timeout_seconds == 30.0
        assert settings.bulk_concurrency == 5
        assert settings.config_cache_ttl_seconds == 300
        assert settings.token is None
        assert settings.effective_log_level == "WARNING"

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASIN_API_URL", "https://api.example.com")
        monkeypatch.setenv("DATABASIN_TOKEN", "secret")
        monkeypatch.setenv("DATABASIN_TIMEOUT", "5")
        monkeypatch.setenv("DATABASIN_CONFIG_CACHE_TTL", "60")
        settings = Settings(_env_file=None)
        assert settings.api_url == "https://api.example.com"
        assert settings.token == "secret"
        assert settings.timeout_seconds == 5.0
        assert settings.config_cache_ttl_seconds == 60

    def test_debug_forces_debug_level(self) -> None:
        settings = Settings(_env_file=None, log_level="error", debug=True)
        assert settings.effective_log_level == "DEBUG"

    def test_log_level_uppercased(self) -> None:
        assert Settings(_env_file=None, log_level="info").effective_log_level == "INFO"
