"""Tests for application configuration."""

import pytest

from storefront_cache.config import Settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_settings(self):
        """Test that default settings are loaded correctly."""
        settings = Settings()

        assert settings.app_name == "Storefront Cache"
        assert settings.cache_backend == "memory"
        assert settings.backing_store == "memory"
        assert settings.valkey_host == "localhost"
        assert settings.valkey_port == 6379
        assert settings.supabase_max_attempts == 3
        assert settings.ttl_overrides == {}

    def test_settings_from_env(self, monkeypatch):
        """Test that settings can be overridden by environment variables."""
        monkeypatch.setenv("STOREFRONT_CACHE_VALKEY_HOST", "cache.example.com")
        monkeypatch.setenv("STOREFRONT_CACHE_VALKEY_PORT", "7000")
        monkeypatch.setenv("STOREFRONT_CACHE_CACHE_BACKEND", "valkey")

        settings = Settings()

        assert settings.valkey_host == "cache.example.com"
        assert settings.valkey_port == 7000
        assert settings.cache_backend == "valkey"

    def test_ttl_overrides_from_env(self, monkeypatch):
        """Dict fields are read from JSON in the environment."""
        monkeypatch.setenv("STOREFRONT_CACHE_TTL_OVERRIDES", '{"product-search": 60}')

        settings = Settings()

        assert settings.ttl_overrides == {"product-search": 60}

    def test_case_insensitive_env_vars(self, monkeypatch):
        """Test that environment variables are case-insensitive."""
        monkeypatch.setenv("storefront_cache_valkey_host", "test.host")
        monkeypatch.setenv("STOREFRONT_CACHE_VALKEY_PORT", "7777")

        settings = Settings()

        assert settings.valkey_host == "test.host"
        assert settings.valkey_port == 7777

    def test_invalid_port(self):
        with pytest.raises(Exception):
            Settings(valkey_port=0)
