"""
Unit Tests - Settings
"""
import pytest

from src.config import Settings
from src.config.settings import DEFAULT_JWT_SECRET, AnalyticsSettings, DatabaseSettings


class TestSettings:

    def test_testing_environment(self, test_settings):
        assert test_settings.app_env == "testing"
        assert test_settings.is_production is False
        assert test_settings.is_development is False

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValueError):
            Settings(app_env="qa")

    def test_analytics_defaults(self):
        analytics = AnalyticsSettings()

        assert analytics.store_timeout_seconds == 10.0
        assert analytics.token_audience == "https://oauth2.googleapis.com/token"

    def test_analytics_env_prefix(self, monkeypatch):
        monkeypatch.setenv("ANALYTICS_RANDOM_SEED", "42")
        monkeypatch.setenv("ANALYTICS_STORE_TIMEOUT_SECONDS", "2.5")

        analytics = AnalyticsSettings()

        assert analytics.random_seed == 42
        assert analytics.store_timeout_seconds == 2.5

    def test_database_url_override(self):
        settings = DatabaseSettings(url="sqlite+aiosqlite:///./local.db")

        assert settings.async_url == "sqlite+aiosqlite:///./local.db"

    def test_database_url_from_parts(self):
        settings = DatabaseSettings(host="db", port=5433, db="dash", user="app", password="pw")

        assert settings.async_url == "postgresql+asyncpg://app:pw@db:5433/dash"


class TestJwtSecret:
    """Tests for the bearer token secret guard"""

    @pytest.mark.parametrize("env", ["production", "staging"])
    def test_placeholder_secret_rejected_outside_local(self, monkeypatch, env):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)

        with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
            Settings(app_env=env)

    def test_configured_secret_accepted_in_production(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET_KEY", "a-real-deployment-secret")

        settings = Settings(app_env="production")

        assert settings.security.jwt_secret_key.get_secret_value() == "a-real-deployment-secret"

    @pytest.mark.parametrize("env", ["development", "testing"])
    def test_placeholder_secret_allowed_locally(self, monkeypatch, env):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)

        assert Settings(app_env=env).security.jwt_secret_key.get_secret_value() == DEFAULT_JWT_SECRET
