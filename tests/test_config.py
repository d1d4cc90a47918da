import logging

import pytest

from admin_backend.core.config import DEFAULT_CORS_ORIGINS, Settings, resolve_port
from tests.conftest import make_settings


class TestResolvePort:
    @pytest.mark.parametrize("raw, expected", [("3002", 3002), ("8080", 8080), (" 9000 ", 9000)])
    def test_numeric_values_are_used(self, raw, expected):
        assert resolve_port(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_value_falls_back(self, raw):
        assert resolve_port(raw) == 3002

    @pytest.mark.parametrize("raw", ["$PORT", "${PORT}", "80$80"])
    def test_placeholder_falls_back(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger="admin_backend.core.config"):
            assert resolve_port(raw) == 3002
        assert "contains $" in caplog.text

    def test_non_numeric_falls_back_with_error(self, caplog):
        with caplog.at_level(logging.ERROR, logger="admin_backend.core.config"):
            assert resolve_port("abc") == 3002
        assert any(r.levelno == logging.ERROR and "abc" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("raw", ["0", "-1", "65536", "99999"])
    def test_out_of_range_falls_back_with_error(self, raw, caplog):
        with caplog.at_level(logging.ERROR, logger="admin_backend.core.config"):
            assert resolve_port(raw) == 3002
        assert any(r.levelno == logging.ERROR and raw in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("raw", ["1", "65535"])
    def test_range_bounds_are_accepted(self, raw):
        assert resolve_port(raw) == int(raw)


class TestSettings:
    def test_persistence_enabled_with_database_url(self):
        assert make_settings().persistence_enabled is True

    def test_persistence_disabled_without_database_url(self):
        settings = make_settings(DATABASE_URL=None)
        assert settings.persistence_enabled is False
        assert settings.DATABASE_URL == ""

    def test_environment_defaults_to_production(self):
        settings = make_settings()
        assert settings.ENVIRONMENT == "production"
        assert settings.is_development is False

    def test_node_env_is_honoured(self):
        assert make_settings(NODE_ENV="development").is_development is True

    def test_app_env_takes_precedence(self):
        assert make_settings(APP_ENV="production", NODE_ENV="development").is_development is False

    def test_port_from_env(self):
        assert make_settings(PORT="$PORT").PORT == 3002
        assert make_settings(PORT="8080").PORT == 8080

    def test_default_cors_origins(self):
        assert make_settings().CORS_ORIGINS == DEFAULT_CORS_ORIGINS

    def test_cors_origins_from_env(self):
        settings = make_settings(CORS_ORIGINS="https://a.example, https://b.example,")
        assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]

    def test_webhook_url_requires_base_url(self):
        assert make_settings().webhook_url is None

    def test_webhook_url_joins_base_and_path(self):
        settings = make_settings(WEBHOOK_BASE_URL="https://admin.example.com/")
        assert settings.webhook_url == "https://admin.example.com/webhook/telegram"

    def test_missing_jwt_secret_is_generated(self):
        settings = make_settings(JWT_SECRET=None)
        assert len(settings.JWT_SECRET) > 20

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("SERVICE_NAME", "from-env")
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings()
        assert settings.SERVICE_NAME == "from-env"
        assert settings.persistence_enabled is False
