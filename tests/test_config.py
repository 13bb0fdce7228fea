"""Tests for Settings: env loading, startup validation, derived flags."""

import pytest

from booking_relay.config import Settings
from booking_relay.errors import ConfigurationError

from conftest import make_settings


class TestStartupValidation:
    def test_missing_webhook_urls(self):
        settings = make_settings(n8n_book_webhook_url="", n8n_cancel_webhook_url="")
        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_startup()
        message = str(exc_info.value)
        assert "N8N_BOOK_WEBHOOK_URL is required" in message
        assert "N8N_CANCEL_WEBHOOK_URL is required" in message

    def test_missing_cancel_url_only(self):
        settings = make_settings(n8n_cancel_webhook_url="")
        with pytest.raises(ConfigurationError, match="N8N_CANCEL_WEBHOOK_URL"):
            settings.validate_startup()

    def test_warns_without_calendar_credential(self):
        warnings = make_settings().validate_startup()
        assert any("GOOGLE_SERVICE_ACCOUNT_JSON" in w for w in warnings)
        assert any("primary" in w for w in warnings)

    def test_no_warnings_when_fully_configured(self):
        settings = make_settings(
            google_service_account_key_path="/etc/relay/sa.json",
            google_calendar_id="clinic@group.calendar.google.com",
        )
        assert settings.validate_startup() == []


class TestDerivedValues:
    @pytest.mark.parametrize(
        "environment, exposed",
        [("development", True), ("test", True), ("production", False), (" Production ", False)],
    )
    def test_error_detail_gating(self, environment, exposed):
        assert make_settings(environment=environment).expose_error_details is exposed

    def test_resolve_calendar_id(self):
        assert make_settings().resolve_calendar_id() == "primary"
        assert make_settings(google_calendar_id="clinic").resolve_calendar_id() == "clinic"
        assert (
            make_settings(google_calendar_id="clinic").resolve_calendar_id("other")
            == "other"
        )


class TestEnvironmentLoading:
    def test_reads_environment_variables(self, monkeypatch):
        monkeypatch.setenv("PORT", "8081")
        monkeypatch.setenv("N8N_BOOK_WEBHOOK_URL", "http://n8n:5678/webhook/book")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.port == 8081
        assert settings.n8n_book_webhook_url == "http://n8n:5678/webhook/book"
        assert settings.is_production is True

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "ENVIRONMENT", "WEBHOOK_TIMEOUT", "GOOGLE_TOKEN_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 3000
        assert settings.environment == "development"
        assert settings.webhook_timeout == 10.0
        assert settings.google_token_url == "https://oauth2.googleapis.com/token"
