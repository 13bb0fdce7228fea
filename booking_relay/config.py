"""Application configuration via environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

from booking_relay.errors import ConfigurationError

log = logging.getLogger("booking_relay.config")

DEFAULT_CALENDAR_ID = "primary"


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"

    # Workflow-automation webhooks
    n8n_book_webhook_url: str = ""
    n8n_cancel_webhook_url: str = ""
    webhook_timeout: float = 10.0

    # Google Calendar
    google_service_account_json: str = ""
    google_service_account_key_path: str = ""
    google_calendar_id: str = ""
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_calendar_api_base: str = "https://www.googleapis.com/calendar/v3/calendars"
    google_request_timeout: float = 10.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def expose_error_details(self) -> bool:
        """Raw error messages go back to clients only outside production."""
        return not self.is_production

    def resolve_calendar_id(self, calendar_id: str | None = None) -> str:
        return calendar_id or self.google_calendar_id or DEFAULT_CALENDAR_ID

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        errors: list[str] = []
        warnings: list[str] = []

        if not self.n8n_book_webhook_url:
            errors.append("N8N_BOOK_WEBHOOK_URL is required")
        if not self.n8n_cancel_webhook_url:
            errors.append("N8N_CANCEL_WEBHOOK_URL is required")

        if errors:
            raise ConfigurationError(
                "Configuration errors:\n" + "\n".join(errors)
            )

        # Credentials are checked per call; only warn here.
        if not (self.google_service_account_json or self.google_service_account_key_path):
            warnings.append(
                "Neither GOOGLE_SERVICE_ACCOUNT_JSON nor GOOGLE_SERVICE_ACCOUNT_KEY_PATH "
                "is set. Calendar endpoints will fail until a credential is configured."
            )

        if not self.google_calendar_id:
            warnings.append(
                f"GOOGLE_CALENDAR_ID not set. Using the '{DEFAULT_CALENDAR_ID}' calendar."
            )

        return warnings
