"""Shared fixtures: settings pointed at fake endpoints and a throwaway RSA key."""

import base64
import json

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from booking_relay.config import Settings

BOOK_URL = "http://automation.test/webhook/book"
CANCEL_URL = "http://automation.test/webhook/cancel"
TOKEN_URL = "https://oauth2.test/token"
CALENDAR_BASE = "https://calendar.test/calendar/v3/calendars"
CLIENT_EMAIL = "relay@project.iam.gserviceaccount.com"


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def service_account_info(private_key_pem) -> dict:
    return {
        "type": "service_account",
        "project_id": "relay-test",
        "client_email": CLIENT_EMAIL,
        "private_key": private_key_pem,
        "token_uri": TOKEN_URL,
    }


def make_settings(**overrides) -> Settings:
    values = {
        "n8n_book_webhook_url": BOOK_URL,
        "n8n_cancel_webhook_url": CANCEL_URL,
        "google_token_url": TOKEN_URL,
        "google_calendar_api_base": CALENDAR_BASE,
        "google_calendar_id": "",
        "google_service_account_json": "",
        "google_service_account_key_path": "",
        "environment": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def calendar_settings(service_account_info) -> Settings:
    blob = base64.b64encode(json.dumps(service_account_info).encode()).decode()
    return make_settings(google_service_account_json=blob)
