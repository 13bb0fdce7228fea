"""Service-account credential exchange.

Builds an RS256-signed assertion from a Google service account key and
trades it at the token endpoint for a one-hour bearer token. Nothing is
cached: every calendar operation goes through the whole sequence again.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx
from google.auth import crypt, jwt

from booking_relay.config import Settings
from booking_relay.errors import (
    ConfigurationError,
    TokenExchangeError,
    classify_transport_error,
)

logger = logging.getLogger(__name__)

CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = 3600  # seconds


@dataclass(frozen=True)
class ServiceCredential:
    """The parts of a service account key needed to sign assertions."""

    client_email: str
    private_key: str
    token_uri: str = ""

    @classmethod
    def from_info(cls, info: dict) -> "ServiceCredential":
        if not isinstance(info, dict):
            raise ConfigurationError("Service account credential must be a JSON object")
        client_email = info.get("client_email")
        private_key = info.get("private_key")
        if not client_email or not private_key:
            raise ConfigurationError(
                "Service account credential is missing client_email or private_key"
            )
        return cls(
            client_email=client_email,
            # Keys pasted into env files often carry escaped newlines.
            private_key=private_key.replace("\\n", "\n"),
            token_uri=info.get("token_uri", ""),
        )


def _decode_inline(blob: str) -> dict:
    """Parse an inline credential: base64-encoded JSON first, raw JSON second."""
    try:
        decoded = base64.b64decode(blob, validate=True).decode("utf-8")
        return json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        pass
    try:
        return json.loads(blob)
    except ValueError:
        raise ConfigurationError(
            "Failed to parse GOOGLE_SERVICE_ACCOUNT_JSON"
        ) from None


class CredentialExchange:
    """Turns configured service-account material into access tokens."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._clock = clock

    @property
    def token_url(self) -> str:
        return self._settings.google_token_url

    def load_credential(self) -> ServiceCredential:
        """Load the service credential from the environment blob or key file."""
        blob = self._settings.google_service_account_json.strip()
        if blob:
            return ServiceCredential.from_info(_decode_inline(blob))

        key_path = self._settings.google_service_account_key_path
        if not key_path:
            raise ConfigurationError(
                "No service account configured. Set GOOGLE_SERVICE_ACCOUNT_JSON "
                "or GOOGLE_SERVICE_ACCOUNT_KEY_PATH."
            )
        try:
            info = json.loads(Path(key_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigurationError(
                f"Failed to load service account from {key_path}: {exc}"
            ) from exc
        return ServiceCredential.from_info(info)

    def build_assertion(
        self, credential: ServiceCredential, now: int | None = None
    ) -> str:
        """Return a compact JWT assertion signed with RS256."""
        issued_at = int(self._clock()) if now is None else now
        payload = {
            "iss": credential.client_email,
            "sub": credential.client_email,
            "aud": self.token_url,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME,
            "scope": CALENDAR_SCOPE,
        }

        try:
            signer = crypt.RSASigner.from_string(credential.private_key)
        except (ValueError, TypeError, IndexError) as exc:
            raise ConfigurationError(
                f"Service account private key is not a usable RSA key: {exc}"
            ) from exc

        return jwt.encode(signer, payload).decode("ascii")

    async def exchange(self, assertion: str) -> str:
        """POST the assertion to the token endpoint and return the access token."""
        url = self.token_url
        timeout = self._settings.google_request_timeout
        try:
            async with httpx.AsyncClient(
                timeout=timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    url,
                    data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
                )
        except httpx.HTTPError as exc:
            error = classify_transport_error(exc, url, "exchange token", timeout)
            logger.error("Token exchange failed (%s): %s", error.kind.value, error)
            raise error from exc

        if not resp.is_success:
            logger.error("Token request failed: %s %s", resp.status_code, resp.text)
            raise TokenExchangeError(
                f"Token request failed: {resp.status_code} {resp.text}",
                status=resp.status_code,
                body=resp.text,
                url=url,
            )

        try:
            data = resp.json()
        except ValueError:
            data = None
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise TokenExchangeError(
                "Token response did not include an access_token",
                status=resp.status_code,
                body=resp.text,
                url=url,
            )
        return token

    async def fetch_access_token(self) -> str:
        """Run the full load → sign → exchange sequence."""
        credential = self.load_credential()
        assertion = self.build_assertion(credential)
        token = await self.exchange(assertion)
        logger.debug("Obtained access token for %s", credential.client_email)
        return token
