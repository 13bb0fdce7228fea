"""Relay for the workflow-automation (n8n) webhooks.

Validated booking and cancellation payloads are POSTed as JSON to the
configured webhook. A single attempt is made; failures come back as
``DownstreamError`` subclasses tagged with a ``FailureKind``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from booking_relay.config import Settings
from booking_relay.errors import (
    ConfigurationError,
    DownstreamErrorResponse,
    classify_transport_error,
)

log = logging.getLogger("booking_relay.automation")


@dataclass
class RelayResult:
    """Successful webhook response."""

    data: Any
    status: int
    success: bool = True

    def to_dict(self) -> dict:
        return {"success": self.success, "data": self.data, "status": self.status}


def _response_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return ""
    try:
        return resp.json()
    except ValueError:
        return resp.text


class AutomationRelay:
    """Forwards appointment requests to the booking/cancellation webhooks."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def timeout(self) -> float:
        return self._settings.webhook_timeout

    async def relay_booking(self, data: dict) -> RelayResult:
        return await self._post(
            "booking",
            self._settings.n8n_book_webhook_url,
            "N8N_BOOK_WEBHOOK_URL",
            data,
        )

    async def relay_cancellation(self, data: dict) -> RelayResult:
        return await self._post(
            "cancellation",
            self._settings.n8n_cancel_webhook_url,
            "N8N_CANCEL_WEBHOOK_URL",
            data,
        )

    async def _post(
        self, operation: str, url: str, env_name: str, payload: dict
    ) -> RelayResult:
        if not url:
            error = ConfigurationError(f"{env_name} is not configured")
            log.error("%s request failed: %s", operation, error)
            raise error

        log.info("Sending %s request to %s", operation, url)
        log.debug("Payload: %s", json.dumps(payload, indent=2))

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            error = classify_transport_error(
                exc, url, f"send {operation} to webhook", self.timeout
            )
            log.error(
                "%s request failed [%s] url=%s: %s",
                operation, error.kind.value, url, error,
            )
            raise error from exc

        body = _response_body(resp)

        if not resp.is_success:
            error = DownstreamErrorResponse(
                f"Webhook returned error: {resp.status_code} - {resp.reason_phrase}",
                status=resp.status_code,
                body=body,
                url=url,
            )
            log.error(
                "%s request failed [%s] url=%s status=%s body=%s",
                operation, error.kind.value, url, resp.status_code, body,
            )
            raise error

        log.info("%s request successful (status %s)", operation, resp.status_code)
        log.debug("Response data: %s", body)
        return RelayResult(data=body, status=resp.status_code)
