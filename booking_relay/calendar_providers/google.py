"""Google Calendar provider implementation.

Talks to the Calendar API v3 REST endpoints directly over httpx. Each
operation obtains a fresh bearer token through ``CredentialExchange``
before making its request.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from booking_relay.config import Settings
from booking_relay.errors import (
    CalendarAPIError,
    ValidationError,
    classify_transport_error,
)

from .base import CalendarProvider, CreatedEvent
from .credentials import CredentialExchange

logger = logging.getLogger(__name__)

SEARCH_MAX_RESULTS = 50
REQUIRED_EVENT_FIELDS = ("summary", "start", "end")


def _parse_error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {"message": resp.text}


def _parse_success_body(resp: httpx.Response, url: str, operation: str) -> dict:
    """Decode a 2xx body that must be a JSON object."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        raise CalendarAPIError(
            f"Calendar API returned an unreadable body for {operation}: "
            f"{resp.status_code} {resp.text[:200]}",
            status=resp.status_code,
            body=resp.text,
            url=url,
        )
    return data


class GoogleCalendarProvider(CalendarProvider):
    """CalendarProvider backed by Google Calendar API v3."""

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialExchange | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._credentials = credentials or CredentialExchange(
            settings, transport=transport
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _events_url(self, calendar_id: str | None, event_id: str | None = None) -> str:
        cal_id = self._settings.resolve_calendar_id(calendar_id)
        url = f"{self._settings.google_calendar_api_base}/{quote(cal_id, safe='')}/events"
        if event_id is not None:
            url += f"/{quote(event_id, safe='')}"
        return url

    async def _request(
        self, method: str, url: str, operation: str, **kwargs: Any
    ) -> httpx.Response:
        """Send an authorized request, translating transport failures."""
        token = await self._credentials.fetch_access_token()
        timeout = self._settings.google_request_timeout
        try:
            async with httpx.AsyncClient(
                timeout=timeout, transport=self._transport
            ) as client:
                return await client.request(
                    method,
                    url,
                    headers={"Authorization": f"Bearer {token}"},
                    **kwargs,
                )
        except httpx.HTTPError as exc:
            error = classify_transport_error(exc, url, operation, timeout)
            logger.error("Calendar %s failed (%s): %s", operation, error.kind.value, error)
            raise error from exc

    # ------------------------------------------------------------------
    # CalendarProvider interface
    # ------------------------------------------------------------------

    async def create_event(
        self, event_data: dict, calendar_id: str | None = None
    ) -> CreatedEvent:
        """Insert an event into the calendar.

        Service accounts cannot invite attendees without domain-wide
        delegation, so any ``attendees`` field is dropped before the
        request is sent.
        """
        missing = [name for name in REQUIRED_EVENT_FIELDS if not event_data.get(name)]
        if missing:
            raise ValidationError(
                [f"Missing required field: eventData.{name}" for name in missing]
            )

        body = {k: v for k, v in event_data.items() if k != "attendees"}
        if "attendees" in event_data:
            logger.warning(
                "Removed attendees field from event data "
                "(service accounts cannot invite attendees)"
            )

        url = self._events_url(calendar_id)
        resp = await self._request("POST", url, "create calendar event", json=body)

        if not resp.is_success:
            error_body = _parse_error_body(resp)
            raise CalendarAPIError(
                f"Calendar API failed: {resp.status_code} {error_body}",
                status=resp.status_code,
                body=error_body,
                url=url,
            )

        event = CreatedEvent.from_api(
            _parse_success_body(resp, url, "create calendar event")
        )
        logger.info(
            "Created event %s on calendar %s",
            event.id,
            self._settings.resolve_calendar_id(calendar_id),
        )
        return event

    async def search_events(
        self,
        time_min: str,
        time_max: str,
        calendar_id: str | None = None,
    ) -> list[dict]:
        """List single events between ``time_min`` and ``time_max``.

        Results are capped at ``SEARCH_MAX_RESULTS``; later pages are not
        fetched.
        """
        missing = [
            name
            for name, value in (("timeMin", time_min), ("timeMax", time_max))
            if not value
        ]
        if missing:
            raise ValidationError([f"Missing required field: {name}" for name in missing])

        url = self._events_url(calendar_id)
        params = {
            "timeMin": time_min,
            "timeMax": time_max,
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": str(SEARCH_MAX_RESULTS),
        }
        resp = await self._request("GET", url, "search calendar events", params=params)

        if not resp.is_success:
            raise CalendarAPIError(
                f"Search request failed: {resp.status_code} {resp.text}",
                status=resp.status_code,
                body=resp.text,
                url=url,
            )

        data = _parse_success_body(resp, url, "search calendar events")
        items = data.get("items") or []
        logger.info("Found %d events between %s and %s", len(items), time_min, time_max)
        return items

    async def delete_event(
        self, event_id: str, calendar_id: str | None = None
    ) -> None:
        """Delete an event. 204 and any other 2xx count as success."""
        if not event_id:
            raise ValidationError(["Missing required field: eventId"])

        url = self._events_url(calendar_id, event_id)
        resp = await self._request("DELETE", url, "delete calendar event")

        if not resp.is_success:
            raise CalendarAPIError(
                f"Delete request failed: {resp.status_code} {resp.text}",
                status=resp.status_code,
                body=resp.text,
                url=url,
            )

        logger.info(
            "Deleted event %s on calendar %s",
            event_id,
            self._settings.resolve_calendar_id(calendar_id),
        )
