"""FastAPI application: HTTP endpoints for the appointment relay.

Endpoints:

  GET    /health                                   Health check
  POST   /appointments/book                        Validate + relay a booking
  POST   /appointments/cancel                      Validate + relay a cancellation
  POST   /api/google-calendar/create               Create a calendar event
  POST   /api/google-calendar/search               Search calendar events
  DELETE /api/google-calendar/delete/{eventId}     Delete a calendar event

The appointment flow:
  1. The JSON body is validated; failures return 400 with every reason
  2. Strings are trimmed and the email lowercased
  3. The payload is POSTed to the matching webhook
  4. The webhook's response is echoed back alongside the normalised data

Calendar endpoints exchange the configured service account for a fresh
access token on every call and proxy to the Calendar API.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from booking_relay.automation import AutomationRelay
from booking_relay.calendar_providers.base import CalendarProvider
from booking_relay.calendar_providers.google import GoogleCalendarProvider
from booking_relay.config import Settings
from booking_relay.errors import (
    BookingRelayError,
    ConfigurationError,
    DownstreamError,
    FailureKind,
    ValidationError,
)
from booking_relay.models import BookingRequest, CancellationRequest
from booking_relay.validation import validate_booking, validate_cancellation

log = logging.getLogger("booking_relay.app")

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"

# Messages shown in production, where raw error text stays in the logs.
_SAFE_MESSAGES = {
    FailureKind.TIMEOUT: "The appointment service did not respond in time. Please try again later.",
    FailureKind.CONNECTION_REFUSED: "The appointment service is currently unavailable. Please try again later.",
    FailureKind.DNS_FAILURE: "The appointment service is currently unavailable. Please try again later.",
    FailureKind.REMOTE_ERROR: "The appointment service could not process the request. Please try again later.",
    FailureKind.NO_RESPONSE: "The appointment service did not respond. Please try again later.",
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
    )


def _public_message(exc: Exception, settings: Settings) -> str:
    if settings.expose_error_details:
        return str(exc)
    if isinstance(exc, DownstreamError):
        return _SAFE_MESSAGES.get(exc.kind, GENERIC_ERROR_MESSAGE)
    return GENERIC_ERROR_MESSAGE


async def _read_json(request: Request) -> dict:
    """Decode the body as a JSON object; anything else counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def create_app(
    settings: Settings | None = None,
    relay: AutomationRelay | None = None,
    calendar: CalendarProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators are built from ``settings`` unless supplied, so tests
    can hand in fakes or transports pointed at mock endpoints.
    """
    if settings is None:
        settings = Settings()
    if relay is None:
        relay = AutomationRelay(settings)
    if calendar is None:
        calendar = GoogleCalendarProvider(settings)

    app = FastAPI(
        title="Booking Relay",
        description="Validated pass-through to appointment webhooks and Google Calendar",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.relay = relay
    app.state.calendar = calendar

    # ── Request logging ────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    # ── Error boundary ─────────────────────────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Wrong-method hits on a known path answer like an unknown route.
        if exc.status_code in (404, 405):
            return JSONResponse(
                {
                    "success": False,
                    "error": "Not Found",
                    "message": f"Route {request.method} {request.url.path} not found",
                },
                status_code=404,
            )
        return JSONResponse(
            {"success": False, "error": exc.detail},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            {
                "success": False,
                "error": "Internal Server Error",
                "message": str(exc) if settings.expose_error_details else GENERIC_ERROR_MESSAGE,
            },
            status_code=500,
        )

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    # ── Appointments ───────────────────────────────────────────

    def _validation_failed(errors: list[str]) -> JSONResponse:
        return JSONResponse(
            {"success": False, "error": "Validation failed", "details": errors},
            status_code=400,
        )

    def _relay_failed(action: str, exc: BookingRelayError) -> JSONResponse:
        kind = exc.kind.value if isinstance(exc, DownstreamError) else "configuration"
        log.error("Error %s appointment [%s]: %s", action, kind, exc)
        return JSONResponse(
            {
                "success": False,
                "error": f"Failed to process {action} request",
                "message": _public_message(exc, settings),
            },
            status_code=500,
        )

    @app.post("/appointments/book")
    async def book_appointment(request: Request) -> JSONResponse:
        body = await _read_json(request)
        validation = validate_booking(body)
        if not validation.valid:
            return _validation_failed(validation.errors)

        booking = BookingRequest.from_payload(body).to_payload()
        try:
            result = await relay.relay_booking(booking)
        except (ConfigurationError, DownstreamError) as exc:
            return _relay_failed("booking", exc)

        return JSONResponse(
            {
                "success": True,
                "message": "Appointment booking request processed successfully",
                "data": booking,
                "n8nResult": result.to_dict(),
            }
        )

    @app.post("/appointments/cancel")
    async def cancel_appointment(request: Request) -> JSONResponse:
        body = await _read_json(request)
        validation = validate_cancellation(body)
        if not validation.valid:
            return _validation_failed(validation.errors)

        cancellation = CancellationRequest.from_payload(body).to_payload()
        try:
            result = await relay.relay_cancellation(cancellation)
        except (ConfigurationError, DownstreamError) as exc:
            return _relay_failed("cancellation", exc)

        return JSONResponse(
            {
                "success": True,
                "message": "Appointment cancellation request processed successfully",
                "data": cancellation,
                "n8nResult": result.to_dict(),
            }
        )

    # ── Google Calendar ────────────────────────────────────────

    def _calendar_failed(action: str, exc: BookingRelayError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            return JSONResponse(
                {"success": False, "error": str(exc)}, status_code=400
            )
        log.error("Error %s calendar event: %s", action, exc)
        return JSONResponse(
            {
                "success": False,
                "error": str(exc) if settings.expose_error_details else f"Failed to {action} calendar event",
            },
            status_code=500,
        )

    @app.post("/api/google-calendar/create")
    async def create_calendar_event(request: Request) -> JSONResponse:
        body = await _read_json(request)
        event_data: Any = body.get("eventData")
        if (
            not isinstance(event_data, dict)
            or not event_data.get("summary")
            or not event_data.get("start")
            or not event_data.get("end")
        ):
            return JSONResponse(
                {
                    "success": False,
                    "error": "Missing required fields: eventData.summary, eventData.start, eventData.end",
                },
                status_code=400,
            )

        try:
            event = await calendar.create_event(event_data, body.get("calendarId"))
        except BookingRelayError as exc:
            return _calendar_failed("create", exc)

        return JSONResponse({"success": True, "event": event.to_dict()})

    @app.post("/api/google-calendar/search")
    async def search_calendar_events(request: Request) -> JSONResponse:
        body = await _read_json(request)
        time_min = body.get("timeMin")
        time_max = body.get("timeMax")
        if not time_min or not time_max:
            return JSONResponse(
                {"success": False, "error": "Missing required fields: timeMin, timeMax"},
                status_code=400,
            )

        try:
            events = await calendar.search_events(time_min, time_max, body.get("calendarId"))
        except BookingRelayError as exc:
            return _calendar_failed("search", exc)

        return JSONResponse({"success": True, "events": events})

    @app.delete("/api/google-calendar/delete/{event_id}")
    async def delete_calendar_event(
        event_id: str,
        calendar_id: str | None = Query(default=None, alias="calendarId"),
    ) -> JSONResponse:
        try:
            await calendar.delete_event(event_id, calendar_id)
        except BookingRelayError as exc:
            return _calendar_failed("delete", exc)

        return JSONResponse({"success": True, "message": "Event deleted successfully"})

    return app


def main() -> None:
    """Validate configuration and serve the app with uvicorn."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)

    try:
        warnings = settings.validate_startup()
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        sys.exit(1)
    for warning in warnings:
        log.warning(warning)
    log.info("Configuration validated (environment: %s)", settings.environment)

    app = create_app(settings)
    log.info("Health check: http://localhost:%d/health", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
