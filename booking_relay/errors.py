"""Exception taxonomy for the relay.

Downstream failures carry a ``FailureKind`` tag so handlers can pick
user-facing messaging without knowing anything about httpx.
"""

from __future__ import annotations

import socket
from enum import Enum
from typing import Any

import httpx


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    DNS_FAILURE = "dns_failure"
    REMOTE_ERROR = "remote_error"
    NO_RESPONSE = "no_response"
    OTHER = "other"


class BookingRelayError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(BookingRelayError):
    """Client input was malformed. Always carries itemized reasons."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class ConfigurationError(BookingRelayError):
    """A required endpoint or credential is missing or unusable."""


class DownstreamError(BookingRelayError):
    """An outbound HTTP call failed."""

    kind: FailureKind = FailureKind.OTHER

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        kind: FailureKind | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        if kind is not None:
            self.kind = kind


class DownstreamTimeoutError(DownstreamError):
    kind = FailureKind.TIMEOUT


class DownstreamUnreachableError(DownstreamError):
    kind = FailureKind.CONNECTION_REFUSED


class DownstreamErrorResponse(DownstreamError):
    """The remote answered with a non-success status; body preserved."""

    kind = FailureKind.REMOTE_ERROR

    def __init__(
        self,
        message: str,
        *,
        status: int,
        body: Any = None,
        url: str = "",
    ) -> None:
        super().__init__(message, url=url)
        self.status = status
        self.body = body


class TokenExchangeError(DownstreamErrorResponse):
    """The token endpoint rejected the signed assertion."""


class CalendarAPIError(DownstreamErrorResponse):
    """The calendar API returned a non-success status or an unreadable body."""


# Substrings the resolver puts in OSError messages on lookup failure.
_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated",
    "name resolution",
)


def _is_dns_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        text = str(current).lower()
        if any(marker in text for marker in _DNS_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


def classify_transport_error(
    exc: httpx.HTTPError,
    url: str,
    operation: str,
    timeout: float = 10.0,
) -> DownstreamError:
    """Translate an httpx transport exception into the relay taxonomy.

    Returns the exception instead of raising it so callers can
    ``raise classify_transport_error(...) from exc``.
    """
    if isinstance(exc, httpx.ConnectTimeout):
        return DownstreamTimeoutError(
            f"Connection timed out. Check network connectivity to: {url}",
            url=url,
        )
    if isinstance(exc, httpx.TimeoutException):
        return DownstreamTimeoutError(
            f"Request to {operation} timed out after {timeout:g}s. "
            f"Check if the service is running at {url}",
            url=url,
        )
    if isinstance(exc, httpx.ConnectError):
        if _is_dns_failure(exc):
            return DownstreamUnreachableError(
                f"Host not found. Check URL: {url}",
                url=url,
                kind=FailureKind.DNS_FAILURE,
            )
        return DownstreamUnreachableError(
            f"Connection refused. The service may not be running or the URL "
            f"is incorrect: {url}",
            url=url,
        )
    if isinstance(exc, (httpx.RemoteProtocolError, httpx.ReadError)):
        return DownstreamError(
            f"No response received from {url}. Check if the service is "
            f"running and the endpoint is active.",
            url=url,
            kind=FailureKind.NO_RESPONSE,
        )
    return DownstreamError(
        f"Failed to {operation}: {exc}",
        url=url,
        kind=FailureKind.OTHER,
    )
