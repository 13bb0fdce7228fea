"""Field validation for appointment booking and cancellation requests.

Every rule runs and every failure is reported; nothing short-circuits.
Errors come back in a stable order: name, email, date, time, reason,
then the past-date check.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")

NAME_ERROR = "Name is required and must be a non-empty string"
EMAIL_ERROR = "Valid email is required"
DATE_ERROR = "Date is required and must be in YYYY-MM-DD format"
TIME_ERROR = "Time is required and must be in HH:MM format (24-hour)"
REASON_ERROR = "Reason is required and must be a non-empty string"
PAST_DATE_ERROR = "Appointment date cannot be in the past"


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_PATTERN.fullmatch(value))


def parse_date(value: Any) -> date | None:
    """Return the calendar date for a ``YYYY-MM-DD`` string, else None."""
    if not isinstance(value, str) or not _DATE_PATTERN.fullmatch(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def is_valid_time(value: Any) -> bool:
    return isinstance(value, str) and bool(_TIME_PATTERN.fullmatch(value))


def _is_non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _check_contact_fields(data: dict, errors: list[str]) -> date | None:
    if not is_valid_email(data.get("email")):
        errors.append(EMAIL_ERROR)

    parsed = parse_date(data.get("date"))
    if parsed is None:
        errors.append(DATE_ERROR)

    if not is_valid_time(data.get("time")):
        errors.append(TIME_ERROR)

    return parsed


def validate_booking(data: Any, today: date | None = None) -> ValidationResult:
    """Validate a booking payload.

    Args:
        data: Decoded JSON body. Anything but a dict counts as empty.
        today: Reference day for the past-date check. Defaults to the
            server's local date.
    """
    if not isinstance(data, dict):
        data = {}
    errors: list[str] = []

    if not _is_non_empty(data.get("name")):
        errors.append(NAME_ERROR)

    parsed = _check_contact_fields(data, errors)

    if not _is_non_empty(data.get("reason")):
        errors.append(REASON_ERROR)

    if parsed is not None and parsed < (today or date.today()):
        errors.append(PAST_DATE_ERROR)

    return ValidationResult(valid=not errors, errors=errors)


def validate_cancellation(data: Any) -> ValidationResult:
    """Validate a cancellation payload.

    Past dates are accepted here; only bookings are checked against today.
    """
    if not isinstance(data, dict):
        data = {}
    errors: list[str] = []
    _check_contact_fields(data, errors)
    return ValidationResult(valid=not errors, errors=errors)
