"""Tests for booking / cancellation field validation."""

from datetime import date, timedelta

import pytest

from booking_relay.validation import (
    DATE_ERROR,
    EMAIL_ERROR,
    NAME_ERROR,
    PAST_DATE_ERROR,
    REASON_ERROR,
    TIME_ERROR,
    parse_date,
    validate_booking,
    validate_cancellation,
)

TODAY = date(2026, 3, 15)


def _booking(**overrides):
    data = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "date": "2026-03-20",
        "time": "09:30",
        "reason": "Annual checkup",
    }
    data.update(overrides)
    return data


# ── Booking ─────────────────────────────────────────────────────────


class TestValidateBooking:
    def test_valid_payload(self):
        result = validate_booking(_booking(), today=TODAY)
        assert result.valid is True
        assert result.errors == []

    @pytest.mark.parametrize(
        "field, expected",
        [
            ("name", NAME_ERROR),
            ("email", EMAIL_ERROR),
            ("date", DATE_ERROR),
            ("time", TIME_ERROR),
            ("reason", REASON_ERROR),
        ],
    )
    def test_missing_field_is_reported(self, field, expected):
        data = _booking()
        del data[field]
        result = validate_booking(data, today=TODAY)
        assert result.valid is False
        assert expected in result.errors

    def test_whitespace_only_name_and_reason(self):
        result = validate_booking(_booking(name="   ", reason="\t"), today=TODAY)
        assert result.errors == [NAME_ERROR, REASON_ERROR]

    def test_non_string_name(self):
        result = validate_booking(_booking(name=123), today=TODAY)
        assert result.errors == [NAME_ERROR]

    def test_all_errors_collected_in_order(self):
        result = validate_booking({}, today=TODAY)
        assert result.errors == [
            NAME_ERROR,
            EMAIL_ERROR,
            DATE_ERROR,
            TIME_ERROR,
            REASON_ERROR,
        ]

    def test_non_dict_input(self):
        result = validate_booking(["not", "a", "dict"], today=TODAY)
        assert result.valid is False
        assert len(result.errors) == 5

    def test_past_date_check_comes_last(self):
        result = validate_booking(
            _booking(date="2026-03-14", time="25:00"), today=TODAY
        )
        assert result.errors == [TIME_ERROR, PAST_DATE_ERROR]


class TestDateRules:
    @pytest.mark.parametrize("value", ["2026/03/20", "20-03-2026", "2026-3-20", "", "tomorrow", "2026-03-20\n"])
    def test_bad_format_rejected(self, value):
        result = validate_booking(_booking(date=value), today=TODAY)
        assert result.errors == [DATE_ERROR]

    @pytest.mark.parametrize("value", ["2024-13-40", "2026-02-30", "2026-00-10"])
    def test_not_a_real_date(self, value):
        assert parse_date(value) is None
        result = validate_booking(_booking(date=value), today=TODAY)
        assert result.errors == [DATE_ERROR]

    def test_today_accepted(self):
        result = validate_booking(_booking(date=TODAY.isoformat()), today=TODAY)
        assert result.valid is True

    def test_yesterday_rejected(self):
        yesterday = (TODAY - timedelta(days=1)).isoformat()
        result = validate_booking(_booking(date=yesterday), today=TODAY)
        assert result.errors == [PAST_DATE_ERROR]

    def test_defaults_to_local_today(self):
        result = validate_booking(_booking(date=date.today().isoformat()))
        assert result.valid is True

    def test_leap_day(self):
        assert parse_date("2028-02-29") == date(2028, 2, 29)


class TestTimeRules:
    @pytest.mark.parametrize("value", ["24:00", "9:30", "12:60", "12:5", "noon", "12:30:00", "09:30\n"])
    def test_rejected(self, value):
        result = validate_booking(_booking(time=value), today=TODAY)
        assert result.errors == [TIME_ERROR]

    @pytest.mark.parametrize("value", ["00:00", "09:30", "23:59"])
    def test_accepted(self, value):
        assert validate_booking(_booking(time=value), today=TODAY).valid is True


class TestEmailRules:
    @pytest.mark.parametrize("value", ["a@b", "plainaddress", "a b@c.com", "@b.com", "a@@b.com", "a@b.com\n"])
    def test_rejected(self, value):
        result = validate_booking(_booking(email=value), today=TODAY)
        assert result.errors == [EMAIL_ERROR]

    @pytest.mark.parametrize("value", ["a@b.com", "First.Last@Sub.Example.org"])
    def test_accepted(self, value):
        assert validate_booking(_booking(email=value), today=TODAY).valid is True


# ── Cancellation ────────────────────────────────────────────────────


class TestValidateCancellation:
    def test_valid_payload(self):
        result = validate_cancellation(
            {"email": "jane@example.com", "date": "2026-03-20", "time": "09:30"},
        )
        assert result.valid is True

    def test_name_and_reason_not_required(self):
        result = validate_cancellation({})
        assert result.errors == [EMAIL_ERROR, DATE_ERROR, TIME_ERROR]

    def test_past_date_allowed(self):
        result = validate_cancellation(
            {"email": "jane@example.com", "date": "2020-01-01", "time": "09:30"},
        )
        assert result.valid is True
