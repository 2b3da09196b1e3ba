"""
Tests for calendar date parsing.
"""
from datetime import date, datetime, timedelta, timezone

from loyalty_portal.utils.dates import format_calendar_date, parse_calendar_date


class TestParseCalendarDate:

    def test_date_only_string_is_midnight(self):
        assert parse_calendar_date('2025-03-15') == datetime(2025, 3, 15)

    def test_date_object(self):
        assert parse_calendar_date(date(2025, 3, 15)) == datetime(2025, 3, 15)

    def test_naive_datetime_unchanged(self):
        value = datetime(2025, 3, 15, 14, 30)
        assert parse_calendar_date(value) == value

    def test_iso_string_with_z(self):
        assert parse_calendar_date('2025-03-15T10:00:00Z') == datetime(2025, 3, 15, 10, 0)

    def test_offset_converted_to_utc(self):
        assert parse_calendar_date('2025-03-15T10:00:00+02:00') == datetime(2025, 3, 15, 8, 0)

    def test_aware_datetime_converted_to_utc(self):
        value = datetime(2025, 3, 15, 10, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert parse_calendar_date(value) == datetime(2025, 3, 15, 15, 0)

    def test_invalid_values(self):
        assert parse_calendar_date(None) is None
        assert parse_calendar_date('') is None
        assert parse_calendar_date('   ') is None
        assert parse_calendar_date('2025-13-45') is None
        assert parse_calendar_date('next tuesday') is None


class TestFormatCalendarDate:

    def test_default_format(self):
        assert format_calendar_date('2025-03-15') == '15 Mar 2025'

    def test_fallback(self):
        assert format_calendar_date(None, fallback='TBC') == 'TBC'
