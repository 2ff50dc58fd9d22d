"""Unit tests for timezone utility functions."""

from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from dose_tracker.utils.timezone import (
    from_timestamp_ms,
    get_day_bounds,
    get_local_now,
    parse_timezone_offset,
    to_timestamp_ms,
)
from tests.fixtures import TZ, at


class TestParseTimezoneOffset:
    """Test cases for parse_timezone_offset function."""

    def test_parse_positive_timezone(self):
        assert parse_timezone_offset("+03:00") == timedelta(hours=3)
        assert parse_timezone_offset("+05:30") == timedelta(hours=5, minutes=30)
        assert parse_timezone_offset("+00:00") == timedelta(0)

    def test_parse_negative_timezone(self):
        assert parse_timezone_offset("-05:00") == timedelta(hours=-5)
        assert parse_timezone_offset("-08:30") == timedelta(hours=-8, minutes=-30)

    def test_whitespace_is_ignored(self):
        assert parse_timezone_offset(" +03:00 ") == timedelta(hours=3)

    @pytest.mark.parametrize(
        "value",
        ["", "+3:00", "+03:0", "03:00", "+03-00", "+15:00", "+03:60", "UTC"],
    )
    def test_invalid_formats(self, value):
        with pytest.raises(ValueError):
            parse_timezone_offset(value)


class TestEpochMilliseconds:
    """Test cases for epoch-millisecond conversion."""

    def test_known_instant(self):
        moment = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert to_timestamp_ms(moment) == 1704067200000

    def test_millisecond_precision(self):
        assert to_timestamp_ms(at(1, 10, 0, 0, 999)) % 1000 == 999

    def test_from_timestamp_uses_requested_timezone(self):
        moment = from_timestamp_ms(1704067200000, TZ)
        assert (moment.hour, moment.utcoffset()) == (3, timedelta(hours=3))

    def test_from_timestamp_defaults_to_utc(self):
        assert from_timestamp_ms(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestDayBounds:
    """Test cases for local calendar day bounds."""

    def test_bounds_follow_local_midnight(self):
        start, end = get_day_bounds(at(1, 15, 0))
        # 2024-01-01 00:00 +03:00 is 2023-12-31 21:00 UTC
        assert start == 1704056400000
        assert end == start + 24 * 3600 * 1000 - 1

    def test_bounds_at_midnight(self):
        start, _ = get_day_bounds(at(2, 0, 0))
        assert start == to_timestamp_ms(at(2, 0, 0))


class TestGetLocalNow:
    """Test cases for reading the wall clock."""

    @freeze_time("2024-01-01 22:30:00")
    def test_converts_utc_to_offset(self):
        now = get_local_now("+03:00")
        assert now.date() == datetime(2024, 1, 2).date()
        assert (now.hour, now.minute) == (1, 30)
        assert now.utcoffset() == timedelta(hours=3)
