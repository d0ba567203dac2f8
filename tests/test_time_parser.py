"""
Tests for timespan, timestamp and duration helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ladder_bot.utils.time_parser import (
    format_seconds_to_time, format_time_ago, format_timestamp,
    parse_timespan_hours, parse_timestamp
)


@pytest.mark.parametrize("number, suffix, hours", [
    ("5", "h", 5),
    ("2", "days", 48),
    (1, "wk", 168),
    ("3", "months", 2160),
    ("1", "year", 8760),
])
def test_parse_timespan_hours(number, suffix, hours):
    assert parse_timespan_hours(number, suffix) == hours


def test_parse_timespan_hours_unknown_unit():
    assert parse_timespan_hours("3", "fortnights") is None


def test_parse_timestamp():
    dt = parse_timestamp("2024-06-01T18:30:05.000Z")
    assert dt == datetime(2024, 6, 1, 18, 30, 5, tzinfo=timezone.utc)

    offset = parse_timestamp("2024-06-01T20:30:05+02:00")
    assert offset == dt

    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_format_timestamp():
    dt = datetime(2024, 6, 1, 18, 30, 5, tzinfo=timezone.utc)
    assert format_timestamp(dt) == "2024-06-01T18:30:05.000Z"


@pytest.mark.parametrize("seconds, text", [
    (0, "0:00"),
    (65, "1:05"),
    (1385, "23:05"),
    (3725, "1:02:05"),
])
def test_format_seconds_to_time(seconds, text):
    assert format_seconds_to_time(seconds) == text


def test_format_seconds_to_time_negative():
    with pytest.raises(ValueError):
        format_seconds_to_time(-1)


def test_format_time_ago():
    now = datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)
    assert format_time_ago(now - timedelta(seconds=30), now) == "just now"
    assert format_time_ago(now - timedelta(minutes=5), now) == "5m ago"
    assert format_time_ago(now - timedelta(hours=3), now) == "3h ago"
    assert format_time_ago(now - timedelta(days=2), now) == "2d ago"
