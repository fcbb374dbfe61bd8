"""Tests for duration parsing and ISO-8601 serialization."""

from datetime import timedelta

import pytest

from azure_pim_tool.durations import iso8601_minutes, parse_duration, whole_minutes
from azure_pim_tool.exceptions import InvalidDurationError


@pytest.mark.parametrize(
    "duration, expected",
    [
        (timedelta(minutes=90), "PT90M"),
        (timedelta(minutes=1.5), "PT1M"),
        (timedelta(minutes=59, seconds=59), "PT59M"),
        (timedelta(hours=8), "PT480M"),
        (timedelta(0), "PT0M"),
        (timedelta(minutes=-5), "PT-5M"),
    ],
)
def test_iso8601_minutes(duration, expected):
    assert iso8601_minutes(duration) == expected


def test_whole_minutes_truncates_toward_zero():
    assert whole_minutes(timedelta(seconds=119)) == 1
    assert whole_minutes(timedelta(seconds=-119)) == -1


@pytest.mark.parametrize(
    "text, expected",
    [
        ("90m", timedelta(minutes=90)),
        ("1h30m", timedelta(minutes=90)),
        ("1.5h", timedelta(minutes=90)),
        ("2h", timedelta(hours=2)),
        ("45s", timedelta(seconds=45)),
        ("1h0m30s", timedelta(hours=1, seconds=30)),
        ("500ms", timedelta(milliseconds=500)),
        ("-1h", timedelta(hours=-1)),
        ("+15m", timedelta(minutes=15)),
        ("30", timedelta(minutes=30)),
        (" 20m ", timedelta(minutes=20)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "10x", "m", "1h 30m", "h1", "1.5"])
def test_parse_duration_invalid(text):
    with pytest.raises(InvalidDurationError):
        parse_duration(text)


def test_invalid_duration_is_value_error():
    with pytest.raises(ValueError):
        parse_duration("soon")
