"""
Duration parsing and serialization for role activations.
"""

import re
from datetime import timedelta

from .exceptions import InvalidDurationError

DEFAULT_DURATION = timedelta(minutes=60)

_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}

_TOKEN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as ``90m``, ``1h30m``, ``1.5h`` or ``-45s``.

    A bare number is read as minutes.

    Args:
        text: Duration string

    Returns:
        Parsed timedelta

    Raises:
        InvalidDurationError: If the string is not a valid duration
    """
    value = (text or "").strip()
    if not value:
        raise InvalidDurationError("Empty duration")

    sign = 1
    body = value
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if re.fullmatch(r"\d+", body):
        return sign * timedelta(minutes=int(body))

    total = timedelta(0)
    position = 0
    for match in _TOKEN.finditer(body):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(body):
        raise InvalidDurationError(f"Invalid duration: {text}")

    return sign * total


def whole_minutes(duration: timedelta) -> int:
    """Whole minutes in ``duration``, truncated toward zero."""
    return int(duration.total_seconds() / 60)


def iso8601_minutes(duration: timedelta) -> str:
    """Serialize ``duration`` as an ISO-8601 minutes token, e.g. ``PT90M``."""
    return f"PT{whole_minutes(duration)}M"
