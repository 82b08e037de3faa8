import re
from datetime import datetime

CLOCK_RE = re.compile(r'^\s*(\d{1,2})(?::(\d{2}))?\s*$')


def parse_timestamp(value):
    """Parse an ISO timestamp ("2025-06-01T09:00:00", trailing "Z" allowed)"""
    if isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    if not text:
        raise ValueError("empty timestamp")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def calendar_day(value):
    """Strip the time-of-day part: "2025-06-01T09:00:00" -> "2025-06-01" """
    return str(value or "").split("T")[0]


def hours_between(a, b):
    """
    Absolute difference in hours between two timestamps.

    Naive timestamps are read as local time, so a naive and an offset-aware
    value can still be compared.
    """
    return abs(parse_timestamp(a).timestamp() - parse_timestamp(b).timestamp()) / 3600


def parse_clock(value):
    """Convert "HH:MM" (or "HH") to minutes after midnight"""
    match = CLOCK_RE.match(str(value or ""))
    if not match:
        raise ValueError(f"invalid clock time: {value!r}")
    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    if hours > 24 or minutes > 59:
        raise ValueError(f"invalid clock time: {value!r}")
    return hours * 60 + minutes


def minutes_of_day(value):
    """Wall-clock minutes after midnight of a tee time, as written"""
    dt = parse_timestamp(value)
    return dt.hour * 60 + dt.minute


def format_clock(value):
    """Render a timestamp as HH:MM"""
    try:
        return parse_timestamp(value).strftime("%H:%M")
    except ValueError:
        return str(value)[11:16]
