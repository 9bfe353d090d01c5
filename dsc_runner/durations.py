"""ISO-8601 duration parsing and display helpers."""

import re
from datetime import timedelta

_ISO_DURATION_PATTERN = re.compile(
    r"(?P<sign>-)?P"
    r"(?:(?P<years>[0-9]+)Y)?"
    r"(?:(?P<months>[0-9]+)M)?"
    r"(?:(?P<days>[0-9]+)D)?"
    r"(?P<time>T"
    r"(?:(?P<hours>[0-9]+)H)?"
    r"(?:(?P<minutes>[0-9]+)M)?"
    r"(?:(?P<seconds>[0-9]+(?:\.[0-9]+)?)S)?"
    r")?"
)

_DAYS_PER_YEAR = 365
_DAYS_PER_MONTH = 30


def parse_iso_duration(value: str) -> timedelta | None:
    """Parse an ISO-8601 duration such as ``PT1M30S`` or ``PT0.0123S``.

    Years and months use fixed lengths of 365 and 30 days. Returns None for
    anything that is not a well-formed duration.
    """
    match = _ISO_DURATION_PATTERN.fullmatch(value.strip())
    if match is None:
        return None

    parts = match.groupdict()
    if parts["time"] == "T":
        return None

    components = ("years", "months", "days", "hours", "minutes", "seconds")
    if all(parts[name] is None for name in components):
        return None

    try:
        duration = timedelta(
            days=int(parts["years"] or 0) * _DAYS_PER_YEAR
            + int(parts["months"] or 0) * _DAYS_PER_MONTH
            + int(parts["days"] or 0),
            hours=int(parts["hours"] or 0),
            minutes=int(parts["minutes"] or 0),
            seconds=float(parts["seconds"] or 0),
        )
    except (OverflowError, ValueError):
        return None

    return -duration if parts["sign"] else duration


def format_duration(duration: timedelta | None) -> str:
    """Format a duration as seconds with one decimal (e.g. ``"12.5s"``)."""
    if duration is None:
        return "-"
    return f"{duration.total_seconds():.1f}s"
