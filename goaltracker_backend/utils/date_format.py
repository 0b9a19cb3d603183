"""
Date helpers for the dd.MM.yyyy format used by the forms and the CLI.

Values that cannot be interpreted produce an empty string (formatters) or
None (parse_date) instead of raising.
"""

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str, int, float]


def _coerce_datetime(value: DateLike) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        # Millisecond timestamps, as produced by browsers
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def format_date(value: DateLike) -> str:
    """Format a date as dd.MM.yyyy."""
    d = _coerce_datetime(value)
    if d is None:
        return ""
    return f"{d.day:02d}.{d.month:02d}.{d.year}"


def format_datetime(value: DateLike) -> str:
    """Format a date with time as dd.MM.yyyy HH:mm."""
    d = _coerce_datetime(value)
    if d is None:
        return ""
    return f"{d.day:02d}.{d.month:02d}.{d.year} {d.hour:02d}:{d.minute:02d}"


def parse_date(date_string: str) -> Optional[date]:
    """Parse dd.MM.yyyy into a date; None when malformed or not a real calendar day (31.02.2024)."""
    parts = date_string.split(".")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(part) for part in parts)
    except ValueError:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def to_iso_date_string(date_string: str) -> str:
    """dd.MM.yyyy -> YYYY-MM-DD, or "" when invalid."""
    parsed = parse_date(date_string)
    if parsed is None:
        return ""
    return parsed.isoformat()


def from_iso_date_string(iso_date_string: str) -> str:
    """YYYY-MM-DD -> dd.MM.yyyy, or "" when invalid."""
    parts = iso_date_string.split("-")
    if len(parts) != 3:
        return ""
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError:
        return ""
    return f"{day:02d}.{month:02d}.{year}"
