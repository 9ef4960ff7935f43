from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime]


def parse_date(value) -> Optional[date]:
    """
    Parse an ISO 8601 date or timestamp into a calendar date.
    Returns None for empty, malformed or impossible dates; never raises.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    # older interpreters reject a trailing Z
    if text.endswith(("Z", "z")):
        try:
            return datetime.fromisoformat(text[:-1] + "+00:00").date()
        except ValueError:
            return None
    return None


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(a: DateLike, b: DateLike) -> int:
    """Whole days from a to b (b - a), compared at midnight."""
    return (as_date(b) - as_date(a)).days
