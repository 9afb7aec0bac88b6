"""Date helpers for the YYYY-MM-DD / HH:MM strings stored in Supabase."""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def parse_date(value: Any) -> Optional[date]:
    """Parse a date or timestamp string; returns None for blanks and garbage."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def is_valid_date(value: Any) -> bool:
    return isinstance(value, str) and bool(DATE_RE.match(value)) and parse_date(value) is not None


def is_valid_time(value: Any) -> bool:
    return isinstance(value, str) and bool(TIME_RE.match(value))


def normalize_time(value: Optional[str]) -> str:
    """Trim a ``HH:MM:SS`` column value to ``HH:MM``."""
    if not value:
        return ""
    return str(value)[:5]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
