"""
Date utilities for the NSF Awards API.

The NSF API speaks one date format, ``mm/dd/yyyy`` (zero-padded), for both
query parameters and award fields. Everything entering or leaving the client
is reconciled to that canonical form here.

Usage:
    from nsf_awards_mcp.shared.dates import normalize_date, validate_date_range

    normalize_date("2024-01-15")          # "01/15/2024"
    normalize_date("02/30/2024")          # None (not a calendar date)
    validate_date_range("01/01/2024", "12/31/2024")  # True
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

CANONICAL_FORMAT = "%m/%d/%Y"

_CANONICAL_RE = re.compile(r"^(0[1-9]|1[0-2])/(0[1-9]|[12][0-9]|3[01])/(\d{4})$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

# Tried in order after ISO 8601; day-first numeric forms are deliberately absent
# so that "31/02/2024" can never be read as a valid date.
_FALLBACK_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%Y%m%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def is_canonical_date(value: str) -> bool:
    """Check that *value* is ``mm/dd/yyyy`` and names a real Gregorian date."""
    if not isinstance(value, str):
        return False
    match = _CANONICAL_RE.match(value)
    if not match:
        return False
    month, day, year = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def parse_canonical_date(value: str) -> date:
    """
    Parse a canonical ``mm/dd/yyyy`` string.

    Raises:
        ValueError: If *value* is not a valid canonical date
    """
    if not is_canonical_date(value):
        raise ValueError(f"Invalid NSF date format: {value!r}. Expected mm/dd/yyyy")
    month, day, year = (int(part) for part in value.split("/"))
    return date(year, month, day)


def to_canonical(value: date | datetime) -> str:
    """Format a date as ``mm/dd/yyyy``."""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.month:02d}/{value.day:02d}/{value.year:04d}"


def _parse_string(text: str) -> date | None:
    text = text.strip()
    if not text:
        return None

    iso = _ISO_DATE_RE.match(text)
    if iso:
        year, month, day = (int(part) for part in iso.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    try:
        # Python < 3.11 does not accept a trailing "Z"
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value: str | int | float | date | datetime | None) -> str | None:
    """
    Convert any supported date representation to ``mm/dd/yyyy``.

    Accepts canonical strings (validated and passed through), ``yyyy-mm-dd``,
    other ISO 8601 or common textual dates, epoch-millisecond numbers (UTC),
    and native ``date``/``datetime`` values.

    Returns:
        Canonical string, or None when the input is empty, unparseable, or not
        a real calendar date. None means "omit the field", never an error.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return to_canonical(value)
    if isinstance(value, date):
        return to_canonical(value)

    if isinstance(value, (int, float)):
        if not value:
            return None
        try:
            return to_canonical(datetime.fromtimestamp(value / 1000, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        if is_canonical_date(value):
            return value
        parsed = _parse_string(value)
        return to_canonical(parsed) if parsed else None

    return None


def validate_date_range(from_date: str, to_date: str) -> bool:
    """Return True iff ``from_date <= to_date``; False if either is malformed."""
    try:
        return parse_canonical_date(from_date) <= parse_canonical_date(to_date)
    except (TypeError, ValueError):
        return False


def current_date(today: date | None = None) -> str:
    """Today's date in NSF format."""
    return to_canonical(today or date.today())


def date_days_ago(days: int, today: date | None = None) -> str:
    """Date *days* before today in NSF format."""
    return to_canonical((today or date.today()) - timedelta(days=days))


def date_days_ahead(days: int, today: date | None = None) -> str:
    """Date *days* after today in NSF format."""
    return to_canonical((today or date.today()) + timedelta(days=days))


__all__ = [
    "CANONICAL_FORMAT",
    "current_date",
    "date_days_ago",
    "date_days_ahead",
    "is_canonical_date",
    "normalize_date",
    "parse_canonical_date",
    "to_canonical",
    "validate_date_range",
]
