"""Calendar-date helpers shared by the statistics services.

Completion logs are keyed by the user's local calendar day as a ``YYYY-MM-DD``
string. Converting through UTC shifts the day whenever the local midnight is
not UTC midnight, so datetimes are always localised before taking ``.date()``.
"""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime

from ..errors import ConfigurationError

_DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def local_date(value: date | datetime) -> date:
    """Return the local calendar day for a date or datetime."""

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def format_date_key(value: date | datetime) -> str:
    """Render the canonical ``YYYY-MM-DD`` key for a local calendar day."""

    return local_date(value).isoformat()


def parse_date_key(value: str) -> date:
    """Parse a canonical ``YYYY-MM-DD`` key, raising ConfigurationError if malformed."""

    if not isinstance(value, str) or not _DATE_KEY.match(value.strip()):
        raise ConfigurationError(f"Malformed date key: {value!r}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Malformed date key: {value!r}") from exc


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_end(value: date) -> date:
    return value.replace(day=monthrange(value.year, value.month)[1])


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""

    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, monthrange(year, month)[1])
    return date(year, month, day)


__all__ = [
    "add_months",
    "format_date_key",
    "local_date",
    "month_end",
    "month_start",
    "parse_date_key",
]
