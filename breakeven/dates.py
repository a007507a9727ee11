# breakeven/dates.py
"""
Helpers for working with calendar days in a budget's timezone.

Definitions
- "today": the current date in an IANA timezone, e.g. "America/Toronto"
- ISO date: strict "YYYY-MM-DD" text, the only format the API accepts

Public API:
- now_utc() -> aware datetime
- today_in_timezone("Area/City") -> date
- local_date(datetime, "Area/City") -> date
- validate_timezone("Area/City") -> str
- parse_iso_date("YYYY-MM-DD") -> date
- iter_days(start, end) -> dates, both ends included
- is_first_of_month(date) -> bool
- add_months(date, n) / add_years(date, n) -> date, clamped to month end
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.relativedelta import relativedelta

from breakeven.errors import InvalidInputError

__all__ = [
    "now_utc",
    "today_in_timezone",
    "local_date",
    "validate_timezone",
    "parse_iso_date",
    "iter_days",
    "is_first_of_month",
    "add_months",
    "add_years",
]

_ISO_DATE = re.compile(r"\A\d{4}-\d{2}-\d{2}\Z")


# ---------- Clock ----------


def now_utc() -> datetime:
    """Current instant, timezone-aware. Tests monkeypatch this."""
    return datetime.now(timezone.utc)


def _zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise InvalidInputError(f"Unknown timezone: {tz_name!r}") from ex


def local_date(instant: datetime, tz_name: str) -> date:
    """
    Convert an instant to a calendar date in tz_name.
    Naive datetimes (what SQLite hands back) are read as UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(_zone(tz_name)).date()


def today_in_timezone(tz_name: str) -> date:
    return local_date(now_utc(), tz_name)


def validate_timezone(tz_name: Optional[str]) -> str:
    """Return the zone name unchanged if zoneinfo knows it."""
    if not tz_name or not isinstance(tz_name, str):
        raise InvalidInputError("timezone is required")
    _zone(tz_name.strip())
    return tz_name.strip()


# ---------- Parsing ----------


def parse_iso_date(value: str) -> date:
    """
    Parse 'YYYY-MM-DD'. Anything else is rejected before it reaches
    date.fromisoformat (which also accepts '20250115' on newer Pythons).
    """
    if not value or not isinstance(value, str):
        raise InvalidInputError("date is required")
    s = value.strip()
    if not _ISO_DATE.match(s):
        raise InvalidInputError("Invalid date format. Expected YYYY-MM-DD")
    try:
        return date.fromisoformat(s)
    except ValueError as ex:
        raise InvalidInputError(f"Invalid date: {ex}") from ex


# ---------- Calendar ----------


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive, ascending."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def is_first_of_month(d: date) -> bool:
    return d.day == 1


def add_months(d: date, months: int) -> date:
    """Same day next month(s); 01-31 + 1 month -> 02-28/29."""
    return d + relativedelta(months=months)


def add_years(d: date, years: int) -> date:
    """Same day next year(s); 02-29 + 1 year -> 02-28."""
    return d + relativedelta(years=years)
