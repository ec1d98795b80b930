from __future__ import annotations

import calendar
from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (24h) string into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last calendar day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_month_days(month: int, year: int):
    start, end = month_bounds(month, year)
    for day in range(start.day, end.day + 1):
        yield date(year, month, day)


def is_weekend(d: date) -> bool:
    # Saturday=5, Sunday=6
    return d.weekday() >= 5


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600
