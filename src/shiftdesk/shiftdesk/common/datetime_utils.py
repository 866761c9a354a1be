from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into time."""
    v = (value or "").strip()
    fmt = "%H:%M:%S" if v.count(":") == 2 else "%H:%M"
    return datetime.strptime(v, fmt).time()


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (matches MySQL DATETIME columns).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday..Saturday week containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def next_week_bounds(today: Optional[date] = None) -> tuple[date, date]:
    start, _ = week_bounds(today or date.today())
    start = start + timedelta(days=7)
    return start, start + timedelta(days=6)


def iter_days(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def fmt_clock(t: time) -> str:
    return t.strftime("%H:%M")
