from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

import pytz


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local(tz_name: str) -> datetime:
    """Current time in the given zone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(pytz.timezone(tz_name))


def localize(value: datetime, tz_name: str) -> datetime:
    """Attach ``tz_name`` to a naive datetime, or convert an aware one."""
    tz = pytz.timezone(tz_name)
    if value.tzinfo is None:
        return tz.localize(value)
    return value.astimezone(tz)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
