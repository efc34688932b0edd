"""Calendar windows in the business time zone.

Invoices are stored with UTC timestamps; every "today" / "this month"
question is answered in ``settings.BUSINESS_TIMEZONE`` and converted back
to a UTC half-open interval ``[start, end)`` for querying.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from salesdesk.app.core.config import settings


def business_tz() -> tzinfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_today(now: datetime | None = None, tz: tzinfo | None = None) -> date:
    now = now or utcnow()
    return now.astimezone(tz or business_tz()).date()


def day_window(day: date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    tz = tz or business_tz()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(
    year: int, month: int, tz: tzinfo | None = None
) -> tuple[datetime, datetime]:
    tz = tz or business_tz()
    next_year, next_month = add_months(year, month, 1)
    start = datetime(year, month, 1, tzinfo=tz)
    end = datetime(next_year, next_month, 1, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
