"""
Shop-local date handling and money rounding shared by every app.

The shop runs on its own business day (``SHOP_TIME_ZONE``) while timestamps
are stored in UTC, so day ranges, bill numbers and summaries all go through
these helpers.
"""

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

TWO_PLACES = Decimal("0.01")


def shop_timezone() -> ZoneInfo:
    return ZoneInfo(settings.SHOP_TIME_ZONE)


def local_now() -> datetime:
    return timezone.localtime(timezone.now(), shop_timezone())


def local_today() -> date:
    return local_now().date()


def to_local(value: datetime) -> datetime:
    return timezone.localtime(value, shop_timezone())


def local_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """
    Return the [start, end) datetimes covering one local calendar day.
    """
    start = datetime.combine(day, time.min, tzinfo=shop_timezone())
    return start, start + timedelta(days=1)


def local_range_bounds(start_day: date, end_day: date) -> Tuple[datetime, datetime]:
    """Start of ``start_day`` up to (excluding) the day after ``end_day``."""
    start, _ = local_day_bounds(start_day)
    _, end = local_day_bounds(end_day)
    return start, end


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string, also accepting a full ISO timestamp.

    Returns None for empty or unparseable input.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def weekday_number(day: date) -> int:
    """Weekday with Sunday = 0 through Saturday = 6."""
    return (day.weekday() + 1) % 7


def round_money(value) -> Decimal:
    """Round half-up to 2 decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
