import calendar
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sixloans.schemas.enums import PeriodEnum


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by whole calendar months, clamping the day (31 Mar - 1 month = 28/29 Feb)."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: Optional[PeriodEnum], now: datetime) -> Optional[datetime]:
    """Earliest ``created_at`` included by a dashboard period filter, None for all time."""
    if period is None:
        return None
    period = PeriodEnum(period)
    if period is PeriodEnum.daily:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is PeriodEnum.weekly:
        return now - timedelta(days=7)
    if period is PeriodEnum.monthly:
        return shift_months(now, -1)
    return shift_months(now, -12)


# (start of last month, start of this month)
def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return shift_months(this_month, -1), this_month


def format_trend(current: int, previous: int) -> str:
    """Month over month change as a signed percentage, e.g. '+12.5%'."""
    if previous > 0:
        trend = (current - previous) / previous * 100
    else:
        trend = 100.0 if current > 0 else 0.0
    return f"{'+' if trend >= 0 else ''}{trend:.1f}%"
