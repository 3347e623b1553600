import calendar
import enum
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

DateRange = Tuple[Optional[datetime], Optional[datetime]]


class DatePreset(str, enum.Enum):
    this_month = "this-month"
    last_month = "last-month"
    this_year = "this-year"
    last_30_days = "last-30-days"
    all_time = "all-time"


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First instant and last instant of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return start_of_day(date(year, month, 1)), end_of_day(date(year, month, last_day))


def preset_range(preset: DatePreset, now: Optional[datetime] = None) -> DateRange:
    today = (now or datetime.now()).date()

    if preset == DatePreset.this_month:
        return month_bounds(today.year, today.month)
    if preset == DatePreset.last_month:
        first_of_this_month = today.replace(day=1)
        last_month_day = first_of_this_month - timedelta(days=1)
        return month_bounds(last_month_day.year, last_month_day.month)
    if preset == DatePreset.this_year:
        return start_of_day(date(today.year, 1, 1)), end_of_day(date(today.year, 12, 31))
    if preset == DatePreset.last_30_days:
        return start_of_day(today - timedelta(days=30)), end_of_day(today)
    if preset == DatePreset.all_time:
        return None, None
    raise ValueError(f"Unknown date preset: {preset}")


def resolve_range(
    preset: Optional[DatePreset] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """
    Turn query parameters into an inclusive datetime range.
    A preset wins over explicit dates; an explicit end date covers the whole day.
    """
    if preset is not None:
        return preset_range(preset, now=now)
    start = start_of_day(start_date) if start_date else None
    end = end_of_day(end_date) if end_date else None
    return start, end
