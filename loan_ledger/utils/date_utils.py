"""Date manipulation utilities"""

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime]


def whole_days_between(start: DateLike, end: DateLike) -> int:
    """Whole days from start to end, floored (timedelta.days floors toward -inf)"""
    return (end - start).days


def add_days(from_date: date, days: int) -> date:
    """Shift a date by a number of calendar days"""
    return from_date + timedelta(days=days)


def month_key(value: date) -> str:
    """Calendar month bucket in YYYY-MM form, sortable chronologically"""
    return f"{value.year:04d}-{value.month:02d}"
