"""
Calendar-day helpers.

Timestamps are stored as naive UTC. Reports and "today" figures are cut at
local midnight using REPORT_UTC_OFFSET_MINUTES.
"""
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from app.core.config import settings


def _offset(offset_minutes: Optional[int]) -> timedelta:
    if offset_minutes is None:
        offset_minutes = settings.REPORT_UTC_OFFSET_MINUTES
    return timedelta(minutes=offset_minutes)


def local_today(offset_minutes: Optional[int] = None) -> date:
    return (datetime.utcnow() + _offset(offset_minutes)).date()


def local_date_of(moment: datetime, offset_minutes: Optional[int] = None) -> date:
    """Calendar day a naive UTC timestamp falls on"""
    return (moment + _offset(offset_minutes)).date()


def to_local(moment: datetime, offset_minutes: Optional[int] = None) -> datetime:
    return moment + _offset(offset_minutes)


def day_bounds(day: date, offset_minutes: Optional[int] = None) -> Tuple[datetime, datetime]:
    """[start, end) of a local calendar day as naive UTC datetimes"""
    start = datetime.combine(day, datetime.min.time()) - _offset(offset_minutes)
    return start, start + timedelta(days=1)
