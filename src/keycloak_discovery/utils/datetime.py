"""
DateTime utilities for consistent timezone handling.
"""
from datetime import datetime, timedelta, timezone
from typing import Union


def utc_now() -> datetime:
    """
    Get the current UTC time with timezone awareness.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC timezone.

    Naive datetimes are assumed to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    if dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def as_timedelta(value: Union[float, int, timedelta]) -> timedelta:
    """Interpret a number as seconds."""
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


def format_age(seconds: float) -> str:
    """Render an age compactly, e.g. ``4s``, ``2m05s``, ``1h03m``."""
    seconds = max(0, int(seconds))
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m{seconds:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h{minutes:02d}m"
