"""Utility helpers."""

from .datetime import as_timedelta, format_age, to_utc, utc_now
from .retry import BackoffType, RetryPolicy

__all__ = [
    "as_timedelta",
    "format_age",
    "to_utc",
    "utc_now",
    "BackoffType",
    "RetryPolicy",
]
