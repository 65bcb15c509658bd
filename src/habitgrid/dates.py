"""
Local-calendar day math.

Every stored completion carries an epoch-seconds timestamp. Two timestamps
are the same day iff their normalized forms (local midnight) are equal, so
both sides of every comparison go through normalize().
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from ._util import _is_number

SECONDS_PER_DAY = 24 * 60 * 60


def _local_day(ts: float) -> date:
    return datetime.fromtimestamp(ts).date()


def _midnight(d: date) -> int:
    return int(datetime(d.year, d.month, d.day).timestamp())


def normalize(ts: float) -> int:
    """Return local midnight of the calendar day containing ``ts``."""
    return _midnight(_local_day(ts))


def same_day(a: float, b: float) -> bool:
    return normalize(a) == normalize(b)


def add_days(ts: float, days: int) -> int:
    # step on calendar dates, not 86400s, so DST shifts don't drift the hour
    return _midnight(_local_day(ts) + timedelta(days=days))


def days_between(start: float, end: float) -> int:
    return (_local_day(end) - _local_day(start)).days


def day_of_month(ts: float) -> int:
    return _local_day(ts).day


def weekday(ts: float) -> int:
    """Monday == 0 ... Sunday == 6."""
    return _local_day(ts).weekday()


def to_timestamp(value: date | datetime | float) -> int:
    """Coerce a date, datetime or epoch number into epoch seconds."""
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, date):
        return _midnight(value)
    return int(value)


def is_valid_timestamp(value: object) -> bool:
    if not _is_number(value) or value <= 0:
        return False
    try:
        _local_day(value)
    except (OverflowError, OSError, ValueError):
        return False
    return True
