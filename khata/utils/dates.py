"""
Epoch-millisecond helpers.

Stored timestamps are epoch milliseconds. Window boundaries are computed
on naive local datetimes, so "today" means the shopkeeper's calendar day.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_millis(moment: datetime) -> int:
    """Epoch milliseconds for a datetime (naive = local time), floored to the millisecond."""
    aware = moment if moment.tzinfo is not None else moment.astimezone()
    return (aware - _EPOCH) // _ONE_MS


def from_millis(millis: int) -> datetime:
    """Naive local datetime for an epoch-millisecond timestamp."""
    return (_EPOCH + millis * _ONE_MS).astimezone().replace(tzinfo=None)


def now_millis(now: Optional[datetime] = None) -> int:
    return to_millis(now or datetime.now())


def start_of_day(now: Optional[datetime] = None) -> int:
    """Local midnight of the current (or given) day, in milliseconds."""
    now = now or datetime.now()
    return to_millis(datetime.combine(now.date(), time.min))


def start_of_month(now: Optional[datetime] = None) -> int:
    """Day 1, 00:00 local of the current (or given) month, in milliseconds."""
    now = now or datetime.now()
    return to_millis(datetime.combine(now.date().replace(day=1), time.min))


def entry_timestamp(entry_date: Optional[date], now: Optional[datetime] = None) -> int:
    """
    Timestamp for a ledger entry dated by the user.

    Entries for today (or undated ones) take the current wall-clock time
    so they sort after earlier entries of the day. Entries for any other
    day are stamped at that day's local midnight.
    """
    now = now or datetime.now()
    if entry_date is None or entry_date == now.date():
        return to_millis(now)
    return to_millis(datetime.combine(entry_date, time.min))
