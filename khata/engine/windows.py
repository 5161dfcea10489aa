"""Time-window filtering for transactions and expenses."""

from datetime import datetime
from typing import Iterable, Optional, TypeVar, Union

from khata.models.reports import TimeWindow
from khata.utils.dates import start_of_day, start_of_month

DatedT = TypeVar("DatedT")


def window_start(
    window: Union[TimeWindow, str],
    now: Optional[datetime] = None,
) -> Optional[int]:
    """Inclusive lower bound of a window in epoch ms; None for `all`."""
    window = TimeWindow(window)
    if window == TimeWindow.TODAY:
        return start_of_day(now)
    if window == TimeWindow.THIS_MONTH:
        return start_of_month(now)
    return None


def filter_by_time_window(
    records: Iterable[DatedT],
    window: Union[TimeWindow, str],
    now: Optional[datetime] = None,
) -> list[DatedT]:
    """
    Keep records dated at or after the start of the window.

    The boundary is computed once per call. Records dated in the future
    are kept; only the lower bound applies.
    """
    start = window_start(window, now)
    if start is None:
        return list(records)
    return [record for record in records if record.date >= start]
