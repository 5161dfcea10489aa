"""Small shared helpers: IDs, timestamps, display formatting."""

from khata.utils.dates import (
    entry_timestamp,
    from_millis,
    now_millis,
    start_of_day,
    start_of_month,
    to_millis,
)
from khata.utils.formatting import format_currency, format_date, format_time
from khata.utils.ids import generate_id

__all__ = [
    "entry_timestamp",
    "format_currency",
    "format_date",
    "format_time",
    "from_millis",
    "generate_id",
    "now_millis",
    "start_of_day",
    "start_of_month",
    "to_millis",
]
