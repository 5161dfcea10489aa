"""
Display formatting for amounts and dates.

Amounts are shown in whole currency units (no paise/cents), the way
shopkeepers read their khata. Locales ending in ``-IN`` use Indian digit
grouping (1,00,000); everything else groups by thousands.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from khata.utils.dates import from_millis

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AED": "AED ",
    "NPR": "Rs ",
    "PKR": "Rs ",
    "BDT": "৳",
    "LKR": "Rs ",
}


def _group_western(digits: str) -> str:
    return f"{int(digits):,}"


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(
    amount: Union[Decimal, int, float],
    currency: str = "INR",
    locale: str = "en-IN",
) -> str:
    """Format an amount as whole currency units, e.g. ``₹1,00,000``."""
    value = Decimal(str(amount))
    whole = abs(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    digits = str(int(whole))

    if locale.upper().endswith("-IN"):
        grouped = _group_indian(digits)
    else:
        grouped = _group_western(digits)

    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if value < 0 and whole != 0 else ""
    return f"{sign}{symbol}{grouped}"


def format_date(millis: int) -> str:
    """Local calendar date, e.g. ``5 Jan 2025``."""
    moment = from_millis(millis)
    return f"{moment.day} {moment.strftime('%b %Y')}"


def format_time(millis: int) -> str:
    """Local time of day, e.g. ``09:05 AM``."""
    return from_millis(millis).strftime("%I:%M %p")
