"""
Payment reminders.

Builds the WhatsApp reminder a shopkeeper sends a customer with an open
balance. The message names the shop, the pending amount and the number
to pay on; the link opens a chat with the text prefilled.
"""

import re
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from khata.models.ledger import Customer, ShopProfile
from khata.models.reports import Balance, BalanceStatus, PaymentReminder
from khata.utils.formatting import format_currency

WHATSAPP_BASE_URL = "https://wa.me/"

REMINDER_STATUS_LABELS = {
    BalanceStatus.RECEIVABLE: "Due (To Pay)",
    BalanceStatus.PAYABLE: "Advance (To Receive)",
    BalanceStatus.SETTLED: "Settled",
}

REMINDER_TEMPLATE = """*PAYMENT REMINDER*

Namaste {customer_name},

Your total pending amount at *{shop_name}* is *{amount}* as of {as_of}.

Please pay using PhonePe/GPay:
*{payment_number}*

For any queries, please call:
{shop_phone}

Thank you!"""


def _digits(phone: str) -> str:
    return re.sub(r"\D", "", phone)


def build_payment_reminder(
    customer: Customer,
    shop: ShopProfile,
    balance: Balance,
    as_of: Optional[datetime] = None,
    locale: str = "en-IN",
) -> PaymentReminder:
    """Reminder text and wa.me link for one customer."""
    as_of = as_of or datetime.now()
    payment_number = shop.phone_pe_number or shop.phone or "N/A"

    message = REMINDER_TEMPLATE.format(
        customer_name=customer.name,
        shop_name=shop.name,
        amount=format_currency(balance.amount, shop.currency, locale),
        as_of=as_of.strftime("%d/%m/%Y"),
        payment_number=payment_number,
        shop_phone=shop.phone,
    )

    return PaymentReminder(
        customer_id=customer.id,
        message=message,
        whatsapp_url=f"{WHATSAPP_BASE_URL}{_digits(customer.phone)}?text={quote(message, safe='')}",
        status_label=REMINDER_STATUS_LABELS[balance.status],
    )
