"""
Balance & Aggregation Engine

Pure functions over record snapshots. Nothing here reads or writes
storage and nothing mutates its inputs; every call recomputes from the
full collections it is given.

Sign convention: GIVE adds to what the customer owes, GET subtracts.
A positive result is receivable, a negative one is an advance the shop
holds (payable).
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, TypeVar

from khata.engine.windows import filter_by_time_window
from khata.models.ledger import Customer, Transaction, TransactionType
from khata.models.reports import (
    Balance,
    CustomerBalance,
    DashboardStats,
    TimeWindow,
)

ZERO = Decimal("0")

# Anything with a `date` attribute in epoch milliseconds
DatedT = TypeVar("DatedT")


def _signed_amount(transaction: Transaction) -> Decimal:
    if transaction.type == TransactionType.GIVE:
        return transaction.amount
    return -transaction.amount


def compute_balance(transactions: Iterable[Transaction]) -> Decimal:
    """
    Signed balance of one customer's entries.

    Order does not matter. An empty list is settled (zero). Amount signs
    are not checked here; entries are validated before they are stored.
    """
    return sum((_signed_amount(tx) for tx in transactions), ZERO)


def customer_balance(transactions: Iterable[Transaction]) -> Balance:
    """Tagged form of `compute_balance`."""
    return Balance.from_net(compute_balance(transactions))


def filter_by_customer(
    transactions: Iterable[Transaction],
    customer_id: str,
) -> list[Transaction]:
    """Entries whose customer_id matches exactly."""
    return [tx for tx in transactions if tx.customer_id == customer_id]


def sort_by_date_descending(records: Iterable[DatedT]) -> list[DatedT]:
    """
    Newest first.

    `sorted` is stable with reverse=True, so records sharing a timestamp
    keep their input order.
    """
    return sorted(records, key=lambda record: record.date, reverse=True)


def balances_by_customer(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Signed balance per customer_id in a single pass."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for tx in transactions:
        totals[tx.customer_id] += _signed_amount(tx)
    return dict(totals)


def customers_with_balances(
    customers: Sequence[Customer],
    transactions: Iterable[Transaction],
) -> list[CustomerBalance]:
    """Every customer, in input order, with its balance."""
    totals = balances_by_customer(transactions)
    return [
        CustomerBalance(
            customer=customer,
            balance=Balance.from_net(totals.get(customer.id, ZERO)),
        )
        for customer in customers
    ]


def aggregate_dashboard(
    customers: Sequence[Customer],
    transactions: Sequence[Transaction],
    now: Optional[datetime] = None,
) -> DashboardStats:
    """
    Shop-wide totals.

    Receivable sums the positive balances, payable sums the magnitudes of
    the negative ones; settled customers count toward neither. Today's
    collection is every GET dated since local midnight, whoever it
    belongs to.
    """
    receivable = ZERO
    payable = ZERO

    for entry in customers_with_balances(customers, transactions):
        net = entry.balance.net
        if net > 0:
            receivable += net
        elif net < 0:
            payable += -net

    todays = filter_by_time_window(transactions, TimeWindow.TODAY, now=now)
    today_collection = sum(
        (tx.amount for tx in todays if tx.type == TransactionType.GET),
        ZERO,
    )

    return DashboardStats(
        total_receivable=receivable,
        total_payable=payable,
        net_balance=receivable - payable,
        today_collection=today_collection,
    )


def outstanding_list(
    customers: Sequence[Customer],
    transactions: Iterable[Transaction],
) -> list[CustomerBalance]:
    """
    Customers with a non-zero balance, largest exposure first.

    Ties keep the input order of `customers`.
    """
    open_accounts = [
        entry for entry in customers_with_balances(customers, transactions)
        if not entry.balance.is_settled
    ]
    return sorted(open_accounts, key=lambda entry: entry.balance.amount, reverse=True)


def search_customers(
    customers: Iterable[Customer],
    term: str,
) -> list[Customer]:
    """Case-insensitive name match or phone substring match."""
    term = term.strip()
    if not term:
        return list(customers)
    needle = term.lower()
    return [
        c for c in customers
        if needle in c.name.lower() or term in c.phone
    ]
