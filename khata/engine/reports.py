"""
Report Builders

Turns record snapshots into the three report tables (Day Book,
Outstanding, Expenses) plus the dashboard activity list and the expense
breakdown. Builders only filter, sort and label; rendering to a document
is left to the caller.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from khata.engine.balance import outstanding_list, sort_by_date_descending
from khata.engine.windows import filter_by_time_window
from khata.models.ledger import (
    Customer,
    Expense,
    ExpenseCategory,
    Transaction,
    TransactionType,
)
from khata.models.reports import (
    BalanceStatus,
    CategoryTotal,
    DayBookRow,
    ExpenseRow,
    ExpenseSummary,
    OutstandingRow,
    Report,
    ReportTab,
    TimeWindow,
)

UNKNOWN_CUSTOMER = "Unknown"
EMPTY_NOTE = "-"

TYPE_LABELS = {
    TransactionType.GIVE: "Given (Dr)",
    TransactionType.GET: "Got (Cr)",
}

STATUS_LABELS = {
    BalanceStatus.RECEIVABLE: "To Receive",
    BalanceStatus.PAYABLE: "To Pay",
}

REPORT_TITLES = {
    ReportTab.DAY_BOOK: "Day Book / Transaction History",
    ReportTab.OUTSTANDING: "Outstanding Balances",
    ReportTab.EXPENSES: "Expense Report",
}

REPORT_HEADERS = {
    ReportTab.DAY_BOOK: ["Date", "Customer", "Type", "Amount", "Note"],
    ReportTab.OUTSTANDING: ["Customer", "Phone", "Status", "Amount"],
    ReportTab.EXPENSES: ["Date", "Category", "Amount", "Note"],
}


def _day_book_rows(
    transactions: Iterable[Transaction],
    customers: Sequence[Customer],
) -> list[DayBookRow]:
    names = {c.id: c.name for c in customers}
    return [
        DayBookRow(
            date=tx.date,
            customer_name=names.get(tx.customer_id, UNKNOWN_CUSTOMER),
            type=tx.type,
            type_label=TYPE_LABELS[tx.type],
            amount=tx.amount,
            note=tx.notes or EMPTY_NOTE,
        )
        for tx in transactions
    ]


def build_day_book(
    transactions: Iterable[Transaction],
    customers: Sequence[Customer],
    window: Union[TimeWindow, str] = TimeWindow.ALL,
    now: Optional[datetime] = None,
) -> Report:
    """All entries in the window, newest first."""
    window = TimeWindow(window)
    selected = sort_by_date_descending(
        filter_by_time_window(transactions, window, now=now)
    )
    return Report(
        tab=ReportTab.DAY_BOOK,
        title=REPORT_TITLES[ReportTab.DAY_BOOK],
        headers=REPORT_HEADERS[ReportTab.DAY_BOOK],
        rows=_day_book_rows(selected, customers),
        window=window,
    )


def build_outstanding_report(
    customers: Sequence[Customer],
    transactions: Iterable[Transaction],
) -> Report:
    """Open balances, largest first. Balances are lifetime, not windowed."""
    rows = [
        OutstandingRow(
            customer_name=entry.customer.name,
            phone=entry.customer.phone,
            status=entry.balance.status,
            status_label=STATUS_LABELS[entry.balance.status],
            amount=entry.balance.amount,
        )
        for entry in outstanding_list(customers, transactions)
    ]
    return Report(
        tab=ReportTab.OUTSTANDING,
        title=REPORT_TITLES[ReportTab.OUTSTANDING],
        headers=REPORT_HEADERS[ReportTab.OUTSTANDING],
        rows=rows,
    )


def build_expense_report(
    expenses: Iterable[Expense],
    window: Union[TimeWindow, str] = TimeWindow.ALL,
    now: Optional[datetime] = None,
) -> Report:
    """Expenses in the window, newest first."""
    window = TimeWindow(window)
    selected = sort_by_date_descending(
        filter_by_time_window(expenses, window, now=now)
    )
    rows = [
        ExpenseRow(
            date=exp.date,
            category=exp.category.value,
            amount=exp.amount,
            note=exp.notes or EMPTY_NOTE,
        )
        for exp in selected
    ]
    return Report(
        tab=ReportTab.EXPENSES,
        title=REPORT_TITLES[ReportTab.EXPENSES],
        headers=REPORT_HEADERS[ReportTab.EXPENSES],
        rows=rows,
        window=window,
    )


def build_report(
    tab: Union[ReportTab, str],
    customers: Sequence[Customer],
    transactions: Sequence[Transaction],
    expenses: Sequence[Expense],
    window: Union[TimeWindow, str] = TimeWindow.ALL,
    now: Optional[datetime] = None,
) -> Report:
    """Dispatch to the builder for `tab`."""
    tab = ReportTab(tab)
    if tab == ReportTab.DAY_BOOK:
        return build_day_book(transactions, customers, window, now=now)
    if tab == ReportTab.OUTSTANDING:
        return build_outstanding_report(customers, transactions)
    return build_expense_report(expenses, window, now=now)


def recent_transactions(
    customers: Sequence[Customer],
    transactions: Iterable[Transaction],
    limit: int = 5,
) -> list[DayBookRow]:
    """The newest `limit` entries with customer names resolved."""
    newest = sort_by_date_descending(transactions)[:limit]
    return _day_book_rows(newest, customers)


def expense_summary(expenses: Iterable[Expense]) -> ExpenseSummary:
    """
    Total spend and per-category totals.

    Categories follow their declared order; empty ones are left out.
    """
    totals = {category: Decimal("0") for category in ExpenseCategory}
    for exp in expenses:
        totals[exp.category] += exp.amount

    return ExpenseSummary(
        total=sum(totals.values(), Decimal("0")),
        by_category=[
            CategoryTotal(category=category, amount=amount)
            for category, amount in totals.items()
            if amount > 0
        ],
    )
