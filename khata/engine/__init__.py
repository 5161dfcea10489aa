"""
Ledger Accounting Engine

Pure computations over record snapshots: balances, dashboard totals,
time windows, outstanding lists, reports and payment reminders.
"""

from khata.engine.balance import (
    aggregate_dashboard,
    balances_by_customer,
    compute_balance,
    customer_balance,
    customers_with_balances,
    filter_by_customer,
    outstanding_list,
    search_customers,
    sort_by_date_descending,
)
from khata.engine.reminders import build_payment_reminder
from khata.engine.reports import (
    build_day_book,
    build_expense_report,
    build_outstanding_report,
    build_report,
    expense_summary,
    recent_transactions,
)
from khata.engine.windows import filter_by_time_window, window_start

__all__ = [
    "aggregate_dashboard",
    "balances_by_customer",
    "build_day_book",
    "build_expense_report",
    "build_outstanding_report",
    "build_payment_reminder",
    "build_report",
    "compute_balance",
    "customer_balance",
    "customers_with_balances",
    "expense_summary",
    "filter_by_customer",
    "filter_by_time_window",
    "outstanding_list",
    "recent_transactions",
    "search_customers",
    "sort_by_date_descending",
    "window_start",
]
