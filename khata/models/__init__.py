"""
Data Models Package

This package contains all Pydantic models used in Khata.
Stored records, derived views and audit events all live here.
"""

from khata.models.ledger import (
    AppSettings,
    Customer,
    Expense,
    ExpenseCategory,
    Language,
    OperationResult,
    ShopProfile,
    Theme,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from khata.models.reports import (
    Balance,
    BalanceStatus,
    CategoryTotal,
    CustomerBalance,
    CustomerLedger,
    DashboardStats,
    DayBookRow,
    ExpenseRow,
    ExpenseSummary,
    OutstandingRow,
    PaymentReminder,
    Report,
    ReportTab,
    TimeWindow,
)
from khata.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Stored records
    "AppSettings",
    "Customer",
    "Expense",
    "ExpenseCategory",
    "Language",
    "ShopProfile",
    "Theme",
    "Transaction",
    "TransactionType",
    # Validation / results
    "OperationResult",
    "ValidationIssue",
    "ValidationResult",
    # Derived views
    "Balance",
    "BalanceStatus",
    "CategoryTotal",
    "CustomerBalance",
    "CustomerLedger",
    "DashboardStats",
    "DayBookRow",
    "ExpenseRow",
    "ExpenseSummary",
    "OutstandingRow",
    "PaymentReminder",
    "Report",
    "ReportTab",
    "TimeWindow",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
