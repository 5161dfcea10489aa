"""
Derived Views

Everything in this module is computed from the stored records on read.
Nothing here is persisted.

DESIGN DECISION: The ledger sign convention lives in `Balance`.
A positive net means the customer owes the shop (receivable), a negative
net means the shop holds an advance (payable), zero is settled. Callers
read `status` instead of re-deriving meaning from a signed number.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from khata.models.ledger import (
    Customer,
    ExpenseCategory,
    Transaction,
    TransactionType,
)


class BalanceStatus(str, Enum):
    RECEIVABLE = "receivable"  # customer owes the shop
    PAYABLE = "payable"        # shop owes the customer (advance)
    SETTLED = "settled"


class Balance(BaseModel):
    """
    Tagged customer balance.

    `amount` is always a magnitude. Use `net` for the signed value.
    """
    model_config = ConfigDict(frozen=True)

    status: BalanceStatus
    amount: Decimal = Field(ge=0)

    @model_validator(mode='after')
    def validate_settled(self) -> 'Balance':
        """Settled iff the amount is zero."""
        if (self.status == BalanceStatus.SETTLED) != (self.amount == 0):
            raise ValueError(
                f"A {self.status.value} balance cannot have amount {self.amount}"
            )
        return self

    @classmethod
    def from_net(cls, net: Decimal) -> 'Balance':
        if net > 0:
            return cls(status=BalanceStatus.RECEIVABLE, amount=net)
        if net < 0:
            return cls(status=BalanceStatus.PAYABLE, amount=-net)
        return cls.settled()

    @classmethod
    def receivable(cls, amount: Decimal) -> 'Balance':
        return cls(status=BalanceStatus.RECEIVABLE, amount=amount)

    @classmethod
    def payable(cls, amount: Decimal) -> 'Balance':
        return cls(status=BalanceStatus.PAYABLE, amount=amount)

    @classmethod
    def settled(cls) -> 'Balance':
        return cls(status=BalanceStatus.SETTLED, amount=Decimal("0"))

    @property
    def net(self) -> Decimal:
        """Signed balance: positive = customer owes shop."""
        if self.status == BalanceStatus.PAYABLE:
            return -self.amount
        return self.amount

    @property
    def is_settled(self) -> bool:
        return self.status == BalanceStatus.SETTLED


class CustomerBalance(BaseModel):
    """A customer together with its current balance."""
    model_config = ConfigDict(frozen=True)

    customer: Customer
    balance: Balance


class CustomerLedger(BaseModel):
    """Everything the ledger screen of one customer needs."""
    model_config = ConfigDict(frozen=True)

    customer: Customer
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Entries for this customer, newest first"
    )
    balance: Balance


class DashboardStats(BaseModel):
    """Shop-wide totals for the home screen."""

    total_receivable: Decimal = Field(
        default=Decimal("0"),
        description="You will get"
    )
    total_payable: Decimal = Field(
        default=Decimal("0"),
        description="You will pay (advances)"
    )
    net_balance: Decimal = Decimal("0")
    today_collection: Decimal = Field(
        default=Decimal("0"),
        description="Payments received since local midnight"
    )


class TimeWindow(str, Enum):
    ALL = "all"
    TODAY = "today"
    THIS_MONTH = "this_month"


class ReportTab(str, Enum):
    DAY_BOOK = "daybook"
    OUTSTANDING = "outstanding"
    EXPENSES = "expenses"


# =============================================================================
# REPORT ROWS
# =============================================================================

class DayBookRow(BaseModel):
    date: int
    customer_name: str
    type: TransactionType
    type_label: str
    amount: Decimal
    note: str

    @property
    def cash_flow(self) -> Decimal:
        """Money into the shop: GET is positive, GIVE is negative."""
        return self.amount if self.type == TransactionType.GET else -self.amount

    def cells(self, date_format) -> list[str]:
        return [
            date_format(self.date),
            self.customer_name,
            self.type_label,
            _plain_amount(self.amount),
            self.note,
        ]


class OutstandingRow(BaseModel):
    customer_name: str
    phone: str
    status: BalanceStatus
    status_label: str
    amount: Decimal

    @property
    def net(self) -> Decimal:
        """Signed balance: positive = customer owes shop."""
        return -self.amount if self.status == BalanceStatus.PAYABLE else self.amount

    def cells(self, date_format) -> list[str]:
        return [
            self.customer_name,
            self.phone,
            self.status_label,
            _plain_amount(self.amount),
        ]


class ExpenseRow(BaseModel):
    date: int
    category: str
    amount: Decimal
    note: str

    def cells(self, date_format) -> list[str]:
        return [
            date_format(self.date),
            self.category,
            _plain_amount(self.amount),
            self.note,
        ]


ReportRow = Union[DayBookRow, OutstandingRow, ExpenseRow]

TOTAL_LABELS = {
    ReportTab.DAY_BOOK: "Net cash flow",
    ReportTab.OUTSTANDING: "Net outstanding",
    ReportTab.EXPENSES: "Total",
}


class Report(BaseModel):
    """
    A titled table ready for display or export.

    `total` depends on the tab:
    - Day Book: net cash flow, payments received minus credit given
    - Outstanding: receivable minus payable
    - Expenses: total spent
    """

    tab: ReportTab
    title: str
    headers: list[str]
    rows: list[ReportRow] = Field(default_factory=list)
    window: Optional[TimeWindow] = None

    @property
    def total(self) -> Decimal:
        if self.tab == ReportTab.DAY_BOOK:
            amounts = (row.cash_flow for row in self.rows)
        elif self.tab == ReportTab.OUTSTANDING:
            amounts = (row.net for row in self.rows)
        else:
            amounts = (row.amount for row in self.rows)
        return sum(amounts, Decimal("0"))

    @property
    def total_label(self) -> str:
        return TOTAL_LABELS[self.tab]


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    amount: Decimal


class ExpenseSummary(BaseModel):
    total: Decimal = Decimal("0")
    by_category: list[CategoryTotal] = Field(default_factory=list)


class PaymentReminder(BaseModel):
    """A ready-to-send payment reminder for one customer."""

    customer_id: str
    message: str
    whatsapp_url: str
    status_label: str


def _plain_amount(amount: Decimal) -> str:
    """Amount as it appears in exported cells: no grouping, no symbol."""
    if amount == amount.to_integral_value():
        return str(int(amount))
    return str(amount.normalize())
