"""
Core Data Models for Khata

These models define the schemas for every record the shop keeps.
They are designed to:
1. Enforce the ledger invariants at construction (positive amounts, known tags)
2. Serialize to the same camelCase JSON the local store has always used
3. Be immutable snapshots - a change produces a new record

DESIGN DECISION: Amounts are Decimal in Python and plain JSON numbers on
disk. Timestamps are epoch milliseconds so the stored data stays
compatible with existing khata files.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
)
from pydantic.alias_generators import to_camel


def _amount_to_json(value: Decimal) -> int | float:
    """Whole amounts are stored as ints, fractional ones as floats."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


_AMOUNT_JSON = PlainSerializer(_amount_to_json, return_type=int | float, when_used="json")

# Strictly positive money amount
Amount = Annotated[Decimal, Field(gt=0), _AMOUNT_JSON]

# Zero or more, used for limits
NonNegativeAmount = Annotated[Decimal, Field(ge=0), _AMOUNT_JSON]

# Epoch milliseconds
Timestamp = Annotated[int, Field(ge=0)]


class RecordModel(BaseModel):
    """Base for stored records: frozen, camelCase on disk."""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_storage(self) -> dict:
        """Dump in the on-disk JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of a ledger entry.

    GIVE increases what the customer owes the shop.
    GET decreases it.
    """
    GIVE = "GIVE"  # You gave (credit / udhar)
    GET = "GET"    # You got (payment)


class ExpenseCategory(str, Enum):
    """Shop expense categories."""
    INVENTORY = "Inventory"
    RENT_AND_BILLS = "Rent & Bills"
    TRANSPORT = "Transport"
    STAFF_AND_FOOD = "Staff & Food"
    OTHER = "Other"


class Language(str, Enum):
    ENGLISH = "en"
    HINDI = "hi"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# =============================================================================
# STORED RECORDS
# =============================================================================

class ShopProfile(RecordModel):
    """
    The shop this khata belongs to.

    Singleton. Its presence means the shop has been set up.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=120,
        description="Shop name"
    )
    owner_name: str = Field(
        ...,
        min_length=1,
        max_length=120,
        description="Owner name"
    )
    phone: str = Field(
        default="",
        max_length=20,
        description="Shop contact number"
    )
    phone_pe_number: Optional[str] = Field(
        default=None,
        max_length=20,
        description="UPI number customers pay to"
    )
    address: str = Field(
        default="",
        max_length=500
    )
    currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="ISO currency code"
    )
    language: Language = Language.ENGLISH


class Customer(RecordModel):
    """A customer account in the khata."""

    id: str = Field(
        ...,
        min_length=1,
        description="Unique customer ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=120,
        description="Customer name"
    )
    phone: str = Field(
        default="",
        max_length=20,
        description="Contact number (may be empty)"
    )
    address: Optional[str] = Field(
        default=None,
        max_length=500
    )
    credit_limit: Optional[NonNegativeAmount] = Field(
        default=None,
        description="Informational credit limit"
    )
    photo_url: Optional[str] = None
    created_at: Timestamp
    updated_at: Timestamp


class Transaction(RecordModel):
    """
    A single ledger entry against one customer.

    The date is user-editable and need not follow creation order.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique entry ID"
    )
    customer_id: str = Field(
        ...,
        min_length=1,
        description="ID of the customer this entry belongs to"
    )
    type: TransactionType
    amount: Amount
    date: Timestamp
    notes: Optional[str] = Field(
        default=None,
        max_length=500
    )
    image_url: Optional[str] = None


class Expense(RecordModel):
    """A shop expense. Append-only."""

    id: str = Field(
        ...,
        min_length=1,
        description="Unique expense ID"
    )
    category: ExpenseCategory
    amount: Amount
    date: Timestamp
    notes: Optional[str] = Field(
        default=None,
        max_length=500
    )


class AppSettings(RecordModel):
    """User preferences. Singleton."""

    theme: Theme = Theme.LIGHT
    sound_enabled: bool = True


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_a_number', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one form submission.

    Errors block the write. Warnings are shown but do not block.
    """

    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    # Parsed amount, when the submission carried one
    amount: Optional[Decimal] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @classmethod
    def from_issues(
        cls,
        issues: list[ValidationIssue],
        amount: Optional[Decimal] = None,
    ) -> "ValidationResult":
        return cls(
            is_valid=not any(i.severity == "error" for i in issues),
            issues=issues,
            warnings=[i.message for i in issues if i.severity == "warning"],
            amount=amount,
        )


class OperationResult(BaseModel):
    """Outcome of a user-level write (add customer, record entry, ...)."""

    success: bool
    message: str
    record_id: Optional[str] = None
    validation: Optional[ValidationResult] = None
