"""
Entry Validation

DESIGN DECISION: Form input is validated before it reaches the ledger.
The balance engine assumes every stored amount is positive and never
re-checks it, so this is the one place that guards the invariant.

Two kinds of findings:
- ERRORS block the write (missing name, non-numeric or non-positive amount)
- WARNINGS are shown but do not block (very large amount, future date)

IMPORTANT: Validation NEVER silently fixes input.
It reports problems for the shopkeeper to correct.
"""

import re
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from khata.config import LedgerSettings, get_settings
from khata.models.ledger import (
    ExpenseCategory,
    Language,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from khata.utils.dates import to_millis

_PHONE_CHARS = re.compile(r"^[0-9+\-\s]*$")
_CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}$")

MAX_NAME_LENGTH = 120
MAX_PHONE_LENGTH = 20
MAX_NOTE_LENGTH = 500
MAX_ADDRESS_LENGTH = 500


class EntryValidator:
    """Validates ledger, expense, customer and shop form input."""

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def _amount_issues(self, raw: Any) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        """
        Parse an amount.

        Returns: (parsed_amount_or_None, list_of_issues)
        """
        issues = []

        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter the amount given or received",
            ))
            return None, issues

        if isinstance(raw, bool):
            raw = str(raw)

        try:
            amount = Decimal(raw.strip() if isinstance(raw, str) else str(raw))
        except InvalidOperation:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_a_number",
                message=f"Amount '{raw}' is not a number",
                severity="error",
                suggested_fix="Use digits only, e.g. 500 or 249.50",
            ))
            return None, issues

        if not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_a_number",
                message="Amount must be a finite number",
                severity="error",
            ))
            return None, issues

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Pick GIVE or GET for the direction; the amount itself is always positive",
            ))
            return None, issues

        max_amount = Decimal(str(self._settings.max_entry_amount))
        if amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return amount, issues

    def _date_issues(
        self,
        entry_millis: Optional[int],
        now: Optional[datetime],
    ) -> list[ValidationIssue]:
        if entry_millis is None:
            return []

        now = now or datetime.now()
        tolerance = timedelta(days=self._settings.future_date_tolerance_days)
        if entry_millis > to_millis(now + tolerance):
            return [ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Entry date is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            )]
        return []

    def validate_amount(self, raw: Any) -> ValidationResult:
        """Validate an amount typed into a form."""
        amount, issues = self._amount_issues(raw)
        return ValidationResult.from_issues(issues, amount=amount)

    def _entry_issues(
        self,
        raw_amount: Any,
        entry_millis: Optional[int],
        now: Optional[datetime],
        notes: Optional[str],
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        amount, issues = self._amount_issues(raw_amount)
        issues.extend(self._date_issues(entry_millis, now))
        if notes and len(notes.strip()) > MAX_NOTE_LENGTH:
            issues.append(ValidationIssue(
                field="notes",
                issue_type="too_long",
                message=f"Note is longer than {MAX_NOTE_LENGTH} characters",
                severity="error",
            ))
        return amount, issues

    def validate_entry(
        self,
        raw_amount: Any,
        entry_millis: Optional[int] = None,
        now: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> ValidationResult:
        """Validate the parts shared by GIVE/GET entries and expenses: amount, date and note."""
        amount, issues = self._entry_issues(raw_amount, entry_millis, now, notes)
        return ValidationResult.from_issues(issues, amount=amount)

    def validate_transaction(
        self,
        transaction_type: Any,
        raw_amount: Any,
        entry_millis: Optional[int] = None,
        now: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> ValidationResult:
        """Validate a GIVE/GET entry."""
        amount, issues = self._entry_issues(raw_amount, entry_millis, now, notes)
        issues.extend(self._choice_issues("type", "Entry type", transaction_type, TransactionType))
        return ValidationResult.from_issues(issues, amount=amount)

    def validate_expense(
        self,
        category: Any,
        raw_amount: Any,
        entry_millis: Optional[int] = None,
        now: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> ValidationResult:
        """Validate an expense."""
        amount, issues = self._entry_issues(raw_amount, entry_millis, now, notes)
        issues.extend(self._choice_issues("category", "Expense category", category, ExpenseCategory))
        return ValidationResult.from_issues(issues, amount=amount)

    def _choice_issues(
        self,
        field: str,
        label: str,
        value: Any,
        choices: type[Enum],
    ) -> list[ValidationIssue]:
        allowed = ", ".join(choice.value for choice in choices)
        try:
            choices(value)
        except ValueError:
            return [ValidationIssue(
                field=field,
                issue_type="invalid_choice",
                message=f"{label} '{value}' is not recognised",
                severity="error",
                suggested_fix=f"Choose one of: {allowed}",
            )]
        return []

    def _name_issues(self, field: str, label: str, value: Optional[str]) -> list[ValidationIssue]:
        if not value or not value.strip():
            return [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
                severity="error",
            )]
        if len(value.strip()) > MAX_NAME_LENGTH:
            return [ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{label} is longer than {MAX_NAME_LENGTH} characters",
                severity="error",
            )]
        return []

    def _phone_issues(
        self,
        phone: Optional[str],
        field: str = "phone",
        label: str = "Phone number",
    ) -> list[ValidationIssue]:
        phone = (phone or "").strip()
        if not phone:
            return []
        if len(phone) > MAX_PHONE_LENGTH:
            return [ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{label} is longer than {MAX_PHONE_LENGTH} characters",
                severity="error",
            )]
        if not _PHONE_CHARS.match(phone):
            return [ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} contains unexpected characters",
                severity="warning",
                suggested_fix="Use digits, spaces, '+' or '-' only",
            )]
        return []

    def _address_issues(self, address: Optional[str]) -> list[ValidationIssue]:
        if address and len(address.strip()) > MAX_ADDRESS_LENGTH:
            return [ValidationIssue(
                field="address",
                issue_type="too_long",
                message=f"Address is longer than {MAX_ADDRESS_LENGTH} characters",
                severity="error",
            )]
        return []

    def _currency_issues(self, currency: Optional[str]) -> list[ValidationIssue]:
        # Blank means the configured default
        if not currency or not currency.strip():
            return []
        if not _CURRENCY_CODE.match(currency.strip()):
            return [ValidationIssue(
                field="currency",
                issue_type="invalid_format",
                message=f"Currency '{currency}' is not a 3-letter code",
                severity="error",
                suggested_fix="Use an ISO code such as INR or USD",
            )]
        return []

    def validate_customer(
        self,
        name: Optional[str],
        phone: Optional[str] = "",
        address: Optional[str] = None,
    ) -> ValidationResult:
        """Validate the add-customer form."""
        issues = self._name_issues("name", "Customer name", name)
        issues.extend(self._phone_issues(phone))
        issues.extend(self._address_issues(address))
        return ValidationResult.from_issues(issues)

    def validate_shop_profile(
        self,
        name: Optional[str],
        owner_name: Optional[str],
        phone: Optional[str] = "",
        address: Optional[str] = "",
        phone_pe_number: Optional[str] = None,
        currency: Optional[str] = None,
        language: Any = Language.ENGLISH,
    ) -> ValidationResult:
        """Validate the shop setup / settings form."""
        issues = self._name_issues("name", "Shop name", name)
        issues.extend(self._name_issues("owner_name", "Owner name", owner_name))
        issues.extend(self._phone_issues(phone))
        issues.extend(self._phone_issues(phone_pe_number, "phone_pe_number", "PhonePe / UPI number"))
        issues.extend(self._address_issues(address))
        issues.extend(self._currency_issues(currency))
        issues.extend(self._choice_issues("language", "Language", language, Language))
        return ValidationResult.from_issues(issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One message block suitable for showing under a form."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
