"""
Main Orchestrator for Khata

This module ties together all the components and defines the
user-level flows:
1. Shop (set up profile, preferences)
2. Ledger (customers, GIVE/GET entries, balances, reminders)
3. Expenses (record, list, breakdown)
4. Reports (Day Book, Outstanding, Expenses; CSV export)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage without passing validation
- A storage failure becomes a failed OperationResult, never a crash
- Every write is audited
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

from khata.audit import AuditLogger, configure_logging
from khata.config import LedgerSettings, get_settings
from khata.engine import (
    aggregate_dashboard,
    build_payment_reminder,
    build_report,
    customer_balance,
    customers_with_balances,
    expense_summary,
    recent_transactions,
    search_customers,
    sort_by_date_descending,
)
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
    ValidationResult,
)
from khata.models.reports import (
    CustomerBalance,
    CustomerLedger,
    DashboardStats,
    DayBookRow,
    ExpenseSummary,
    PaymentReminder,
    Report,
    ReportTab,
    TimeWindow,
)
from khata.services.export_csv import export_report_csv
from khata.services.repositories import (
    AppSettingsRepository,
    CustomerRepository,
    ExpenseRepository,
    ShopProfileRepository,
    TransactionRepository,
)
from khata.services.storage import (
    DuplicateRecordError,
    JsonFileRecordStore,
    RecordStoreInterface,
    StorageError,
)
from khata.utils.dates import entry_timestamp, now_millis
from khata.utils.ids import generate_id
from khata.validation import EntryValidator


def _issues_for_log(result: ValidationResult) -> list[dict]:
    return [
        {"field": i.field, "type": i.issue_type, "message": i.message}
        for i in result.issues
    ]


class _Flow:
    """Shared plumbing: rejection and storage-failure results."""

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or EntryValidator()

    def _rejected(self, entity_type: str, validation: ValidationResult) -> OperationResult:
        self._audit_logger.log_entry_rejected(
            entity_type=entity_type,
            issues=_issues_for_log(validation),
        )
        return OperationResult(
            success=False,
            message=self._validator.get_user_friendly_summary(validation),
            validation=validation,
        )

    def _storage_failed(self, operation: str, error: StorageError) -> OperationResult:
        self._audit_logger.log_storage_error(operation=operation, error_message=str(error))
        return OperationResult(
            success=False,
            message=f"Could not save. Your data was not changed. ({error})",
        )


class ShopFlow(_Flow):
    """
    Orchestrates shop setup and preferences.

    The shop profile doubles as the "is this khata set up" sentinel.
    """

    def __init__(
        self,
        shops: ShopProfileRepository,
        preferences: AppSettingsRepository,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        super().__init__(audit_logger, validator)
        self._shops = shops
        self._preferences = preferences
        self._settings = settings or get_settings().ledger

    def is_setup(self) -> bool:
        return self._shops.is_setup()

    def get_profile(self) -> Optional[ShopProfile]:
        return self._shops.get()

    def setup_shop(
        self,
        name: str,
        owner_name: str,
        phone: str = "",
        address: str = "",
        phone_pe_number: Optional[str] = None,
        currency: Optional[str] = None,
        language: Union[Language, str] = Language.ENGLISH,
    ) -> OperationResult:
        """Create or replace the shop profile."""
        validation = self._validator.validate_shop_profile(
            name,
            owner_name,
            phone,
            address=address,
            phone_pe_number=phone_pe_number,
            currency=currency,
            language=language,
        )
        if not validation.is_valid:
            return self._rejected("shop_profile", validation)

        is_new = not self._shops.is_setup()
        profile = ShopProfile(
            name=name,
            owner_name=owner_name,
            phone=phone or "",
            phone_pe_number=phone_pe_number or None,
            address=address or "",
            currency=((currency or "").strip() or self._settings.default_currency).upper(),
            language=Language(language),
        )

        try:
            self._shops.save(profile)
        except StorageError as e:
            return self._storage_failed("save_shop_profile", e)

        self._audit_logger.log_shop_set_up(shop_name=profile.name, is_new=is_new)
        return OperationResult(
            success=True,
            message="Shop set up" if is_new else "Shop profile updated",
            validation=validation,
        )

    update_profile = setup_shop

    def get_preferences(self) -> AppSettings:
        return self._preferences.get()

    def save_preferences(self, preferences: AppSettings) -> OperationResult:
        try:
            self._preferences.save(preferences)
        except StorageError as e:
            return self._storage_failed("save_preferences", e)

        self._audit_logger.log_preferences_updated(
            theme=preferences.theme.value,
            sound_enabled=preferences.sound_enabled,
        )
        return OperationResult(success=True, message="Preferences saved")

    def toggle_theme(self) -> OperationResult:
        current = self._preferences.get()
        theme = Theme.DARK if current.theme == Theme.LIGHT else Theme.LIGHT
        return self.save_preferences(current.model_copy(update={"theme": theme}))

    def toggle_sound(self) -> OperationResult:
        current = self._preferences.get()
        return self.save_preferences(
            current.model_copy(update={"sound_enabled": not current.sound_enabled})
        )


class LedgerFlow(_Flow):
    """
    Orchestrates customers and their GIVE/GET entries.

    Flow for an entry:
    1. Customer must exist (missing customer → not-found result)
    2. Amount and date are validated
    3. Entry is inserted with a fresh id
    4. Balance is recomputed on the next read
    """

    def __init__(
        self,
        customers: CustomerRepository,
        transactions: TransactionRepository,
        shops: ShopProfileRepository,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        super().__init__(audit_logger, validator)
        self._customers = customers
        self._transactions = transactions
        self._shops = shops
        self._settings = settings or get_settings().ledger

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def add_customer(
        self,
        name: str,
        phone: str = "",
        address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        validation = self._validator.validate_customer(name, phone, address)
        if not validation.is_valid:
            return self._rejected("customer", validation)

        stamp = now_millis(now)
        customer = Customer(
            id=generate_id(),
            name=name,
            phone=phone or "",
            address=(address or "").strip() or None,
            created_at=stamp,
            updated_at=stamp,
        )

        try:
            self._customers.add(customer)
        except DuplicateRecordError as e:
            self._audit_logger.log_error(
                error_type="id_collision",
                error_message=str(e),
                details={"entity_type": "customer"},
            )
            return OperationResult(success=False, message="Could not add customer, please try again")
        except StorageError as e:
            return self._storage_failed("add_customer", e)

        self._audit_logger.log_customer_added(customer_id=customer.id, name=customer.name)
        return OperationResult(
            success=True,
            message=f"Customer added: {customer.name}",
            record_id=customer.id,
            validation=validation,
        )

    def delete_customer(self, customer_id: str) -> OperationResult:
        """
        Delete a customer record.

        Entries are left in place; reports show them against "Unknown".
        """
        try:
            deleted = self._customers.delete(customer_id)
        except StorageError as e:
            return self._storage_failed("delete_customer", e)

        if not deleted:
            self._audit_logger.log_customer_not_found(customer_id=customer_id)
            return OperationResult(success=False, message="Customer not found", record_id=customer_id)

        self._audit_logger.log_customer_deleted(customer_id=customer_id)
        return OperationResult(success=True, message="Customer deleted", record_id=customer_id)

    def list_customers(self, search: str = "") -> list[CustomerBalance]:
        """Customers matching `search`, each with its balance."""
        customers = search_customers(self._customers.list_all(), search)
        return customers_with_balances(customers, self._transactions.list_all())

    def open_ledger(self, customer_id: str) -> Optional[CustomerLedger]:
        """
        Everything the ledger screen needs, or None if the customer is gone.

        A missing customer is a navigation condition, not an error: the
        caller goes back to the customer list.
        """
        customer = self._customers.get(customer_id)
        if customer is None:
            self._audit_logger.log_customer_not_found(customer_id=customer_id)
            return None

        entries = self._transactions.by_customer(customer_id)
        return CustomerLedger(
            customer=customer,
            transactions=entries,
            balance=customer_balance(entries),
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def record_transaction(
        self,
        customer_id: str,
        transaction_type: Union[TransactionType, str],
        amount: Union[str, int, float],
        entry_date: Optional[date] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """Record a GIVE (credit) or GET (payment) entry."""
        if not self._customers.exists(customer_id):
            self._audit_logger.log_customer_not_found(customer_id=customer_id)
            return OperationResult(success=False, message="Customer not found", record_id=customer_id)

        stamp = entry_timestamp(entry_date, now)
        validation = self._validator.validate_transaction(
            transaction_type, amount, stamp, now, notes=notes
        )
        if not validation.is_valid:
            return self._rejected("transaction", validation)

        transaction = Transaction(
            id=generate_id(),
            customer_id=customer_id,
            type=TransactionType(transaction_type),
            amount=validation.amount,
            date=stamp,
            notes=(notes or "").strip() or None,
        )

        try:
            self._transactions.add(transaction)
        except DuplicateRecordError as e:
            self._audit_logger.log_error(
                error_type="id_collision",
                error_message=str(e),
                details={"entity_type": "transaction"},
            )
            return OperationResult(success=False, message="Could not save entry, please try again")
        except StorageError as e:
            return self._storage_failed("record_transaction", e)

        self._audit_logger.log_transaction_recorded(
            transaction_id=transaction.id,
            customer_id=customer_id,
            transaction_type=transaction.type.value,
            amount=str(transaction.amount),
        )
        return OperationResult(
            success=True,
            message="Entry saved",
            record_id=transaction.id,
            validation=validation,
        )

    def delete_transaction(self, transaction_id: str) -> OperationResult:
        try:
            deleted = self._transactions.delete(transaction_id)
        except StorageError as e:
            return self._storage_failed("delete_transaction", e)

        if not deleted:
            return OperationResult(success=False, message="Entry not found", record_id=transaction_id)

        self._audit_logger.log_transaction_deleted(transaction_id=transaction_id)
        return OperationResult(success=True, message="Entry deleted", record_id=transaction_id)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def dashboard(self, now: Optional[datetime] = None) -> DashboardStats:
        return aggregate_dashboard(
            self._customers.list_all(),
            self._transactions.list_all(),
            now=now,
        )

    def recent_activity(self, limit: Optional[int] = None) -> list[DayBookRow]:
        return recent_transactions(
            self._customers.list_all(),
            self._transactions.list_all(),
            limit=limit or self._settings.recent_transactions_limit,
        )

    def payment_reminder(
        self,
        customer_id: str,
        as_of: Optional[datetime] = None,
    ) -> Optional[PaymentReminder]:
        """Reminder for one customer; None if the customer or shop is missing."""
        ledger = self.open_ledger(customer_id)
        shop = self._shops.get()
        if ledger is None or shop is None:
            return None

        return build_payment_reminder(
            customer=ledger.customer,
            shop=shop,
            balance=ledger.balance,
            as_of=as_of,
            locale=self._settings.locale,
        )


class ExpenseFlow(_Flow):
    """Orchestrates shop expenses. Expenses are append-only."""

    def __init__(
        self,
        expenses: ExpenseRepository,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
    ):
        super().__init__(audit_logger, validator)
        self._expenses = expenses

    def record_expense(
        self,
        category: Union[ExpenseCategory, str],
        amount: Union[str, int, float],
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        stamp = now_millis(now)
        validation = self._validator.validate_expense(category, amount, stamp, now, notes=notes)
        if not validation.is_valid:
            return self._rejected("expense", validation)

        expense = Expense(
            id=generate_id(),
            category=ExpenseCategory(category),
            amount=validation.amount,
            date=stamp,
            notes=(notes or "").strip() or None,
        )

        try:
            self._expenses.add(expense)
        except DuplicateRecordError as e:
            self._audit_logger.log_error(
                error_type="id_collision",
                error_message=str(e),
                details={"entity_type": "expense"},
            )
            return OperationResult(success=False, message="Could not save expense, please try again")
        except StorageError as e:
            return self._storage_failed("record_expense", e)

        self._audit_logger.log_expense_recorded(
            expense_id=expense.id,
            category=expense.category.value,
            amount=str(expense.amount),
        )
        return OperationResult(
            success=True,
            message="Expense saved",
            record_id=expense.id,
            validation=validation,
        )

    def list_expenses(self) -> list[Expense]:
        """All expenses, newest first."""
        return sort_by_date_descending(self._expenses.list_all())

    def summary(self) -> ExpenseSummary:
        return expense_summary(self._expenses.list_all())


class ReportFlow:
    """Builds and exports the report tables."""

    def __init__(
        self,
        customers: CustomerRepository,
        transactions: TransactionRepository,
        expenses: ExpenseRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._customers = customers
        self._transactions = transactions
        self._expenses = expenses
        self._audit_logger = audit_logger or AuditLogger()

    def build(
        self,
        tab: Union[ReportTab, str] = ReportTab.DAY_BOOK,
        window: Union[TimeWindow, str] = TimeWindow.ALL,
        now: Optional[datetime] = None,
    ) -> Report:
        return build_report(
            tab,
            customers=self._customers.list_all(),
            transactions=self._transactions.list_all(),
            expenses=self._expenses.list_all(),
            window=window,
            now=now,
        )

    def export_csv(self, report: Report, output_path: Union[str, Path]) -> Path:
        """
        Write a report to CSV.

        Raises:
            OSError: If the file cannot be written
        """
        try:
            path = export_report_csv(report=report, output_path=Path(output_path))
        except OSError as e:
            self._audit_logger.log_error(
                error_type="report_export_failed",
                error_message=str(e),
                details={"tab": report.tab.value, "path": str(output_path)},
            )
            raise

        self._audit_logger.log_report_exported(
            tab=report.tab.value,
            path=str(path),
            row_count=len(report.rows),
        )
        return path


def create_app_components(
    data_dir: Optional[Union[str, Path]] = None,
    store: Optional[RecordStoreInterface] = None,
) -> tuple[ShopFlow, LedgerFlow, ExpenseFlow, ReportFlow]:
    """
    Factory function to create all application components.

    Args:
        data_dir: Directory for the JSON store (defaults to settings)
        store: Ready-made store, e.g. InMemoryRecordStore for tests.
               Takes precedence over data_dir.

    Returns:
        (shop_flow, ledger_flow, expense_flow, report_flow)
    """
    settings = get_settings()
    log_settings = settings.logging
    configure_logging(level=log_settings.level, json_logs=log_settings.json_logs)

    ledger_settings = settings.ledger
    store = store or JsonFileRecordStore(data_dir=data_dir)

    audit_logger = AuditLogger()
    validator = EntryValidator(ledger_settings)

    shops = ShopProfileRepository(store)
    preferences = AppSettingsRepository(store)
    customers = CustomerRepository(store)
    transactions = TransactionRepository(store)
    expenses = ExpenseRepository(store)

    shop_flow = ShopFlow(
        shops=shops,
        preferences=preferences,
        audit_logger=audit_logger,
        validator=validator,
        settings=ledger_settings,
    )
    ledger_flow = LedgerFlow(
        customers=customers,
        transactions=transactions,
        shops=shops,
        audit_logger=audit_logger,
        validator=validator,
        settings=ledger_settings,
    )
    expense_flow = ExpenseFlow(
        expenses=expenses,
        audit_logger=audit_logger,
        validator=validator,
    )
    report_flow = ReportFlow(
        customers=customers,
        transactions=transactions,
        expenses=expenses,
        audit_logger=audit_logger,
    )

    return shop_flow, ledger_flow, expense_flow, report_flow
