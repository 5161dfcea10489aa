"""
Tests for the user-level flows

Flows run against an in-memory store with a mocked audit logger, so
each test can check both the stored outcome and what was audited.
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from khata.models import (
    BalanceStatus,
    ExpenseCategory,
    ReportTab,
    Theme,
    TimeWindow,
    TransactionType,
)
from khata.orchestrator import (
    ExpenseFlow,
    LedgerFlow,
    ReportFlow,
    ShopFlow,
    create_app_components,
)
from khata.services.repositories import (
    AppSettingsRepository,
    CustomerRepository,
    ExpenseRepository,
    ShopProfileRepository,
    TransactionRepository,
)
from khata.services.storage import InMemoryRecordStore, RecordKey, StorageReadError, StorageWriteError
from khata.utils.dates import start_of_day, to_millis
from khata.validation import EntryValidator


class BrokenWriteStore(InMemoryRecordStore):
    def write(self, key, value):
        raise StorageWriteError("disk full")


class UnreadableEntriesStore(InMemoryRecordStore):
    def read(self, key):
        if RecordKey(key) == RecordKey.TRANSACTIONS:
            raise StorageReadError("truncated file")
        return super().read(key)


@pytest.fixture
def validator(ledger_settings):
    return EntryValidator(ledger_settings)


@pytest.fixture
def shop_flow(store, audit_logger, validator, ledger_settings):
    return ShopFlow(
        shops=ShopProfileRepository(store),
        preferences=AppSettingsRepository(store),
        audit_logger=audit_logger,
        validator=validator,
        settings=ledger_settings,
    )


@pytest.fixture
def ledger_flow(store, audit_logger, validator, ledger_settings):
    return LedgerFlow(
        customers=CustomerRepository(store),
        transactions=TransactionRepository(store),
        shops=ShopProfileRepository(store),
        audit_logger=audit_logger,
        validator=validator,
        settings=ledger_settings,
    )


@pytest.fixture
def expense_flow(store, audit_logger, validator):
    return ExpenseFlow(
        expenses=ExpenseRepository(store),
        audit_logger=audit_logger,
        validator=validator,
    )


@pytest.fixture
def report_flow(store, audit_logger):
    return ReportFlow(
        customers=CustomerRepository(store),
        transactions=TransactionRepository(store),
        expenses=ExpenseRepository(store),
        audit_logger=audit_logger,
    )


@pytest.fixture
def customer_id(ledger_flow, now):
    return ledger_flow.add_customer(name="Ramesh", phone="+91 98765 43210", now=now).record_id


class TestShopFlow:
    """Tests for shop setup and preferences."""

    def test_first_setup(self, shop_flow, audit_logger):
        """Test that setup creates the profile and audits it as new."""
        assert not shop_flow.is_setup()

        result = shop_flow.setup_shop(name="Sharma Store", owner_name="Anil", phone="9000000001")

        assert result.success
        assert shop_flow.is_setup()
        assert shop_flow.get_profile().currency == "INR"
        audit_logger.log_shop_set_up.assert_called_once_with(shop_name="Sharma Store", is_new=True)

    def test_update_profile(self, shop_flow, audit_logger):
        """Test that a second save is an update."""
        shop_flow.setup_shop(name="Sharma Store", owner_name="Anil")
        result = shop_flow.update_profile(name="Sharma General Store", owner_name="Anil", phone_pe_number="9000000002")

        assert result.message == "Shop profile updated"
        profile = shop_flow.get_profile()
        assert profile.name == "Sharma General Store"
        assert profile.phone_pe_number == "9000000002"
        audit_logger.log_shop_set_up.assert_called_with(shop_name="Sharma General Store", is_new=False)

    def test_setup_rejected(self, shop_flow, audit_logger):
        """Test that a missing owner name blocks setup."""
        result = shop_flow.setup_shop(name="Sharma Store", owner_name="")

        assert not result.success
        assert result.validation.has_errors
        assert "Owner name is required" in result.message
        assert not shop_flow.is_setup()
        audit_logger.log_entry_rejected.assert_called_once()

    @pytest.mark.parametrize("kwargs", [
        {"address": "a" * 501},
        {"phone_pe_number": "9" * 21},
        {"currency": "RUPEES"},
        {"language": "fr"},
    ])
    def test_invalid_shop_fields_rejected(self, shop_flow, audit_logger, kwargs):
        """Test that bad optional fields come back as a rejected result."""
        result = shop_flow.setup_shop(name="Sharma Store", owner_name="Anil", **kwargs)

        assert not result.success
        assert result.validation.has_errors
        assert not shop_flow.is_setup()
        audit_logger.log_entry_rejected.assert_called_once()

    def test_blank_currency_uses_default(self, shop_flow, ledger_settings):
        """Test that a blank currency falls back to the configured one."""
        assert shop_flow.setup_shop(name="Sharma Store", owner_name="Anil", currency="  ").success
        assert shop_flow.get_profile().currency == ledger_settings.default_currency

    def test_toggles(self, shop_flow, store):
        """Test theme and sound toggles persist."""
        assert shop_flow.toggle_theme().success
        assert shop_flow.get_preferences().theme == Theme.DARK
        shop_flow.toggle_theme()
        assert shop_flow.get_preferences().theme == Theme.LIGHT

        shop_flow.toggle_sound()
        assert shop_flow.get_preferences().sound_enabled is False
        assert store.read(RecordKey.APP_SETTINGS) == {"theme": "light", "soundEnabled": False}


class TestLedgerFlowCustomers:
    """Tests for customer management."""

    def test_add_customer(self, ledger_flow, audit_logger, now):
        """Test that a customer is created with timestamps."""
        result = ledger_flow.add_customer(name="Ramesh", phone="98765", now=now)

        assert result.success
        ledger = ledger_flow.open_ledger(result.record_id)
        assert ledger.customer.created_at == to_millis(now)
        assert ledger.balance.is_settled
        audit_logger.log_customer_added.assert_called_once_with(customer_id=result.record_id, name="Ramesh")

    def test_add_customer_requires_name(self, ledger_flow, store):
        """Test that a nameless customer is rejected and nothing is stored."""
        result = ledger_flow.add_customer(name="   ")
        assert not result.success
        assert store.read(RecordKey.CUSTOMERS) is None

    def test_long_address_rejected(self, ledger_flow, store):
        """Test that an over-long address is rejected instead of raising."""
        result = ledger_flow.add_customer(name="Ramesh", address="a" * 501)
        assert not result.success
        assert store.read(RecordKey.CUSTOMERS) is None

    def test_id_collision(self, ledger_flow, audit_logger, monkeypatch):
        """Test that a colliding id is refused instead of overwriting."""
        monkeypatch.setattr("khata.orchestrator.generate_id", lambda: "same-id")
        assert ledger_flow.add_customer(name="Ramesh").success

        result = ledger_flow.add_customer(name="Suresh")

        assert not result.success
        assert [c.customer.name for c in ledger_flow.list_customers()] == ["Ramesh"]
        audit_logger.log_error.assert_called_once()

    def test_list_customers_with_search(self, ledger_flow, customer_id):
        """Test search over name and phone."""
        ledger_flow.add_customer(name="Suresh", phone="9123")
        assert [c.customer.name for c in ledger_flow.list_customers("rame")] == ["Ramesh"]
        assert [c.customer.name for c in ledger_flow.list_customers("9123")] == ["Suresh"]
        assert len(ledger_flow.list_customers()) == 2

    def test_open_missing_ledger(self, ledger_flow, audit_logger):
        """Test that a missing customer yields None, not an error."""
        assert ledger_flow.open_ledger("gone") is None
        audit_logger.log_customer_not_found.assert_called_once_with(customer_id="gone")

    def test_delete_customer_keeps_entries(self, ledger_flow, report_flow, customer_id, now):
        """Test that deleting a customer leaves its entries as Unknown."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "500", now=now)

        assert ledger_flow.delete_customer(customer_id).success

        assert ledger_flow.open_ledger(customer_id) is None
        report = report_flow.build(ReportTab.DAY_BOOK, TimeWindow.ALL, now=now)
        assert report.rows[0].customer_name == "Unknown"

    def test_delete_unknown_customer(self, ledger_flow):
        """Test deleting an id that does not exist."""
        result = ledger_flow.delete_customer("gone")
        assert not result.success
        assert result.message == "Customer not found"


class TestLedgerFlowEntries:
    """Tests for recording GIVE/GET entries."""

    def test_give_then_get(self, ledger_flow, audit_logger, customer_id, now):
        """Test the balance after a credit and a part payment."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "500", now=now)
        result = ledger_flow.record_transaction(customer_id, "GET", 200, now=now + timedelta(minutes=1))

        assert result.success
        ledger = ledger_flow.open_ledger(customer_id)
        assert ledger.balance.status == BalanceStatus.RECEIVABLE
        assert ledger.balance.amount == Decimal("300")
        assert [tx.type for tx in ledger.transactions] == [TransactionType.GET, TransactionType.GIVE]
        audit_logger.log_transaction_recorded.assert_called_with(
            transaction_id=result.record_id,
            customer_id=customer_id,
            transaction_type="GET",
            amount="200",
        )

    def test_overpayment_is_advance(self, ledger_flow, customer_id, now):
        """Test that paying more than owed leaves an advance."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "100", now=now)
        ledger_flow.record_transaction(customer_id, TransactionType.GET, "250", now=now)

        balance = ledger_flow.open_ledger(customer_id).balance
        assert balance.status == BalanceStatus.PAYABLE
        assert balance.amount == Decimal("150")

    @pytest.mark.parametrize("amount", ["", "abc", "0", "-5"])
    def test_invalid_amount_rejected(self, ledger_flow, audit_logger, store, customer_id, now, amount):
        """Test that bad amounts never reach storage."""
        result = ledger_flow.record_transaction(customer_id, TransactionType.GIVE, amount, now=now)

        assert not result.success
        assert store.read(RecordKey.TRANSACTIONS) is None
        audit_logger.log_entry_rejected.assert_called_once()

    def test_unknown_customer(self, ledger_flow, audit_logger, store, now):
        """Test that entries need an existing customer."""
        result = ledger_flow.record_transaction("gone", TransactionType.GIVE, "10", now=now)

        assert not result.success
        assert store.read(RecordKey.TRANSACTIONS) is None
        audit_logger.log_customer_not_found.assert_called_once_with(customer_id="gone")

    def test_unknown_entry_type_rejected(self, ledger_flow, audit_logger, store, customer_id, now):
        """Test that an unknown entry type is rejected instead of raising."""
        result = ledger_flow.record_transaction(customer_id, "LEND", "100", now=now)

        assert not result.success
        assert result.validation.issues[0].field == "type"
        assert store.read(RecordKey.TRANSACTIONS) is None
        audit_logger.log_entry_rejected.assert_called_once()

    def test_backdated_entry_at_midnight(self, ledger_flow, customer_id, now):
        """Test that an entry for an earlier day is stamped at its midnight."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "10", entry_date=date(2025, 1, 10), now=now)
        tx = ledger_flow.open_ledger(customer_id).transactions[0]
        assert tx.date == to_millis(datetime(2025, 1, 10))

    def test_today_entry_uses_now(self, ledger_flow, customer_id, now):
        """Test that today's entry keeps the current time."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "10", entry_date=now.date(), now=now)
        assert ledger_flow.open_ledger(customer_id).transactions[0].date == to_millis(now)

    def test_blank_note_not_stored(self, ledger_flow, store, customer_id, now):
        """Test that an empty note is left out."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "10", notes="   ", now=now)
        assert "notes" not in store.read(RecordKey.TRANSACTIONS)[0]

    def test_delete_transaction(self, ledger_flow, audit_logger, customer_id, now):
        """Test removing an entry restores the balance."""
        result = ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "10", now=now)

        assert ledger_flow.delete_transaction(result.record_id).success
        assert ledger_flow.open_ledger(customer_id).balance.is_settled
        audit_logger.log_transaction_deleted.assert_called_once_with(transaction_id=result.record_id)

    def test_delete_unknown_transaction(self, ledger_flow):
        """Test deleting an entry that does not exist."""
        assert not ledger_flow.delete_transaction("gone").success

    def test_storage_failure(self, audit_logger, validator, ledger_settings, now):
        """Test that a failed write becomes a failed result and is audited."""
        store = BrokenWriteStore({
            RecordKey.CUSTOMERS: [{"id": "c1", "name": "Ramesh", "createdAt": 1, "updatedAt": 1}],
        })
        flow = LedgerFlow(
            customers=CustomerRepository(store),
            transactions=TransactionRepository(store),
            shops=ShopProfileRepository(store),
            audit_logger=audit_logger,
            validator=validator,
            settings=ledger_settings,
        )

        result = flow.record_transaction("c1", TransactionType.GIVE, "10", now=now)

        assert not result.success
        assert "not changed" in result.message
        assert store.read(RecordKey.TRANSACTIONS) is None
        audit_logger.log_storage_error.assert_called_once()
        audit_logger.log_transaction_recorded.assert_not_called()

    def test_unreadable_entries_not_overwritten(self, audit_logger, validator, ledger_settings, now):
        """Test that an entry is refused when existing entries cannot be read."""
        store = UnreadableEntriesStore({
            RecordKey.CUSTOMERS: [{"id": "c1", "name": "Ramesh", "createdAt": 1, "updatedAt": 1}],
            RecordKey.TRANSACTIONS: [{"id": "a", "customerId": "c1", "type": "GIVE", "amount": 10, "date": 1}],
        })
        flow = LedgerFlow(
            customers=CustomerRepository(store),
            transactions=TransactionRepository(store),
            shops=ShopProfileRepository(store),
            audit_logger=audit_logger,
            validator=validator,
            settings=ledger_settings,
        )

        result = flow.record_transaction("c1", TransactionType.GET, "5", now=now)

        assert not result.success
        assert InMemoryRecordStore.read(store, RecordKey.TRANSACTIONS) == [
            {"id": "a", "customerId": "c1", "type": "GIVE", "amount": 10, "date": 1}
        ]
        audit_logger.log_storage_error.assert_called_once()


class TestLedgerFlowViews:
    """Tests for dashboard, activity and reminders."""

    def test_dashboard(self, ledger_flow, customer_id, now):
        """Test totals across customers and today's collection."""
        other = ledger_flow.add_customer(name="Suresh", now=now).record_id
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "1000", entry_date=date(2025, 1, 2), now=now)
        ledger_flow.record_transaction(customer_id, TransactionType.GET, "400", now=now)
        ledger_flow.record_transaction(other, TransactionType.GET, "250", entry_date=date(2025, 1, 2), now=now)

        stats = ledger_flow.dashboard(now=now)

        assert stats.total_receivable == Decimal("600")
        assert stats.total_payable == Decimal("250")
        assert stats.net_balance == Decimal("350")
        assert stats.today_collection == Decimal("400")

    def test_recent_activity(self, ledger_flow, customer_id, now):
        """Test that the activity list is capped and newest first."""
        for minutes in range(7):
            ledger_flow.record_transaction(
                customer_id, TransactionType.GIVE, str(minutes + 1), now=now + timedelta(minutes=minutes)
            )

        rows = ledger_flow.recent_activity()

        assert len(rows) == 5
        assert rows[0].amount == Decimal("7")
        assert rows[0].customer_name == "Ramesh"

    def test_reminder_needs_shop(self, ledger_flow, customer_id):
        """Test that there is no reminder before the shop is set up."""
        assert ledger_flow.payment_reminder(customer_id) is None

    def test_reminder(self, ledger_flow, shop_flow, customer_id, now):
        """Test the reminder for an open balance."""
        shop_flow.setup_shop(name="Sharma Store", owner_name="Anil", phone_pe_number="9000000002")
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "1500", now=now)

        reminder = ledger_flow.payment_reminder(customer_id, as_of=now)

        assert reminder.status_label == "Due (To Pay)"
        assert "₹1,500" in reminder.message
        assert reminder.whatsapp_url.startswith("https://wa.me/919876543210?text=")


class TestExpenseFlow:
    """Tests for shop expenses."""

    def test_record_and_list(self, expense_flow, audit_logger, now):
        """Test that expenses are stored and listed newest first."""
        expense_flow.record_expense(ExpenseCategory.RENT_AND_BILLS, "5000", now=now)
        result = expense_flow.record_expense("Transport", "150", notes="auto", now=now + timedelta(hours=1))

        assert result.success
        expenses = expense_flow.list_expenses()
        assert [e.category for e in expenses] == [ExpenseCategory.TRANSPORT, ExpenseCategory.RENT_AND_BILLS]
        audit_logger.log_expense_recorded.assert_called_with(
            expense_id=result.record_id,
            category="Transport",
            amount="150",
        )

    def test_invalid_expense(self, expense_flow, store):
        """Test that a non-positive expense is rejected."""
        assert not expense_flow.record_expense(ExpenseCategory.OTHER, "0").success
        assert store.read(RecordKey.EXPENSES) is None

    def test_unknown_category_rejected(self, expense_flow, audit_logger, store):
        """Test that an unknown category is rejected instead of raising."""
        result = expense_flow.record_expense("Food", "100")

        assert not result.success
        assert store.read(RecordKey.EXPENSES) is None
        audit_logger.log_entry_rejected.assert_called_once()

    def test_summary(self, expense_flow, now):
        """Test the category breakdown."""
        expense_flow.record_expense(ExpenseCategory.OTHER, "10", now=now)
        expense_flow.record_expense(ExpenseCategory.INVENTORY, "300", now=now)
        expense_flow.record_expense(ExpenseCategory.OTHER, "5.5", now=now)

        summary = expense_flow.summary()

        assert summary.total == Decimal("315.5")
        assert [(c.category, c.amount) for c in summary.by_category] == [
            (ExpenseCategory.INVENTORY, Decimal("300")),
            (ExpenseCategory.OTHER, Decimal("15.5")),
        ]


class TestReportFlow:
    """Tests for report building and export."""

    def test_windowed_day_book(self, ledger_flow, report_flow, customer_id, now):
        """Test that the today window drops yesterday's entries."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "10", now=now)
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "20", entry_date=date(2025, 1, 14), now=now)

        assert len(report_flow.build("daybook", "today", now=now).rows) == 1
        assert len(report_flow.build("daybook", "this_month", now=now).rows) == 2

    def test_export(self, ledger_flow, report_flow, audit_logger, customer_id, now, tmp_path):
        """Test CSV export of the outstanding report."""
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "700", now=now)
        report = report_flow.build(ReportTab.OUTSTANDING, now=now)

        path = report_flow.export_csv(report, tmp_path / "outstanding_report.csv")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines == ["Customer,Phone,Status,Amount", "Ramesh,+91 98765 43210,To Receive,700"]
        audit_logger.log_report_exported.assert_called_once_with(
            tab="outstanding", path=str(path), row_count=1,
        )

    def test_export_failure(self, report_flow, audit_logger, now, tmp_path):
        """Test that an unwritable path is audited and re-raised."""
        report = report_flow.build(ReportTab.EXPENSES, now=now)
        with pytest.raises(OSError):
            report_flow.export_csv(report, tmp_path)
        audit_logger.log_error.assert_called_once()


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_flows_share_store(self, now):
        """Test that all flows see the same records."""
        store = InMemoryRecordStore()
        shop_flow, ledger_flow, expense_flow, report_flow = create_app_components(store=store)

        shop_flow.setup_shop(name="Sharma Store", owner_name="Anil")
        customer_id = ledger_flow.add_customer(name="Ramesh", now=now).record_id
        ledger_flow.record_transaction(customer_id, TransactionType.GIVE, "10", now=now)
        expense_flow.record_expense(ExpenseCategory.OTHER, "5", now=now)

        assert store.keys() == ["customers", "expenses", "shop_profile", "transactions"]
        assert len(report_flow.build(ReportTab.DAY_BOOK, now=now).rows) == 1
        assert len(report_flow.build(ReportTab.EXPENSES, now=now).rows) == 1

    def test_json_store_in_data_dir(self, tmp_path, now):
        """Test that the default store writes JSON files to data_dir."""
        _, ledger_flow, _, _ = create_app_components(data_dir=tmp_path)
        ledger_flow.add_customer(name="Ramesh", now=now)
        assert (tmp_path / "khatapro_customers.json").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
