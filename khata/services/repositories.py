"""
Record Repositories

Typed access to the khata collections on top of any RecordStoreInterface.

Collection semantics:
- `save` upserts: an existing id is replaced in place, a new id is appended
- `add` inserts and refuses an id that already exists
- `delete` removes by id; an unknown id is a no-op

Read failures degrade to empty defaults (an unreadable collection shows
as empty, it does not crash the screen). Stored records that no longer
validate are skipped with a warning.

Mutations never degrade. They rewrite the raw stored items, so records
that were skipped on read are written back untouched, and an unreadable
or malformed collection raises StorageError instead of being replaced.
Write failures propagate as StorageError so the caller can tell the
user the entry was not saved.
"""

from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar

import structlog
from pydantic import ValidationError

from khata.engine.balance import compute_balance, sort_by_date_descending
from khata.models.ledger import (
    AppSettings,
    Customer,
    Expense,
    RecordModel,
    ShopProfile,
    Transaction,
)
from khata.services.storage.interface import (
    CorruptCollectionError,
    DuplicateRecordError,
    RecordKey,
    RecordStoreInterface,
    StorageReadError,
)

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=RecordModel)


def _read_or_default(store: RecordStoreInterface, key: RecordKey) -> Optional[Any]:
    try:
        return store.read(key)
    except StorageReadError as e:
        logger.error("storage_read_failed", key=key.value, error=str(e))
        return None


def _item_id(item: Any) -> Optional[str]:
    return item.get("id") if isinstance(item, dict) else None


class RecordCollection(Generic[RecordT]):
    """A list-valued collection of records keyed by `id`."""

    key: RecordKey
    model: type[RecordT]

    def __init__(self, store: RecordStoreInterface):
        self._store = store

    def list_all(self) -> list[RecordT]:
        """All records in stored order."""
        raw = _read_or_default(self._store, self.key)
        if not isinstance(raw, list):
            if raw is not None:
                logger.error("collection_not_a_list", key=self.key.value)
            return []

        records = []
        for item in raw:
            try:
                records.append(self.model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "record_skipped",
                    key=self.key.value,
                    record_id=_item_id(item),
                    error_count=e.error_count(),
                )
        return records

    def get(self, record_id: str) -> Optional[RecordT]:
        for record in self.list_all():
            if record.id == record_id:
                return record
        return None

    def exists(self, record_id: str) -> bool:
        return self.get(record_id) is not None

    def count(self) -> int:
        return len(self.list_all())

    def save(self, record: RecordT) -> RecordT:
        """Upsert by id, preserving collection order."""
        items = self._load_for_update()
        stored = record.to_storage()
        for index, item in enumerate(items):
            if _item_id(item) == record.id:
                items[index] = stored
                break
        else:
            items.append(stored)
        self._store.write(self.key, items)
        return record

    def add(self, record: RecordT) -> RecordT:
        """
        Insert a new record.

        Raises:
            DuplicateRecordError: If a record with the same id exists
        """
        items = self._load_for_update()
        if any(_item_id(item) == record.id for item in items):
            raise DuplicateRecordError(
                f"{self.model.__name__} id already exists: {record.id}"
            )
        items.append(record.to_storage())
        self._store.write(self.key, items)
        return record

    def delete(self, record_id: str) -> bool:
        """Remove by id. Returns False (and writes nothing) if not found."""
        items = self._load_for_update()
        remaining = [item for item in items if _item_id(item) != record_id]
        if len(remaining) == len(items):
            return False
        self._store.write(self.key, remaining)
        return True

    def _load_for_update(self) -> list[Any]:
        """
        Raw stored items for a read-modify-write.

        Unlike list_all this does not degrade: items that fail validation
        are kept as stored, and an unreadable or malformed collection
        raises instead of being rewritten as empty.

        Raises:
            StorageReadError: If the collection cannot be read
            CorruptCollectionError: If the stored value is not a list
        """
        raw = self._store.read(self.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.error("collection_not_a_list", key=self.key.value)
            raise CorruptCollectionError(
                f"Stored {self.key.value} is not a list; refusing to overwrite it"
            )
        return raw


class CustomerRepository(RecordCollection[Customer]):
    key = RecordKey.CUSTOMERS
    model = Customer


class TransactionRepository(RecordCollection[Transaction]):
    key = RecordKey.TRANSACTIONS
    model = Transaction

    def by_customer(self, customer_id: str) -> list[Transaction]:
        """One customer's entries, newest first."""
        return sort_by_date_descending(
            tx for tx in self.list_all() if tx.customer_id == customer_id
        )

    def balance(self, customer_id: str) -> Decimal:
        return compute_balance(self.by_customer(customer_id))


class ExpenseRepository(RecordCollection[Expense]):
    key = RecordKey.EXPENSES
    model = Expense


class ShopProfileRepository:
    """The shop profile singleton."""

    def __init__(self, store: RecordStoreInterface):
        self._store = store

    def get(self) -> Optional[ShopProfile]:
        raw = _read_or_default(self._store, RecordKey.SHOP_PROFILE)
        if raw is None:
            return None
        try:
            return ShopProfile.model_validate(raw)
        except ValidationError as e:
            logger.warning("shop_profile_invalid", error_count=e.error_count())
            return None

    def save(self, profile: ShopProfile) -> ShopProfile:
        self._store.write(RecordKey.SHOP_PROFILE, profile.to_storage())
        return profile

    def is_setup(self) -> bool:
        return self.get() is not None


class AppSettingsRepository:
    """User preferences; defaults when nothing is stored."""

    def __init__(self, store: RecordStoreInterface):
        self._store = store

    def get(self) -> AppSettings:
        raw = _read_or_default(self._store, RecordKey.APP_SETTINGS)
        if raw is None:
            return AppSettings()
        try:
            return AppSettings.model_validate(raw)
        except ValidationError as e:
            logger.warning("app_settings_invalid", error_count=e.error_count())
            return AppSettings()

    def save(self, settings: AppSettings) -> AppSettings:
        self._store.write(RecordKey.APP_SETTINGS, settings.to_storage())
        return settings
