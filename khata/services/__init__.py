"""Services package."""

from khata.services.export_csv import export_report_csv, report_filename
from khata.services.repositories import (
    AppSettingsRepository,
    CustomerRepository,
    ExpenseRepository,
    RecordCollection,
    ShopProfileRepository,
    TransactionRepository,
)
from khata.services.storage import (
    CorruptCollectionError,
    DuplicateRecordError,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordKey,
    RecordStoreInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Export
    "export_report_csv",
    "report_filename",
    # Repositories
    "AppSettingsRepository",
    "CustomerRepository",
    "ExpenseRepository",
    "RecordCollection",
    "ShopProfileRepository",
    "TransactionRepository",
    # Storage
    "CorruptCollectionError",
    "DuplicateRecordError",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordKey",
    "RecordStoreInterface",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
