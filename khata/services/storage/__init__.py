"""
Storage Services Package

Provides the abstract record store and its implementations: local JSON
files for the app, in-memory for tests.
"""

from khata.services.storage.interface import (
    CorruptCollectionError,
    DuplicateRecordError,
    RecordKey,
    RecordStoreInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from khata.services.storage.json_file import JsonFileRecordStore
from khata.services.storage.memory import InMemoryRecordStore

__all__ = [
    # Interface
    "RecordKey",
    "RecordStoreInterface",
    # Exceptions
    "CorruptCollectionError",
    "DuplicateRecordError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
]
