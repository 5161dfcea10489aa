"""
Abstract Storage Interface

DESIGN DECISION: The khata keeps its data as a handful of named
collections in a key-value store. Each collection is read and written
as a whole; there is no partial or streaming access.

This allows us to:
1. Keep data in local JSON files today
2. Use an in-memory store for testing
3. Keep the ledger logic decoupled from where bytes live
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class RecordKey(str, Enum):
    """The named collections of the khata."""
    SHOP_PROFILE = "shop_profile"
    APP_SETTINGS = "app_settings"
    CUSTOMERS = "customers"
    TRANSACTIONS = "transactions"
    EXPENSES = "expenses"


class RecordStoreInterface(ABC):
    """
    Abstract interface for the local record store.

    Values are plain JSON-compatible data (dicts, lists, numbers,
    strings). Single process, synchronous, last write wins.
    """

    @abstractmethod
    def read(self, key: RecordKey) -> Optional[Any]:
        """
        Read a whole collection.

        Args:
            key: Collection to read

        Returns:
            The stored value, or None if the key was never written

        Raises:
            StorageReadError: If the value exists but cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: RecordKey, value: Any) -> None:
        """
        Replace a whole collection.

        A failed write must leave the previously stored value intact.

        Raises:
            StorageWriteError: If the value could not be stored
        """
        pass

    @abstractmethod
    def remove(self, key: RecordKey) -> None:
        """
        Remove a collection. Removing a missing key is a no-op.

        Raises:
            StorageWriteError: If the key exists but could not be removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data exists but could not be read or decoded."""
    pass


class StorageWriteError(StorageError):
    """Data could not be written; the previous value is unchanged."""
    pass


class DuplicateRecordError(StorageError):
    """Attempted to insert a record whose id already exists."""
    pass


class CorruptCollectionError(StorageError):
    """A stored collection has the wrong shape and cannot be safely rewritten."""
    pass
