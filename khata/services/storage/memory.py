"""
In-memory record store.

Used by tests and by anything that wants a throwaway khata. Values are
deep-copied on the way in and out, so callers can never mutate stored
state through a reference they hold.
"""

import copy
from typing import Any, Optional

from khata.services.storage.interface import RecordKey, RecordStoreInterface


class InMemoryRecordStore(RecordStoreInterface):

    def __init__(self, initial: Optional[dict[RecordKey, Any]] = None):
        self._data: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self._data[RecordKey(key).value] = copy.deepcopy(value)

    def read(self, key: RecordKey) -> Optional[Any]:
        return copy.deepcopy(self._data.get(RecordKey(key).value))

    def write(self, key: RecordKey, value: Any) -> None:
        self._data[RecordKey(key).value] = copy.deepcopy(value)

    def remove(self, key: RecordKey) -> None:
        self._data.pop(RecordKey(key).value, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
