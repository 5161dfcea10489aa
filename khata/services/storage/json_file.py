"""
JSON File Storage Implementation

DESIGN DECISION: Each collection lives in its own JSON file inside the
data directory, named `<prefix><key>.json` (e.g. `khatapro_customers.json`).
The prefix and the camelCase record layout match the browser storage
the khata data originally lived in, so exported data can be dropped in
as-is.

TRADEOFFS:
- Every write rewrites the whole collection (fine at khata scale)
- No locking; single process only
- Writes go to a temp file that atomically replaces the target, so a
  crash or I/O error mid-write never leaves a half-written collection
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from khata.config import get_settings
from khata.services.storage.interface import (
    RecordKey,
    RecordStoreInterface,
    StorageReadError,
    StorageWriteError,
)

logger = structlog.get_logger(__name__)


class JsonFileRecordStore(RecordStoreInterface):
    """Local JSON-file implementation of the record store."""

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        key_prefix: Optional[str] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir).expanduser() if data_dir else settings.data_path
        self._prefix = settings.key_prefix if key_prefix is None else key_prefix

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: RecordKey) -> Path:
        """File backing a collection."""
        return self._data_dir / f"{self._prefix}{RecordKey(key).value}.json"

    def read(self, key: RecordKey) -> Optional[Any]:
        """Read a collection file; None if it does not exist."""
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageReadError(f"Failed to read {path.name}: {e}") from e

    def write(self, key: RecordKey, value: Any) -> None:
        """Write a collection file atomically."""
        path = self.path_for(key)

        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Value for {path.name} is not JSON serializable: {e}") from e

        tmp_path = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path.name}: {e}") from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning("temp_file_cleanup_failed", path=tmp_path)

        logger.debug("collection_written", key=RecordKey(key).value, path=str(path))

    def remove(self, key: RecordKey) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path.name}: {e}") from e
