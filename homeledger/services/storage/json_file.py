"""
JSON File Storage

The whole snapshot lives in one JSON file. Writes go to a temporary file
first and then replace the original, so a crash mid-write never leaves a
half-written snapshot behind.

TRADEOFFS:
- Every save rewrites the full file (fine at personal-finance volumes)
- No concurrent writers (single-user local tool)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from homeledger.config import get_settings
from homeledger.models.defaults import initial_data
from homeledger.models.entities import AppData
from homeledger.observability import get_logger
from homeledger.services.storage.interface import (
    InvalidFormatError,
    SnapshotStorageInterface,
    StorageError,
)
from homeledger.services.storage.migration import migrate_snapshot, parse_snapshot


log = get_logger(__name__)


class JsonFileStorage(SnapshotStorageInterface):
    """
    Snapshot storage in a local JSON file.

    A missing file means a brand-new ledger and loads the starter data.
    A file that exists but cannot be read as a snapshot is an error: it
    is never silently replaced, so the user's data is not overwritten by
    the next save.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.data_path
        self._retry_attempts = retry_attempts or settings.save_retry_attempts

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> AppData:
        if not self.exists():
            log.info("snapshot_not_found_using_defaults", path=str(self._path))
            return initial_data()

        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            log.error("snapshot_load_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Could not read {self._path}: {e}") from e

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            log.error("snapshot_corrupted", path=str(self._path), error=str(e))
            raise InvalidFormatError(f"{self._path} is not valid JSON: {e}") from e

        data = parse_snapshot(migrate_snapshot(raw))
        log.info(
            "snapshot_loaded",
            path=str(self._path),
            accounts=len(data.accounts),
            categories=len(data.categories),
            transactions=len(data.transactions),
        )
        return data

    def save(self, data: AppData) -> bool:
        payload = json.dumps(
            data.model_dump(mode="json", by_alias=True),
            ensure_ascii=False,
        )
        writer = retry(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        )(self._write_atomic)

        try:
            writer(payload)
        except OSError as e:
            log.error("snapshot_save_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Could not write {self._path}: {e}") from e

        log.debug("snapshot_saved", path=str(self._path), transactions=len(data.transactions))
        return True

    def _write_atomic(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
