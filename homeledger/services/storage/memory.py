"""
In-Memory Storage

Holds the snapshot as its JSON-ready dict, so a save/load cycle goes
through the same serialization and migration as the file backend.
"""

from typing import Optional

from homeledger.models.defaults import initial_data
from homeledger.models.entities import AppData
from homeledger.services.storage.interface import SnapshotStorageInterface
from homeledger.services.storage.migration import migrate_snapshot, parse_snapshot


class InMemoryStorage(SnapshotStorageInterface):
    """Snapshot storage that lives as long as the object does."""

    def __init__(self, raw: Optional[dict] = None):
        self._raw = raw
        self.save_count = 0

    def load(self) -> AppData:
        if self._raw is None:
            return initial_data()
        return parse_snapshot(migrate_snapshot(self._raw))

    def save(self, data: AppData) -> bool:
        self._raw = data.model_dump(mode="json", by_alias=True)
        self.save_count += 1
        return True

    def exists(self) -> bool:
        return self._raw is not None
