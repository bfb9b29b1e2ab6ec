"""
Storage Services Package

Provides the snapshot storage interface, its JSON-file and in-memory
implementations, schema migration and backup import/export.
"""

from homeledger.services.storage.interface import (
    InvalidFormatError,
    SnapshotStorageInterface,
    StorageError,
)
from homeledger.services.storage.migration import (
    guess_account_icon,
    migrate_snapshot,
    parse_snapshot,
)
from homeledger.services.storage.backup import export_filename, export_json, import_json
from homeledger.services.storage.json_file import JsonFileStorage
from homeledger.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "SnapshotStorageInterface",
    # Exceptions
    "InvalidFormatError",
    "StorageError",
    # Migration
    "guess_account_icon",
    "migrate_snapshot",
    "parse_snapshot",
    # Backup
    "export_filename",
    "export_json",
    "import_json",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
