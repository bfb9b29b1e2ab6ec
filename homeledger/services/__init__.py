"""Services package."""

from homeledger.services.storage import (
    InMemoryStorage,
    InvalidFormatError,
    JsonFileStorage,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    "InMemoryStorage",
    "InvalidFormatError",
    "JsonFileStorage",
    "SnapshotStorageInterface",
    "StorageError",
]
