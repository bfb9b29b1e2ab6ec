"""
Abstract Storage Interface

DESIGN DECISION: The ledger is stored as one snapshot, loaded and saved
whole. This keeps the engine free of I/O: it only ever sees a fully
materialized `AppData`.

Implementations:
1. JSON file on disk (the default)
2. In-memory (tests, embedding)

Every implementation runs schema migration on load, so callers always
receive a snapshot with every field filled in.
"""

from abc import ABC, abstractmethod

from homeledger.models.entities import AppData


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> AppData:
        """
        Load the stored snapshot.

        Returns:
            The migrated snapshot, or the starter data when nothing has
            been stored yet

        Raises:
            InvalidFormatError: If stored data cannot be read as a snapshot
            StorageError: If reading fails
        """
        pass

    @abstractmethod
    def save(self, data: AppData) -> bool:
        """
        Replace the stored snapshot with `data`.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def exists(self) -> bool:
        """True when a snapshot has been stored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InvalidFormatError(StorageError):
    """Stored or imported data is not a valid snapshot."""
    pass
