"""
Storage Services Package

Provides the abstract record store interface and local implementations.
Records are JSON documents on the device; the backend is swappable.
"""

from smartreceipt.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from smartreceipt.services.storage.local_store import (
    DEFAULT_EXPENSES_KEY,
    DEFAULT_SETTINGS_KEY,
    KeyValueRecordStore,
    LocalRecordStore,
    MemoryRecordStore,
)

__all__ = [
    # Interfaces
    "RecordStoreInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "DEFAULT_EXPENSES_KEY",
    "DEFAULT_SETTINGS_KEY",
    "KeyValueRecordStore",
    "LocalRecordStore",
    "MemoryRecordStore",
]
