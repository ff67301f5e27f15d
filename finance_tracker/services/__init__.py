"""Services package."""

from finance_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValueStore,
    KeyValueUserDataStore,
    MalformedPayloadError,
    StorageError,
    UserDataStore,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
    "KeyValueStore",
    "KeyValueUserDataStore",
    "MalformedPayloadError",
    "StorageError",
    "UserDataStore",
]
