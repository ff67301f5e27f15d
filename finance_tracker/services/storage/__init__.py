"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements local JSON documents as the backend, but designed to be swappable.
"""

from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    MalformedPayloadError,
    StorageError,
    UserDataStore,
)
from finance_tracker.services.storage.local_store import (
    ACTIVE_SESSION_KEY,
    AUDIT_LOG_KEY,
    USERS_REGISTRY_KEY,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValueUserDataStore,
    user_data_key,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStore",
    "UserDataStore",
    # Exceptions
    "MalformedPayloadError",
    "StorageError",
    # Local implementation
    "ACTIVE_SESSION_KEY",
    "AUDIT_LOG_KEY",
    "USERS_REGISTRY_KEY",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
    "KeyValueUserDataStore",
    "user_data_key",
]
