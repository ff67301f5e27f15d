"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap the local JSON files for a networked database later
2. Use in-memory storage for testing
3. Replace full-blob writes with batched writes without touching callers
4. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
A namespaced key-value store at the bottom, and two typed stores on top.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import UserDataBlob


class KeyValueStore(ABC):
    """
    Durable, namespaced key-value store of JSON-serializable values.

    Keys are plain names ("users_registry"); the implementation is
    responsible for namespacing them.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Returns:
            The decoded JSON value, or None if the key is absent

        Raises:
            MalformedPayloadError: If the stored value cannot be decoded
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List every key in this store's namespace."""
        pass


class UserDataStore(ABC):
    """
    Per-account data isolation.

    Each account owns exactly one blob, addressed by its account id
    (the normalized email).
    """

    @abstractmethod
    def load(self, account_id: str) -> Optional[UserDataBlob]:
        """
        Load one account's blob.

        Returns:
            The blob, or None on first login

        Raises:
            MalformedPayloadError: If the stored blob is unreadable
        """
        pass

    @abstractmethod
    def save(self, account_id: str, blob: UserDataBlob) -> None:
        """
        Replace one account's blob.

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        account_email: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return
            account_email: Only events for this account

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class MalformedPayloadError(StorageError):
    """Stored value exists but cannot be decoded or validated."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Malformed payload under '{key}': {message}")
