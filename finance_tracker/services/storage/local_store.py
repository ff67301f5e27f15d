"""
Local Key-Value Storage Implementation

DESIGN DECISION: Local JSON documents are the storage backend because:
1. The app is a single-user client, no database to set up
2. One document per key mirrors browser-style local storage
3. Users can inspect or back up their data directory directly
4. Easy to export/migrate later

TRADEOFFS:
- Every write replaces a whole document (fine at personal scale)
- No transactions (each document write is atomic on its own)
- No querying (we filter in Python)

The typed stores only talk to the KeyValueStore interface, so the
backend can be swapped without changing business logic.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote, unquote

import structlog
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import UserDataBlob
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    MalformedPayloadError,
    StorageError,
    UserDataStore,
)


# Well-known keys
USERS_REGISTRY_KEY = "users_registry"
ACTIVE_SESSION_KEY = "active_session"
USER_DATA_KEY_PREFIX = "user_data_"
AUDIT_LOG_KEY = "audit_log"

logger = structlog.get_logger(__name__)


def user_data_key(account_id: str) -> str:
    return f"{USER_DATA_KEY_PREFIX}{account_id}"


class JsonFileKeyValueStore(KeyValueStore):
    """
    One JSON file per key inside a data directory.

    File names are "<namespace>__<quoted key>.json". Writes go to a
    temporary file in the same directory and are moved into place with
    os.replace, so a crash never leaves a half-written document.
    """

    SUFFIX = ".json"

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        namespace: Optional[str] = None,
        write_retry_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir or settings.data_dir)
        self._namespace = namespace or settings.namespace
        self._attempts = write_retry_attempts or settings.write_retry_attempts

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _prefix(self) -> str:
        return f"{self._namespace}__"

    def _path_for(self, key: str) -> Path:
        if not key:
            raise StorageError("Storage key cannot be empty")
        return self._data_dir / f"{self._prefix()}{quote(key, safe='@.-_+')}{self.SUFFIX}"

    def get(self, key: str) -> Optional[Any]:
        """Read and decode one key."""
        path = self._path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read '{key}': {e}")

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedPayloadError(key, str(e))

    def set(self, key: str, value: Any) -> None:
        """Encode and atomically write one key."""
        path = self._path_for(key)
        try:
            text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON-serializable: {e}")

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomically(path, text)
        except OSError as e:
            raise StorageError(f"Failed to write '{key}': {e}")

    def _write_atomically(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete '{key}': {e}")

    def keys(self) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        prefix = self._prefix()
        found = []
        for entry in sorted(self._data_dir.iterdir()):
            name = entry.name
            if entry.is_file() and name.startswith(prefix) and name.endswith(self.SUFFIX):
                found.append(unquote(name[len(prefix):-len(self.SUFFIX)]))
        return found


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store for tests and throwaway sessions.

    Values are kept as JSON text so that callers get independent copies
    and non-serializable values fail exactly as they would on disk.
    """

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        text = self._data.get(key)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedPayloadError(key, str(e))

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON-serializable: {e}")

    def set_raw(self, key: str, text: str) -> None:
        """Store undecoded text under a key."""
        self._data[key] = text

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)


class KeyValueUserDataStore(UserDataStore):
    """
    User data blobs kept under "user_data_<email>" keys.

    Blobs are stored whole. Partial updates are not supported.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self, account_id: str) -> Optional[UserDataBlob]:
        key = user_data_key(account_id)
        raw = self._store.get(key)
        if raw is None:
            return None

        try:
            return UserDataBlob.model_validate(raw)
        except ValidationError as e:
            raise MalformedPayloadError(key, f"{e.error_count()} validation errors")

    def save(self, account_id: str, blob: UserDataBlob) -> None:
        self._store.set(user_data_key(account_id), blob.model_dump(mode="json"))


class KeyValueAuditStorage(AuditStorageInterface):
    """
    Audit events kept as a capped list under the "audit_log" key.

    Oldest events are dropped once the cap is reached.
    """

    def __init__(self, store: KeyValueStore, max_events: Optional[int] = None):
        self._store = store
        self._max_events = (
            max_events if max_events is not None
            else get_settings().storage.max_audit_events
        )

    def _read_raw(self) -> list:
        try:
            raw = self._store.get(AUDIT_LOG_KEY)
        except MalformedPayloadError:
            logger.warning("audit_log_malformed_reset")
            return []
        return raw if isinstance(raw, list) else []

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event, trimming the oldest past the cap."""
        if self._max_events == 0:
            return True
        try:
            events = self._read_raw()
            events.append(event.model_dump(mode="json"))
            self._store.set(AUDIT_LOG_KEY, events[-self._max_events:])
            return True
        except StorageError as e:
            # Audit logging should not break the main flow
            logger.warning("audit_append_failed", error=str(e))
            return False

    def get_recent_events(
        self,
        limit: int = 100,
        account_email: Optional[str] = None,
    ) -> list[AuditEvent]:
        events = []
        for item in self._read_raw():
            try:
                event = AuditEvent.model_validate(item)
            except ValidationError:
                continue  # Skip malformed entries
            if account_email and event.account_email != account_email:
                continue
            events.append(event)

        # Stored oldest first
        events.reverse()
        return events[:limit]
