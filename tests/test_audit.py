"""Tests for the audit logger."""

from uuid import uuid4

from finance_tracker.audit import AuditLogger
from finance_tracker.models.audit import AuditEventBuilder, AuditEventType
from finance_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStore,
    KeyValueAuditStorage,
)


class ExplodingStorage(AuditStorageInterface):
    def append_event(self, event):
        raise RuntimeError("audit store down")

    def get_recent_events(self, limit=100, account_email=None):
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_local_only(self):
        """Test logging without storage succeeds."""
        assert AuditLogger().log(AuditEventBuilder.session_ended("ana@x.com")) is True

    def test_persists_to_storage(self):
        """Test events reach the audit store."""
        storage = KeyValueAuditStorage(InMemoryKeyValueStore(), max_events=10)
        audit_logger = AuditLogger(storage)
        audit_logger.log_goal_deposit("ana@x.com", uuid4(), "100", "450")
        events = storage.get_recent_events()
        assert events[0].event_type == AuditEventType.GOAL_DEPOSIT
        assert events[0].details["current_amount"] == "450"

    def test_storage_failure_does_not_raise(self):
        """Test a broken audit store never breaks the caller."""
        audit_logger = AuditLogger(ExplodingStorage())
        assert audit_logger.log(AuditEventBuilder.login_failed("ana@x.com")) is False

    def test_system_error(self):
        """Test the generic error event."""
        storage = KeyValueAuditStorage(InMemoryKeyValueStore(), max_events=10)
        AuditLogger(storage).log_error("RuntimeError", "boom", {"operation": "request_advice"})
        event = storage.get_recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.error_message == "boom"
