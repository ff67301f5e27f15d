"""
Audit Models for FB finance

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of account and data changes
2. Debugging information when things go wrong
3. A history the user can inspect on the settings page

DESIGN DECISION: Audit logs are append-only. We never modify them;
the store only trims the oldest events past its cap.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_REGISTERED = "account_registered"
    REGISTRATION_REJECTED = "registration_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    PROFILE_UPDATED = "profile_updated"

    # Session
    SESSION_RESTORED = "session_restored"
    SESSION_ENDED = "session_ended"

    # User data
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    GOAL_ADDED = "goal_added"
    GOAL_DELETED = "goal_deleted"
    GOAL_DEPOSIT = "goal_deposit"
    THEME_UPDATED = "theme_updated"

    # Advice
    ADVICE_REQUESTED = "advice_requested"
    ADVICE_FAILED = "advice_failed"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who and what is this about?
    account_email: Optional[str] = Field(
        default=None,
        description="Account the event belongs to, if any"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "account_email": self.account_email,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_registered(email)
        event = AuditEventBuilder.transaction_added(email, transaction_id, "expense", "42.00")
    """

    @staticmethod
    def account_registered(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_REGISTERED,
            account_email=email,
            entity_type="account",
            description=f"Account registered: {email}",
            is_user_action=True,
        )

    @staticmethod
    def registration_rejected(email: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            account_email=email,
            entity_type="account",
            description="Registration rejected",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            account_email=email,
            entity_type="session",
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            account_email=email,
            entity_type="session",
            description="Login failed: invalid credentials",
            is_user_action=True,
        )

    @staticmethod
    def profile_updated(email: str, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            account_email=email,
            entity_type="account",
            description=f"Profile updated: {', '.join(fields) or 'no changes'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def session_restored(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            account_email=email,
            entity_type="session",
            description="Session restored on startup",
        )

    @staticmethod
    def session_ended(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_ENDED,
            account_email=email,
            entity_type="session",
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def transaction_added(
        email: str,
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            account_email=email,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {transaction_type} {amount}",
            details={"type": transaction_type, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(email: str, transaction_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            account_email=email,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def goal_added(email: str, goal_id: UUID, name: str, target: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_ADDED,
            account_email=email,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal added: {name}",
            details={"target_amount": target},
            is_user_action=True,
        )

    @staticmethod
    def goal_deleted(email: str, goal_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_DELETED,
            account_email=email,
            entity_type="goal",
            entity_id=goal_id,
            description="Goal deleted",
            is_user_action=True,
        )

    @staticmethod
    def goal_deposit(
        email: str,
        goal_id: UUID,
        amount: str,
        new_total: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_DEPOSIT,
            account_email=email,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Deposit of {amount} applied to goal",
            details={"amount": amount, "current_amount": new_total},
            is_user_action=True,
        )

    @staticmethod
    def theme_updated(email: str, primary_color: str, dark_mode: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.THEME_UPDATED,
            account_email=email,
            entity_type="theme",
            description="Theme updated",
            details={"primary_color": primary_color, "dark_mode_enabled": dark_mode},
            is_user_action=True,
        )

    @staticmethod
    def advice_requested(email: str, transaction_count: int, goal_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_REQUESTED,
            account_email=email,
            entity_type="advice",
            description="AI advice requested",
            details={
                "transaction_count": transaction_count,
                "goal_count": goal_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def advice_failed(email: str, error_code: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_FAILED,
            severity=AuditSeverity.WARNING,
            account_email=email,
            entity_type="advice",
            description=f"AI advice unavailable: {error_code}",
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        email: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            account_email=email,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
