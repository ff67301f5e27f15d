"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. User can see history of their account

The audit logger:
- Runs inline: persistence is synchronous and small
- Gracefully handles failures (doesn't crash the app if logging fails)
- Never receives passwords or password hashes
"""

from typing import Optional
from uuid import UUID

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finance_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finance_tracker.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_account_registered(self, email: str) -> None:
        self.log(AuditEventBuilder.account_registered(email))

    def log_registration_rejected(self, email: str, reason: str) -> None:
        self.log(AuditEventBuilder.registration_rejected(email, reason))

    def log_login_succeeded(self, email: str) -> None:
        self.log(AuditEventBuilder.login_succeeded(email))

    def log_login_failed(self, email: str) -> None:
        self.log(AuditEventBuilder.login_failed(email))

    def log_profile_updated(self, email: str, fields: list[str]) -> None:
        self.log(AuditEventBuilder.profile_updated(email, fields))

    def log_session_restored(self, email: str) -> None:
        self.log(AuditEventBuilder.session_restored(email))

    def log_session_ended(self, email: str) -> None:
        self.log(AuditEventBuilder.session_ended(email))

    def log_transaction_added(
        self,
        email: str,
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            email=email,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    def log_transaction_deleted(self, email: str, transaction_id: UUID) -> None:
        self.log(AuditEventBuilder.transaction_deleted(email, transaction_id))

    def log_goal_added(self, email: str, goal_id: UUID, name: str, target: str) -> None:
        self.log(AuditEventBuilder.goal_added(email, goal_id, name, target))

    def log_goal_deleted(self, email: str, goal_id: UUID) -> None:
        self.log(AuditEventBuilder.goal_deleted(email, goal_id))

    def log_goal_deposit(
        self,
        email: str,
        goal_id: UUID,
        amount: str,
        new_total: str,
    ) -> None:
        self.log(AuditEventBuilder.goal_deposit(email, goal_id, amount, new_total))

    def log_theme_updated(self, email: str, primary_color: str, dark_mode: bool) -> None:
        self.log(AuditEventBuilder.theme_updated(email, primary_color, dark_mode))

    def log_advice_requested(
        self,
        email: str,
        transaction_count: int,
        goal_count: int,
    ) -> None:
        self.log(AuditEventBuilder.advice_requested(email, transaction_count, goal_count))

    def log_advice_failed(self, email: str, error_code: str, error_message: str) -> None:
        self.log(AuditEventBuilder.advice_failed(email, error_code, error_message))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        email: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_error(operation, error_message, email))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(error_type, error_message, details))
