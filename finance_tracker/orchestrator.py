"""
Main Controller for FB finance

This module ties together all the components and defines the
user-facing operations:
1. Accounts (register → login → restore on restart → logout)
2. Finance data (transactions, goals, deposits, theme)
3. Dashboard figures (totals, weekly series, goal progress)
4. Advice (snapshot → gateway → fallback text)

DESIGN DECISION: The controller enforces the boundaries:
- No mutation without an authenticated session
- No mutation without validated input
- Every mutation is written through before it becomes visible
- Every step is audited

Write-through works on a copy: the new blob is persisted first and only
then swapped into the session. A failed write therefore leaves the
in-memory state exactly as it was.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID, uuid4

import structlog

from finance_tracker.accounts import (
    AccountDirectory,
    BcryptCredentialVerifier,
    DuplicateEmailError,
    InvalidCredentialsError,
    SessionContext,
    SessionManager,
)
from finance_tracker.agents import AdviceResponse, FinancialAdviceAgent
from finance_tracker.analytics import (
    compute_goal_progress,
    compute_totals,
    compute_weekly_series,
    filter_transactions,
)
from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.account import (
    CredentialRecord,
    ProfilePatch,
    UserProfile,
    normalize_email,
)
from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import (
    AdviceSnapshot,
    FinancialGoal,
    ThemeConfig,
    Totals,
    Transaction,
    TransactionType,
    UserDataBlob,
    WeeklySeriesPoint,
)
from finance_tracker.models.validation import ValidationResult
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValueStore,
    KeyValueUserDataStore,
    StorageError,
    UserDataStore,
)
from finance_tracker.validation import InputValidationError, InputValidator


logger = structlog.get_logger(__name__)


ASSISTANT_CONNECTION_ERROR_MESSAGE = "Error connecting to the AI assistant."


class NotAuthenticatedError(Exception):
    """A user-scoped operation was attempted without a session."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Log in to {operation}")


class GoalNotFoundError(Exception):
    """No goal with the given id exists in the current session."""

    def __init__(self, goal_id: UUID):
        self.goal_id = goal_id
        super().__init__(f"Goal not found: {goal_id}")


def _as_decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value).strip())


def _raise_if_invalid(result: ValidationResult) -> None:
    if result.has_errors:
        raise InputValidationError(result)


class FinanceTracker:
    """
    Application controller.

    Owns the SessionContext; the UI reads from it and calls the
    operations below. Nothing else mutates user-scoped state.

    Flow for every mutation:
    1. Require session
    2. Validate input
    3. Build the new blob
    4. Persist (StorageError → nothing changes)
    5. Swap into session and audit
    """

    def __init__(
        self,
        directory: AccountDirectory,
        sessions: SessionManager,
        user_data: UserDataStore,
        advisor: Optional[FinancialAdviceAgent] = None,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._directory = directory
        self._sessions = sessions
        self._user_data = user_data
        self._advisor = advisor or FinancialAdviceAgent()
        self._validator = validator or InputValidator()
        self._audit = audit_logger or AuditLogger()
        self._settings = app_settings or get_settings().app

        self._context = SessionContext.anonymous(self._settings.currency)
        self._advice_pending = False
        self._last_advice: Optional[AdviceResponse] = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def is_authenticated(self) -> bool:
        return self._context.is_authenticated

    @property
    def profile(self) -> UserProfile:
        return self._context.profile

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._context.data.transactions)

    @property
    def goals(self) -> list[FinancialGoal]:
        return list(self._context.data.goals)

    @property
    def theme(self) -> ThemeConfig:
        return self._context.data.theme

    @property
    def is_advice_pending(self) -> bool:
        return self._advice_pending

    @property
    def last_advice(self) -> Optional[AdviceResponse]:
        return self._last_advice

    @property
    def validator(self) -> InputValidator:
        return self._validator

    def _require_session(self, operation: str) -> SessionContext:
        if not self._context.is_authenticated:
            raise NotAuthenticatedError(operation)
        return self._context

    def _empty_blob(self) -> UserDataBlob:
        return UserDataBlob(
            theme=ThemeConfig(primary_color=self._settings.default_primary_color)
        )

    def _load_data(self, email: str) -> UserDataBlob:
        """
        Load a user's blob for a new session.

        Absent (first login) and unreadable blobs both start empty.
        """
        try:
            blob = self._user_data.load(email)
        except StorageError as e:
            logger.warning("user_data_load_failed", email=email, error=str(e))
            self._audit.log_storage_error("load_user_data", str(e), email)
            return self._empty_blob()
        return blob if blob is not None else self._empty_blob()

    def _commit(self, data: UserDataBlob, operation: str) -> None:
        """
        Persist the whole blob, then make it the session state.

        Raises:
            StorageError: If the write fails; session state is untouched
        """
        email = self._context.profile.email
        try:
            self._user_data.save(email, data)
        except StorageError as e:
            logger.error("user_data_write_failed", operation=operation, email=email, error=str(e))
            self._audit.log_storage_error(operation, str(e), email)
            raise

        self._context = self._context.model_copy(update={"data": data})

    def _new_id(self, taken: set[UUID]) -> UUID:
        new_id = uuid4()
        while new_id in taken:
            new_id = uuid4()
        return new_id

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def restore_session(self) -> Optional[UserProfile]:
        """
        Pick up the persisted session on startup.

        Returns the restored profile, or None when nobody was logged in.
        """
        profile = self._sessions.restore()
        if profile is None:
            return None

        data = self._load_data(profile.email)
        self._context = SessionContext.for_profile(profile, data)
        self._audit.log_session_restored(profile.email)
        return profile

    def register(self, name: str, email: str, password: str) -> CredentialRecord:
        """
        Create an account. Does not log in.

        Raises:
            InputValidationError: Missing or malformed fields
            DuplicateEmailError: Email already registered
            StorageError: Registry unreadable or write failed
        """
        _raise_if_invalid(self._validator.validate_registration(name, email, password))

        try:
            record = self._directory.register(name, email, password)
        except DuplicateEmailError as e:
            self._audit.log_registration_rejected(e.email, "duplicate_email")
            raise
        except StorageError as e:
            self._audit.log_storage_error("register", str(e))
            raise

        self._audit.log_account_registered(record.email)
        return record

    def login(self, email: str, password: str) -> UserProfile:
        """
        Authenticate and start a session with the user's data.

        Raises:
            InputValidationError: Missing fields
            InvalidCredentialsError: Unknown email or wrong password
            StorageError: Registry unreadable or session write failed
        """
        _raise_if_invalid(self._validator.validate_login(email, password))

        try:
            profile = self._directory.authenticate(email, password)
        except InvalidCredentialsError:
            self._audit.log_login_failed(normalize_email(email))
            raise
        except StorageError as e:
            self._audit.log_storage_error("login", str(e))
            raise

        self._sessions.start(profile)
        data = self._load_data(profile.email)
        self._context = SessionContext.for_profile(profile, data)
        self._advice_pending = False
        self._last_advice = None

        self._audit.log_login_succeeded(profile.email)
        return profile

    def logout(self) -> None:
        """End the session and reset every user-scoped value."""
        email = self._context.profile.email
        was_authenticated = self._context.is_authenticated

        self._sessions.end()
        self._context = SessionContext.anonymous(self._settings.currency)
        self._advice_pending = False
        self._last_advice = None

        if was_authenticated:
            self._audit.log_session_ended(email)

    def update_profile(self, patch: Union[ProfilePatch, dict]) -> UserProfile:
        """
        Edit name, picture or monthly income of the current user.

        The session pointer is refreshed so a restart shows the new values.
        The registry is the source of truth: once it is written the session
        shows the new profile, even if refreshing the pointer then fails.

        Raises:
            InputValidationError: Blank or over-long name, bad income
            StorageError: Registry or session pointer write failed
        """
        context = self._require_session("update your profile")
        if isinstance(patch, dict):
            _raise_if_invalid(self._validator.validate_profile(
                patch.get("name"),
                patch.get("monthly_income"),
            ))
            patch = ProfilePatch.model_validate(patch)

        fields = sorted(patch.changed_fields())
        if not fields:
            return context.profile

        record = self._directory.update_profile(context.profile.email, patch)
        profile = record.to_profile(self._settings.currency)
        self._context = self._context.model_copy(update={"profile": profile})
        try:
            self._sessions.start(profile)
        except StorageError as e:
            logger.error("session_pointer_write_failed", email=profile.email, error=str(e))
            self._audit.log_storage_error("update_profile", str(e), profile.email)
            raise

        self._audit.log_profile_updated(profile.email, fields)
        return profile

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def add_transaction(
        self,
        description: str,
        amount: Any,
        transaction_type: Union[TransactionType, str],
        category: str,
        transaction_date: Optional[date] = None,
    ) -> Transaction:
        """Record a transaction. Newest first."""
        context = self._require_session("add transactions")
        _raise_if_invalid(self._validator.validate_transaction(
            description, amount, transaction_type, category, transaction_date,
        ))

        data = context.data
        transaction = Transaction(
            id=self._new_id({t.id for t in data.transactions}),
            description=description,
            amount=_as_decimal(amount),
            category=category,
            type=TransactionType(transaction_type),
            date=transaction_date or date.today(),
        )
        self._commit(
            data.model_copy(update={"transactions": [transaction, *data.transactions]}),
            "add_transaction",
        )

        self._audit.log_transaction_added(
            context.profile.email,
            transaction.id,
            transaction.type.value,
            str(transaction.amount),
        )
        return transaction

    def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Remove a transaction by id, keeping the order of the rest.

        Returns False (and writes nothing) for an unknown id.
        """
        context = self._require_session("delete transactions")
        data = context.data

        remaining = [t for t in data.transactions if t.id != transaction_id]
        if len(remaining) == len(data.transactions):
            return False

        self._commit(data.model_copy(update={"transactions": remaining}), "delete_transaction")
        self._audit.log_transaction_deleted(context.profile.email, transaction_id)
        return True

    def search_transactions(self, query: str) -> list[Transaction]:
        return filter_transactions(self._context.data.transactions, query)

    # =========================================================================
    # GOALS
    # =========================================================================

    def add_goal(
        self,
        name: str,
        target_amount: Any,
        deadline: date,
        current_amount: Any = Decimal("0"),
        color: Optional[str] = None,
    ) -> FinancialGoal:
        """Create a savings goal. Newest first."""
        context = self._require_session("add goals")
        _raise_if_invalid(self._validator.validate_goal(name, target_amount, current_amount, deadline))
        if color is not None:
            _raise_if_invalid(self._validator.validate_theme(color))

        data = context.data
        goal = FinancialGoal(
            id=self._new_id({g.id for g in data.goals}),
            name=name,
            target_amount=_as_decimal(target_amount),
            current_amount=_as_decimal(current_amount),
            deadline=deadline,
            color=color or data.theme.primary_color,
        )
        self._commit(data.model_copy(update={"goals": [goal, *data.goals]}), "add_goal")

        self._audit.log_goal_added(context.profile.email, goal.id, goal.name, str(goal.target_amount))
        return goal

    def delete_goal(self, goal_id: UUID) -> bool:
        """Remove a goal by id. Returns False for an unknown id."""
        context = self._require_session("delete goals")
        data = context.data

        remaining = [g for g in data.goals if g.id != goal_id]
        if len(remaining) == len(data.goals):
            return False

        self._commit(data.model_copy(update={"goals": remaining}), "delete_goal")
        self._audit.log_goal_deleted(context.profile.email, goal_id)
        return True

    def apply_deposit(self, goal_id: UUID, amount: Any) -> FinancialGoal:
        """
        Add money to a goal.

        The saved amount may pass the target; progress is clamped on read.

        Raises:
            GoalNotFoundError: No goal with this id
        """
        context = self._require_session("deposit into goals")
        _raise_if_invalid(self._validator.validate_deposit(amount))

        data = context.data
        goal = data.find_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)

        deposit = _as_decimal(amount)
        updated = goal.model_copy(update={"current_amount": goal.current_amount + deposit})
        goals = [updated if g.id == goal_id else g for g in data.goals]
        self._commit(data.model_copy(update={"goals": goals}), "apply_deposit")

        self._audit.log_goal_deposit(
            context.profile.email,
            goal_id,
            str(deposit),
            str(updated.current_amount),
        )
        return updated

    def goal_progress(self, goal: Union[FinancialGoal, UUID]) -> float:
        if isinstance(goal, UUID):
            found = self._context.data.find_goal(goal)
            if found is None:
                raise GoalNotFoundError(goal)
            goal = found
        return compute_goal_progress(goal)

    # =========================================================================
    # THEME
    # =========================================================================

    def update_theme(
        self,
        primary_color: Optional[str] = None,
        dark_mode_enabled: Optional[bool] = None,
    ) -> ThemeConfig:
        """Change the accent color and/or dark mode flag."""
        context = self._require_session("change the theme")
        _raise_if_invalid(self._validator.validate_theme(primary_color))

        current = context.data.theme
        theme = ThemeConfig(
            primary_color=primary_color if primary_color is not None else current.primary_color,
            dark_mode_enabled=(
                dark_mode_enabled if dark_mode_enabled is not None else current.dark_mode_enabled
            ),
        )
        if theme == current:
            return current

        self._commit(context.data.model_copy(update={"theme": theme}), "update_theme")
        self._audit.log_theme_updated(context.profile.email, theme.primary_color, theme.dark_mode_enabled)
        return theme

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def totals(self) -> Totals:
        return compute_totals(
            self._context.data.transactions,
            self._context.profile.monthly_income,
        )

    def weekly_series(self, reference_date: Optional[date] = None) -> list[WeeklySeriesPoint]:
        return compute_weekly_series(
            self._context.data.transactions,
            reference_date=reference_date,
            locale=self._settings.locale,
        )

    def snapshot(self) -> AdviceSnapshot:
        """Copy of the session state for the advice gateway."""
        context = self._context
        return AdviceSnapshot(
            transactions=list(context.data.transactions),
            goals=list(context.data.goals),
            profile=context.profile,
            theme=context.data.theme,
        )

    def recent_activity(self, limit: int = 20) -> list[AuditEvent]:
        """Audit events of the current user, newest first."""
        storage = self._audit.storage
        if storage is None or not self._context.is_authenticated:
            return []
        return storage.get_recent_events(limit=limit, account_email=self._context.profile.email)

    # =========================================================================
    # ADVICE
    # =========================================================================

    async def request_advice(self) -> Optional[AdviceResponse]:
        """
        Ask the assistant for saving tips.

        Returns None when a request is already pending. Never raises a
        gateway failure; the response text is always safe to show.
        """
        context = self._require_session("get advice")
        if self._advice_pending:
            logger.info("advice_request_ignored", reason="pending")
            return None

        self._advice_pending = True
        snapshot = self.snapshot()
        self._audit.log_advice_requested(
            context.profile.email,
            len(snapshot.transactions),
            len(snapshot.goals),
        )

        try:
            response = await self._advisor.request_advice(snapshot)
        except Exception as e:
            logger.exception("advice_unexpected_error", error=str(e))
            self._audit.log_error(type(e).__name__, str(e), {"operation": "request_advice"})
            response = AdviceResponse(
                text=ASSISTANT_CONNECTION_ERROR_MESSAGE,
                success=False,
                error_code="unexpected_error",
            )
        finally:
            self._advice_pending = False

        if not response.success:
            self._audit.log_advice_failed(
                context.profile.email,
                response.error_code or "unknown",
                response.text,
            )

        self._last_advice = response
        return response


def create_app_components(
    use_storage: bool = True,
    store: Optional[KeyValueStore] = None,
    advisor: Optional[FinancialAdviceAgent] = None,
) -> FinanceTracker:
    """
    Factory function to create the application controller.

    Args:
        use_storage: Whether to persist to the local data directory.
                    Set to False for an in-memory store.
        store: Explicit key-value store, overrides use_storage.
        advisor: Advice gateway, defaults to Gemini from settings.

    Returns:
        A FinanceTracker with no session yet; call restore_session().
    """
    settings = get_settings()

    if store is None:
        store = JsonFileKeyValueStore() if use_storage else InMemoryKeyValueStore()

    audit_logger = AuditLogger(KeyValueAuditStorage(store))

    return FinanceTracker(
        directory=AccountDirectory(store, BcryptCredentialVerifier()),
        sessions=SessionManager(store),
        user_data=KeyValueUserDataStore(store),
        advisor=advisor,
        audit_logger=audit_logger,
        app_settings=settings.app,
    )
