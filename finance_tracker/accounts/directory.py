"""
Account Directory

The user registry is a single list of credential records stored under
the "users_registry" key. Emails are the account ids: they are trimmed,
lowercased and unique.

CRITICAL: Login failures are uniform. The caller cannot tell an
unknown email from a wrong password, and neither can a stopwatch.
"""

from typing import Optional
from urllib.parse import quote

import structlog
from pydantic import ValidationError

from finance_tracker.accounts.credentials import CredentialVerifier
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.account import (
    CredentialRecord,
    ProfilePatch,
    UserProfile,
    normalize_email,
)
from finance_tracker.services.storage import (
    USERS_REGISTRY_KEY,
    KeyValueStore,
    MalformedPayloadError,
)


logger = structlog.get_logger(__name__)


class AccountError(Exception):
    """Base exception for account operations."""
    pass


class DuplicateEmailError(AccountError):
    """An account with this email already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("This email is already registered.")


class InvalidCredentialsError(AccountError):
    """Email/password pair did not match an account."""

    def __init__(self):
        super().__init__("Incorrect email or password.")


class AccountNotFoundError(AccountError):
    """No account is registered under this email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account not found: {email}")


class AccountDirectory:
    """
    Registration, login and profile edits over the user registry.

    Every call reads the registry fresh and every change writes it back
    whole, so the directory holds no state of its own.
    """

    def __init__(
        self,
        store: KeyValueStore,
        verifier: CredentialVerifier,
        app_settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._verifier = verifier
        self._settings = app_settings or get_settings().app

    def _load_records(self) -> list[CredentialRecord]:
        """
        Read the registry.

        Raises:
            MalformedPayloadError: If the registry cannot be decoded
        """
        raw = self._store.get(USERS_REGISTRY_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise MalformedPayloadError(USERS_REGISTRY_KEY, "registry is not a list")

        try:
            return [CredentialRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            raise MalformedPayloadError(
                USERS_REGISTRY_KEY,
                f"{e.error_count()} validation errors",
            )

    def _save_records(self, records: list[CredentialRecord]) -> None:
        self._store.set(
            USERS_REGISTRY_KEY,
            [record.model_dump(mode="json") for record in records],
        )

    def _avatar_for(self, name: str) -> str:
        return self._settings.avatar_url_template.format(seed=quote(name.strip()))

    def count(self) -> int:
        return len(self._load_records())

    def get(self, email: str) -> Optional[CredentialRecord]:
        normalized = normalize_email(email)
        for record in self._load_records():
            if record.email == normalized:
                return record
        return None

    def register(self, name: str, email: str, password: str) -> CredentialRecord:
        """
        Create a new account.

        Raises:
            DuplicateEmailError: If the normalized email is taken
            StorageError: If the registry cannot be read or written
        """
        normalized = normalize_email(email)
        records = self._load_records()

        if any(record.email == normalized for record in records):
            raise DuplicateEmailError(normalized)

        record = CredentialRecord(
            name=name,
            email=normalized,
            password_hash=self._verifier.hash_password(password),
            profile_picture=self._avatar_for(name),
        )
        records.append(record)
        self._save_records(records)

        logger.info("account_registered", email=normalized, registry_size=len(records))
        return record

    def authenticate(self, email: str, password: str) -> UserProfile:
        """
        Check an email/password pair.

        Returns:
            The profile derived from the matching record

        Raises:
            InvalidCredentialsError: For an unknown email or a wrong password
        """
        record = self.get(email)

        if record is None:
            # Burn the same bcrypt cost as a real check
            self._verifier.verify(password, self._verifier.dummy_hash)
            raise InvalidCredentialsError()

        if not self._verifier.verify(password, record.password_hash):
            raise InvalidCredentialsError()

        return record.to_profile(self._settings.currency)

    def update_profile(self, email: str, patch: ProfilePatch) -> CredentialRecord:
        """
        Merge patch fields into the matching record in place.

        Raises:
            AccountNotFoundError: If no record matches
        """
        normalized = normalize_email(email)
        records = self._load_records()

        for idx, record in enumerate(records):
            if record.email == normalized:
                updated = CredentialRecord.model_validate(
                    {**record.model_dump(), **patch.changed_fields()}
                )
                records[idx] = updated
                self._save_records(records)
                return updated

        raise AccountNotFoundError(normalized)
