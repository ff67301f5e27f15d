"""Accounts package: registry, password hashing and the session pointer."""

from finance_tracker.accounts.credentials import (
    BcryptCredentialVerifier,
    CredentialVerifier,
)
from finance_tracker.accounts.directory import (
    AccountDirectory,
    AccountError,
    AccountNotFoundError,
    DuplicateEmailError,
    InvalidCredentialsError,
)
from finance_tracker.accounts.session import SessionContext, SessionManager

__all__ = [
    "AccountDirectory",
    "AccountError",
    "AccountNotFoundError",
    "BcryptCredentialVerifier",
    "CredentialVerifier",
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "SessionContext",
    "SessionManager",
]
