"""
Password Hashing

DESIGN DECISION: Password checks go through a CredentialVerifier so the
account directory never touches raw hashing code. bcrypt salts every
hash and its checkpw comparison is constant-time.
"""

from abc import ABC, abstractmethod
from typing import Optional

import bcrypt

from finance_tracker.config import get_settings


# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


class CredentialVerifier(ABC):
    """Hashes and verifies passwords independently of storage."""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        pass

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        pass

    @property
    @abstractmethod
    def dummy_hash(self) -> str:
        """
        A valid hash of a random value.

        Verified against when an email is unknown so that a missing
        account costs the same as a wrong password.
        """
        pass


class BcryptCredentialVerifier(CredentialVerifier):
    """bcrypt-backed verifier."""

    def __init__(self, rounds: Optional[int] = None):
        self._rounds = rounds or get_settings().app.bcrypt_rounds
        self._dummy_hash: Optional[str] = None

    def hash_password(self, password: str) -> str:
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            # Over-long password or a hash bcrypt cannot parse
            return False

    @property
    def dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                bcrypt.gensalt(rounds=self._rounds),
                bcrypt.gensalt(rounds=self._rounds),
            ).decode("utf-8")
        return self._dummy_hash
