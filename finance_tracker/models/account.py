"""
Account Models for FB finance

Credential records live in the user registry. Profiles are what the rest
of the application sees after login: a profile never carries the
password hash.
"""

import base64
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254

PICTURE_MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}


def normalize_email(email: str) -> str:
    """Emails are compared trimmed and lowercased everywhere."""
    return (email or "").strip().lower()


def picture_data_uri(content: bytes, mime_type: str) -> str:
    """Uploaded photos are stored inline, as the browser would read them."""
    if mime_type not in PICTURE_MIME_TYPES.values():
        raise ValueError(f"Unsupported picture type: {mime_type}")
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class CredentialRecord(BaseModel):
    """
    One registered account.

    CRITICAL: Only the bcrypt hash of the password is stored.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_NAME_LENGTH,
        description="Display name"
    )
    email: str = Field(
        ...,
        min_length=1,
        max_length=MAX_EMAIL_LENGTH,
        description="Normalized email, unique across the registry"
    )
    password_hash: str = Field(
        ...,
        min_length=1,
        description="bcrypt hash of the password"
    )
    profile_picture: str = Field(
        default="",
        description="Picture URI or generated avatar URL"
    )
    monthly_income: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Base income added to income totals"
    )

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)

    def to_profile(self, currency: str) -> "UserProfile":
        return UserProfile(
            name=self.name,
            email=self.email,
            profile_picture=self.profile_picture,
            monthly_income=self.monthly_income,
            currency=currency,
        )


class UserProfile(BaseModel):
    """
    The authenticated user as seen by the application.

    This is also what the session pointer stores.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    email: str = ""
    profile_picture: str = ""
    monthly_income: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = "R$"

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)

    @classmethod
    def anonymous(cls, currency: str = "R$") -> "UserProfile":
        """Profile used while nobody is logged in."""
        return cls(currency=currency)

    @property
    def is_anonymous(self) -> bool:
        return not self.email


class ProfilePatch(BaseModel):
    """
    Editable profile fields.

    The email is the account key and cannot be patched.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: Optional[str] = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    profile_picture: Optional[str] = None
    monthly_income: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)

    def changed_fields(self) -> dict:
        return self.model_dump(exclude_none=True)
