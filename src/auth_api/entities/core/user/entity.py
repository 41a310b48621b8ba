"""User domain entity."""

from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from src.auth_api.core.models import UserDetails
from src.auth_api.entities.core._base import Entity


def _as_aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class User(Entity):
    """User entity representing an account that can sign in.

    This is the domain model that contains business logic and validation.
    It inherits from Entity to get auto-generated UUID identifiers.
    """

    email: str = Field(description="User's email address, used as the login name")
    password_hash: str | None = Field(default=None, description="Hashed password")
    first_name: str | None = Field(default=None, description="User's first name")
    last_name: str | None = Field(default=None, description="User's last name")
    phone_number: str | None = Field(default=None, description="User's phone number")
    role: str = Field(default="user", description="Application role")
    disabled: bool = Field(default=False, description="Whether sign-in is blocked")
    email_verified: bool = Field(default=False, description="Email ownership confirmed")
    email_verification_token: str | None = None
    email_verification_token_expires_at: datetime | None = None
    password_reset_token: str | None = None
    password_reset_token_expires_at: datetime | None = None
    provider: str = Field(default="local", description="Identity provider")

    def to_user_details(self) -> UserDetails:
        return UserDetails(
            username=self.email,
            password_hash=self.password_hash,
            enabled=not self.disabled,
        )

    def is_email_verification_token_valid(self, now: datetime | None = None) -> bool:
        expires_at = self.email_verification_token_expires_at
        if not self.email_verification_token or expires_at is None:
            return False
        return _as_aware(expires_at) > (now or datetime.now(UTC))

    def is_password_reset_token_valid(self, now: datetime | None = None) -> bool:
        expires_at = self.password_reset_token_expires_at
        if not self.password_reset_token or expires_at is None:
            return False
        return _as_aware(expires_at) > (now or datetime.now(UTC))

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.role == other.role
            and self.disabled == other.disabled
            and self.email_verified == other.email_verified
        )

    def __hash__(self) -> int:
        """Hash based on identity attributes, ignoring timestamps."""
        return hash((self.id, self.email))
