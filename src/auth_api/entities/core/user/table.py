"""User database table model."""

from datetime import datetime

from sqlmodel import Field

from src.auth_api.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "users"

    email: str = Field(index=True, unique=True)
    password_hash: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    role: str = "user"
    disabled: bool = False
    email_verified: bool = False
    email_verification_token: str | None = Field(default=None, index=True)
    email_verification_token_expires_at: datetime | None = None
    password_reset_token: str | None = Field(default=None, index=True)
    password_reset_token_expires_at: datetime | None = None
    provider: str = "local"
