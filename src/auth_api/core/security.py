"""Security utilities: password hashing and single-use token generation."""

import base64
import secrets

from passlib.context import CryptContext


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token.

    Args:
        length: Number of random bytes to generate (default 32)

    Returns:
        URL-safe base64 encoded token
    """
    return (
        base64.urlsafe_b64encode(secrets.token_bytes(length))
        .decode("utf-8")
        .rstrip("=")
    )


class PasswordHasher:
    """Hash and verify user passwords."""

    def __init__(self, schemes: list[str] | None = None) -> None:
        self._context = CryptContext(
            schemes=schemes or ["pbkdf2_sha256"], deprecated="auto"
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Return True when ``password`` matches ``password_hash``.

        A missing or unrecognised hash never matches.
        """
        if not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            return False
