"""Authentication models."""

from .auth import Principal, TokenClaims, UserDetails

__all__ = ["Principal", "TokenClaims", "UserDetails"]
