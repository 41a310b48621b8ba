"""Authentication value objects shared by services and the HTTP layer."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TokenClaims(BaseModel):
    """Structured representation of the claims of an API token."""

    raw_token: str = Field(default="", description="Original JWT token")

    issuer: str = Field(description="Issuer")
    subject: str = Field(description="Subject (user email)")
    audience: str | list[str] = Field(description="Audience")
    expires_at: int = Field(description="Expiration time")
    issued_at: int = Field(description="Issued at")
    not_before: int | None = Field(default=None, description="Not before")
    jti: str | None = Field(default=None, description="JWT ID (unique token identifier)")

    custom_claims: dict[str, Any] = Field(
        default_factory=dict, description="Claims outside the registered set"
    )

    @classmethod
    def from_jwt_payload(cls, payload: dict[str, Any], raw_token: str = "") -> "TokenClaims":
        """Create TokenClaims from a decoded JWT payload."""
        registered = {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}
        return cls(
            raw_token=raw_token,
            issuer=payload["iss"],
            subject=payload["sub"],
            audience=payload["aud"],
            expires_at=payload["exp"],
            issued_at=payload["iat"],
            not_before=payload.get("nbf"),
            jti=payload.get("jti"),
            custom_claims={k: v for k, v in payload.items() if k not in registered},
        )


class Principal(BaseModel):
    """The authenticated identity attached to a request."""

    model_config = ConfigDict(frozen=True)

    email: str
    claims: TokenClaims | None = None


class UserDetails(BaseModel):
    """Credential view of a user, as held by the user-details cache."""

    model_config = ConfigDict(frozen=True)

    username: str
    password_hash: str | None = None
    enabled: bool = True
