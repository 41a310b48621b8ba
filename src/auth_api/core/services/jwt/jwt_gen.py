import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from src.auth_api.runtime.config.config_data import ConfigData
from src.auth_api.runtime.context import get_config

REGISTERED_CLAIMS = {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}


class JwtGeneratorService:
    """Service for generating JWT tokens for API authentication."""

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int | None = None,
        issuer: str | None = None,
        audience: str | list[str] | None = None,
        include_jti: bool = True,
        secret: str | None = None,
    ) -> str:
        """Generate a signed JWT token using authlib.

        Args:
            subject: Subject (sub) claim
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime (defaults to config lifetime)
            issuer: Issuer (iss) claim (defaults to config issuer)
            audience: Audience (aud) claim (defaults to config audiences)
            include_jti: Whether to include a unique JWT ID claim
            secret: Optional signing secret. If None, the config secret is used.

        Returns:
            Signed JWT token string

        Raises:
            RuntimeError: If no signing secret is configured or encoding fails
        """
        config: ConfigData = get_config()
        jwt_config = config.jwt

        secret = secret or jwt_config.secret
        if not secret:
            raise RuntimeError("JWT signing secret not configured")

        now = int(time.time())
        lifetime = (
            expires_in_seconds
            if expires_in_seconds is not None
            else jwt_config.expires_in_seconds
        )

        payload: dict[str, Any] = {
            "iss": issuer or jwt_config.issuer,
            "sub": subject,
            "aud": audience or jwt_config.audiences,
            "exp": now + lifetime,
            "iat": now,
            "nbf": now,
        }

        if include_jti:
            payload["jti"] = generate_token(16)

        # registered claims are never overridden by custom ones
        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in REGISTERED_CLAIMS}
            )

        header = {"alg": jwt_config.algorithm, "typ": "JWT"}
        try:
            token = jwt.encode(header, payload, secret)
        except JoseError as e:
            logger.error("JWT encoding failed: {}", e)
            raise RuntimeError(f"JWT encoding failed: {e}") from e

        return token.decode() if isinstance(token, bytes) else token

    def generate_token(self, email: str, **extra_claims: Any) -> str:
        """Issue the API access token for a signed-in user identified by email."""
        return self.generate_jwt(subject=email, claims=extra_claims or None)
