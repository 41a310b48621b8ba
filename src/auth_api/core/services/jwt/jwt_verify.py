"""JWT verification service."""

from authlib.jose import JoseError, jwt
from fastapi import HTTPException
from loguru import logger

from src.auth_api.core.models import TokenClaims
from src.auth_api.runtime.context import get_config


def _as_list(v):
    return [v] if isinstance(v, str) else list(v or ())


class JwtVerificationService:
    """Verifies tokens issued by :class:`JwtGeneratorService`."""

    def verify_jwt(self, token: str, *, secret: str | None = None) -> TokenClaims:
        cfg = get_config()
        jwt_config = cfg.jwt

        key = secret or jwt_config.secret
        if not key:
            raise HTTPException(status_code=500, detail="JWT signing secret not configured")

        claims_options = {
            "iss": {"essential": True, "value": jwt_config.issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
            "iat": {"essential": True},
        }

        try:
            claims = jwt.decode(
                token,
                key,
                claims_options=claims_options,
            )
            claims.validate(leeway=jwt_config.clock_skew)
        except JoseError as e:
            logger.debug("JWT rejected: {}", e)
            raise HTTPException(status_code=401, detail="Invalid token") from e
        except ValueError as e:
            # malformed token segments
            logger.debug("JWT could not be parsed: {}", e)
            raise HTTPException(status_code=401, detail="Invalid token") from e

        if claims.header.get("alg") != jwt_config.algorithm:
            raise HTTPException(status_code=401, detail="Disallowed JWT algorithm")

        token_audiences = set(_as_list(claims.get("aud")))
        if jwt_config.audiences and not token_audiences & set(jwt_config.audiences):
            raise HTTPException(status_code=401, detail="Invalid audience")

        return TokenClaims.from_jwt_payload(dict(claims), raw_token=token)
