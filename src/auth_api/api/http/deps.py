"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.auth_api.api.http.app_data import ApplicationDependencies
from src.auth_api.core.models import Principal
from src.auth_api.core.security import PasswordHasher
from src.auth_api.core.services import (
    AuthenticationManager,
    JwtGeneratorService,
    JwtVerificationService,
    LocalizedMessages,
    MailService,
    MessageSource,
    UserCache,
    UserService,
)
from src.auth_api.entities.core.user import UserRepository
from src.auth_api.runtime.context import get_config


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session for the duration of the request."""
    session = _app_deps(request).database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_user_cache(request: Request) -> UserCache:
    """Get the user-details cache instance."""
    return _app_deps(request).user_cache


def get_password_hasher(request: Request) -> PasswordHasher:
    """Get the password hasher instance."""
    return _app_deps(request).password_hasher


def get_jwt_generation_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    return _app_deps(request).jwt_generation_service


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    return _app_deps(request).jwt_verify_service


def get_mail_service(request: Request) -> MailService:
    """Get the mail service instance."""
    return _app_deps(request).mail_service


def get_message_source(request: Request) -> MessageSource:
    """Get the localized message source instance."""
    return _app_deps(request).message_source


def get_messages(
    request: Request,
    message_source: MessageSource = Depends(get_message_source),
) -> LocalizedMessages:
    """Messages bound to the locale named by the request's Accept-Language header."""
    locale = message_source.resolve_locale(request.headers.get("accept-language"))
    return LocalizedMessages(message_source, locale)


def get_authentication_manager(
    db: Session = Depends(get_db_session),
    user_cache: UserCache = Depends(get_user_cache),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthenticationManager:
    """Get an authentication manager reading users through the request session."""
    return AuthenticationManager(UserRepository(db), user_cache, password_hasher)


def get_user_service(
    db: Session = Depends(get_db_session),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    mail_service: MailService = Depends(get_mail_service),
    user_cache: UserCache = Depends(get_user_cache),
    messages: LocalizedMessages = Depends(get_messages),
) -> UserService:
    """Get the User service instance."""
    return UserService(
        db,
        password_hasher,
        mail_service,
        user_cache,
        messages,
        get_config().auth,
    )


def get_current_principal(
    request: Request,
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
) -> Principal:
    """Authenticate the request using a Bearer token issued by this API."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Missing Bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = auth_header.split(" ", 1)[1].strip()
    claims = jwt_verify.verify_jwt(token)

    request.state.claims = claims
    return Principal(email=claims.subject, claims=claims)
