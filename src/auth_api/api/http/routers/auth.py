"""Authentication endpoints: sign-in, sign-up, email verification and passwords.

Handlers delegate each request to a single collaborator call. Collaborators
signal expected failures with :class:`AuthError`; :func:`handle_auth_error`
turns the error kind into a status code and a plain-text message.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated, Any, NamedTuple

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from loguru import logger
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from src.auth_api.api.http.app_data import ApplicationDependencies
from src.auth_api.api.http.deps import (
    get_authentication_manager,
    get_current_principal,
    get_jwt_generation_service,
    get_messages,
    get_user_cache,
    get_user_service,
)
from src.auth_api.core.errors import AuthError, AuthErrorKind, UserNotFoundError
from src.auth_api.core.models import Principal
from src.auth_api.core.services import (
    AuthenticationManager,
    JwtGeneratorService,
    LocalizedMessages,
    UserCache,
    UserService,
)
from src.auth_api.core.services.i18n import message_source as codes
from src.auth_api.entities.core.user import User
from src.auth_api.runtime.context import get_config


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthRequest(_CamelModel):
    email: EmailStr
    password: NonBlankStr


class VerifyEmailRequest(_CamelModel):
    token: NonBlankStr


class UpdatePasswordRequest(_CamelModel):
    current_password: NonBlankStr
    new_password: NonBlankStr


class SendEmailRequest(_CamelModel):
    email: EmailStr


class ResetPasswordRequest(_CamelModel):
    token: NonBlankStr
    password: NonBlankStr


class UserDto(_CamelModel):
    """Public view of a user; never carries credentials or tokens."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    role: str
    disabled: bool
    email_verified: bool
    provider: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserDto":
        return cls.model_validate(user, from_attributes=True)


# --- Handlers ---


def get_current_user(
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
    messages: LocalizedMessages = Depends(get_messages),
) -> UserDto:
    logger.info("Get current user.")
    user = user_service.get_user_by_email(principal.email)
    if user is None:
        raise UserNotFoundError(
            messages.get(codes.USER_NOT_FOUND_BY_EMAIL, principal.email)
        )
    return UserDto.from_user(user)


def local_login(
    auth_request: AuthRequest,
    user_cache: UserCache = Depends(get_user_cache),
    authentication_manager: AuthenticationManager = Depends(get_authentication_manager),
    jwt_service: JwtGeneratorService = Depends(get_jwt_generation_service),
) -> PlainTextResponse:
    logger.info("Login method.")
    # credentials must be checked against current state, not a stale entry
    user_cache.remove_user_from_cache(auth_request.email)
    authentication_manager.authenticate(auth_request.email, auth_request.password)
    return PlainTextResponse(jwt_service.generate_token(auth_request.email))


def sign_in_google() -> RedirectResponse:
    logger.info("Google sign in.")
    return RedirectResponse(get_config().auth.oauth_authorization_path, status_code=302)


def sign_up(
    auth_request: AuthRequest,
    user_service: UserService = Depends(get_user_service),
    jwt_service: JwtGeneratorService = Depends(get_jwt_generation_service),
) -> PlainTextResponse:
    logger.info("Sign up.")
    user_service.create_user_and_send_email(auth_request.email, auth_request.password)
    return PlainTextResponse(jwt_service.generate_token(auth_request.email))


def verify_email(
    verify_email_request: VerifyEmailRequest,
    user_service: UserService = Depends(get_user_service),
) -> Response:
    logger.info("Verify email.")
    user_service.update_email_verification(verify_email_request.token)
    return Response(status_code=200)


def update_password(
    password_request: UpdatePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
) -> Response:
    logger.info("Update user password.")
    user_service.update_user_password(
        principal.email,
        password_request.current_password,
        password_request.new_password,
    )
    return Response(status_code=200)


def send_email_for_reset_password(
    send_email_request: SendEmailRequest,
    user_service: UserService = Depends(get_user_service),
    messages: LocalizedMessages = Depends(get_messages),
) -> Response:
    logger.info("Send email for reset password.")
    email = send_email_request.email
    if user_service.get_user_by_email(email) is None:
        raise UserNotFoundError(messages.get(codes.USER_NOT_FOUND_BY_EMAIL, email))
    user_service.update_user_password_reset_token_and_send_email(email)
    return Response(status_code=200)


def reset_password(
    reset_password_request: ResetPasswordRequest,
    user_service: UserService = Depends(get_user_service),
) -> UserDto:
    logger.info("Reset password.")
    user = user_service.update_user_password_by_password_reset_token(
        reset_password_request.token, reset_password_request.password
    )
    return UserDto.from_user(user)


# --- Route table ---


class AuthRoute(NamedTuple):
    method: str
    path: str
    endpoint: Callable[..., Any]
    response_model: type[BaseModel] | None = None
    response_class: type[Response] = JSONResponse


AUTH_ROUTES: tuple[AuthRoute, ...] = (
    AuthRoute("GET", "/me", get_current_user, UserDto),
    AuthRoute("POST", "/signin/local", local_login, None, PlainTextResponse),
    AuthRoute("GET", "/signin/google", sign_in_google, None, RedirectResponse),
    AuthRoute("POST", "/signup", sign_up, None, PlainTextResponse),
    AuthRoute("PUT", "/verify-email", verify_email),
    AuthRoute("PUT", "/password-update", update_password),
    AuthRoute("POST", "/send-password-reset-email", send_email_for_reset_password),
    AuthRoute("PUT", "/password-reset", reset_password, UserDto),
)


def build_auth_router(routes: tuple[AuthRoute, ...] = AUTH_ROUTES) -> APIRouter:
    router = APIRouter(prefix="/auth", tags=["auth"])
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            response_model=route.response_model,
            response_class=route.response_class,
            name=route.endpoint.__name__,
        )
    return router


router_auth = build_auth_router()


# --- Error mapping ---


ERROR_STATUS: dict[AuthErrorKind, int] = {
    AuthErrorKind.INVALID_CREDENTIALS: 400,
    AuthErrorKind.USER_NOT_FOUND: 400,
    AuthErrorKind.NO_SUCH_ELEMENT: 400,
    AuthErrorKind.MAIL_DELIVERY_FAILED: 409,
    AuthErrorKind.USER_ALREADY_EXISTS: 409,
}


def _error_message(request: Request, exc: AuthError) -> str:
    if exc.kind is not AuthErrorKind.INVALID_CREDENTIALS:
        return exc.message

    # never echo which credential was wrong
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    source = app_deps.message_source
    locale = source.resolve_locale(request.headers.get("accept-language"))
    return source.get_message(codes.INVALID_CREDENTIALS, locale=locale)


async def handle_auth_error(request: Request, exc: AuthError) -> PlainTextResponse:
    logger.opt(exception=exc).error(
        "{} handler ({}).", type(exc).__name__, exc.kind.value
    )
    return PlainTextResponse(
        _error_message(request, exc), status_code=ERROR_STATUS[exc.kind]
    )
