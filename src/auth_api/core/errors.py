"""Error kinds raised by authentication collaborators.

Collaborators signal expected failures with an :class:`AuthError` carrying an
:class:`AuthErrorKind`; the HTTP layer maps the kind to a status code.
"""

from enum import Enum


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    USER_NOT_FOUND = "user_not_found"
    NO_SUCH_ELEMENT = "no_such_element"
    MAIL_DELIVERY_FAILED = "mail_delivery_failed"
    USER_ALREADY_EXISTS = "user_already_exists"


class AuthError(Exception):
    """Base class for expected authentication failures."""

    kind: AuthErrorKind

    def __init__(self, message: str = "", kind: AuthErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        elif not hasattr(self, "kind"):
            raise TypeError(f"{type(self).__name__} requires an AuthErrorKind")

    @property
    def message(self) -> str:
        return str(self)


class InvalidCredentialsError(AuthError):
    kind = AuthErrorKind.INVALID_CREDENTIALS


class UserNotFoundError(AuthError):
    kind = AuthErrorKind.USER_NOT_FOUND


class NoSuchElementError(AuthError):
    """Raised when a token or record referenced by the request does not exist."""

    kind = AuthErrorKind.NO_SUCH_ELEMENT


class MailDeliveryError(AuthError):
    kind = AuthErrorKind.MAIL_DELIVERY_FAILED


class UserAlreadyExistsError(AuthError):
    kind = AuthErrorKind.USER_ALREADY_EXISTS
