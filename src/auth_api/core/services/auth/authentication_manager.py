from typing import Protocol

from loguru import logger

from src.auth_api.core.errors import InvalidCredentialsError
from src.auth_api.core.models import UserDetails
from src.auth_api.core.security import PasswordHasher
from src.auth_api.core.services.cache.user_cache import UserCache
from src.auth_api.entities.core.user import User


class UserLookup(Protocol):
    def get_by_email(self, email: str) -> User | None: ...


class AuthenticationManager:
    """Checks email/password credentials against stored user details.

    Details are read through the user cache; on a miss they are loaded from
    the repository and cached. Every failure (unknown email, disabled account,
    wrong password) raises the same :class:`InvalidCredentialsError` so callers
    cannot tell which part was wrong.
    """

    def __init__(
        self,
        users: UserLookup,
        user_cache: UserCache,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._user_cache = user_cache
        self._password_hasher = password_hasher

    def load_user_details(self, email: str) -> UserDetails | None:
        details = self._user_cache.get_user_from_cache(email)
        if details is not None:
            return details

        user = self._users.get_by_email(email)
        if user is None:
            return None

        details = user.to_user_details()
        self._user_cache.put_user_in_cache(details)
        return details

    def authenticate(self, email: str, password: str) -> UserDetails:
        details = self.load_user_details(email)
        if details is None:
            logger.debug("Authentication failed: no user for {}", email)
            raise InvalidCredentialsError("Bad credentials")

        if not details.enabled:
            logger.debug("Authentication failed: account {} is disabled", email)
            raise InvalidCredentialsError("Bad credentials")

        if not self._password_hasher.verify(password, details.password_hash):
            logger.debug("Authentication failed: password mismatch for {}", email)
            raise InvalidCredentialsError("Bad credentials")

        return details
