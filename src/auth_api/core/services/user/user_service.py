from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlmodel import Session

from src.auth_api.core.errors import (
    InvalidCredentialsError,
    MailDeliveryError,
    NoSuchElementError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from src.auth_api.core.security import PasswordHasher, generate_secure_token
from src.auth_api.core.services.cache.user_cache import UserCache
from src.auth_api.core.services.i18n import message_source as codes
from src.auth_api.core.services.i18n.message_source import LocalizedMessages
from src.auth_api.core.services.mail.mail_service import MailService
from src.auth_api.entities.core.user import User, UserRepository
from src.auth_api.runtime.config.config_data import AuthConfig


class UserService:
    """Account lifecycle: sign-up, email verification and password changes.

    Each mutating call runs in its own transaction on ``db_session``; mail
    failures roll the transaction back so no half-registered user or dangling
    token is left behind.
    """

    def __init__(
        self,
        db_session: Session,
        password_hasher: PasswordHasher,
        mail_service: MailService,
        user_cache: UserCache,
        messages: LocalizedMessages,
        auth_config: AuthConfig,
    ):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)
        self._password_hasher = password_hasher
        self._mail_service = mail_service
        self._user_cache = user_cache
        self._messages = messages
        self._auth_config = auth_config

    def get_user_by_email(self, email: str) -> User | None:
        return self._user_repo.get_by_email(email)

    def create_user_and_send_email(self, email: str, password: str) -> User:
        if self._user_repo.get_by_email(email) is not None:
            raise UserAlreadyExistsError(
                self._messages.get(codes.USER_ALREADY_EXISTS, email)
            )

        token = generate_secure_token()
        new_user = User(
            email=email,
            password_hash=self._password_hasher.hash(password),
            email_verification_token=token,
            email_verification_token_expires_at=self._expires_in(
                self._auth_config.email_verification_token_ttl_seconds
            ),
        )

        try:
            created_user = self._user_repo.create(new_user)
            self._mail_service.send_email_verification(email, token)
            self._db_session.commit()
        except MailDeliveryError as e:
            self._db_session.rollback()
            raise MailDeliveryError(
                self._messages.get(codes.MAIL_SEND_FAILED, email)
            ) from e
        except Exception as e:
            logger.error(f"Error creating user {email}: {e}")
            self._db_session.rollback()
            raise

        logger.info("Created user {}", created_user.id)
        return created_user

    def update_email_verification(self, token: str) -> User:
        user = self._user_repo.get_by_email_verification_token(token)
        if user is None or not user.is_email_verification_token_valid():
            raise NoSuchElementError(
                self._messages.get(codes.VERIFICATION_TOKEN_NOT_FOUND)
            )

        user.email_verified = True
        user.email_verification_token = None
        user.email_verification_token_expires_at = None
        return self._save(user)

    def update_user_password(
        self, email: str, current_password: str, new_password: str
    ) -> User:
        user = self._user_repo.get_by_email(email)
        if user is None:
            raise UserNotFoundError(
                self._messages.get(codes.USER_NOT_FOUND_BY_EMAIL, email)
            )

        if not self._password_hasher.verify(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password does not match")

        user.password_hash = self._password_hasher.hash(new_password)
        return self._save(user)

    def update_user_password_reset_token_and_send_email(self, email: str) -> User:
        user = self._user_repo.get_by_email(email)
        if user is None:
            raise UserNotFoundError(
                self._messages.get(codes.USER_NOT_FOUND_BY_EMAIL, email)
            )

        token = generate_secure_token()
        user.password_reset_token = token
        user.password_reset_token_expires_at = self._expires_in(
            self._auth_config.password_reset_token_ttl_seconds
        )

        try:
            updated_user = self._user_repo.update(user)
            self._mail_service.send_password_reset(email, token)
            self._db_session.commit()
        except MailDeliveryError as e:
            self._db_session.rollback()
            raise MailDeliveryError(
                self._messages.get(codes.MAIL_SEND_FAILED, email)
            ) from e
        except Exception:
            self._db_session.rollback()
            raise

        return updated_user

    def update_user_password_by_password_reset_token(
        self, token: str, password: str
    ) -> User:
        user = self._user_repo.get_by_password_reset_token(token)
        if user is None or not user.is_password_reset_token_valid():
            raise NoSuchElementError(self._messages.get(codes.RESET_TOKEN_NOT_FOUND))

        user.password_hash = self._password_hasher.hash(password)
        user.password_reset_token = None
        user.password_reset_token_expires_at = None
        return self._save(user)

    def _save(self, user: User) -> User:
        try:
            updated_user = self._user_repo.update(user)
            self._db_session.commit()
        except Exception:
            self._db_session.rollback()
            raise

        # cached credentials are stale once the row changes
        self._user_cache.remove_user_from_cache(updated_user.email)
        return updated_user

    @staticmethod
    def _expires_in(seconds: int) -> datetime:
        return datetime.now(UTC) + timedelta(seconds=seconds)
