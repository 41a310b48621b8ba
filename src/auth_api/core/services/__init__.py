"""Core services exports."""

from .auth.authentication_manager import AuthenticationManager
from .cache.user_cache import UserCache, UserCacheInMemory
from .database.db_session import DbSessionService
from .i18n.message_source import LocalizedMessages, MessageSource
from .jwt.jwt_gen import JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService
from .mail.mail_service import MailService, SmtpMailService
from .user.user_service import UserService

__all__ = [
    # Authentication
    "AuthenticationManager",
    "UserCache",
    "UserCacheInMemory",
    # JWT Services
    "JwtGeneratorService",
    "JwtVerificationService",
    # User Services
    "UserService",
    "MailService",
    "SmtpMailService",
    # Messages
    "MessageSource",
    "LocalizedMessages",
    # Database Service
    "DbSessionService",
]
