from dataclasses import dataclass

from src.auth_api.core.security import PasswordHasher
from src.auth_api.core.services import (
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    MailService,
    MessageSource,
    UserCache,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    user_cache: UserCache
    password_hasher: PasswordHasher
    jwt_generation_service: JwtGeneratorService
    jwt_verify_service: JwtVerificationService
    mail_service: MailService
    message_source: MessageSource
