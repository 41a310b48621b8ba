"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class JWTConfig(BaseModel):
    """JWT signing and validation configuration."""

    secret: str | None = Field(
        default=None, description="Secret used to sign and verify API tokens"
    )
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="Signing algorithm"
    )
    issuer: str = Field(
        default="auth-api", description="Issuer name to use when generating tokens"
    )
    audiences: list[str] = Field(
        default_factory=lambda: ["api://default"],
        description="JWT audiences that this API issues and accepts",
    )
    expires_in_seconds: int = Field(
        default=6 * 3600, description="Lifetime of issued tokens in seconds"
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")


class AuthConfig(BaseModel):
    """Authentication flow configuration."""

    oauth_authorization_path: str = Field(
        default="/api/oauth2/authorization/google",
        description="Where GET /auth/signin/google redirects to",
    )
    email_verification_token_ttl_seconds: int = Field(
        default=24 * 3600, description="Lifetime of email verification tokens"
    )
    password_reset_token_ttl_seconds: int = Field(
        default=3600, description="Lifetime of password reset tokens"
    )
    user_cache_size: int = Field(
        default=1024, description="Maximum cached user-details entries"
    )
    user_cache_ttl_seconds: int = Field(
        default=300, description="Time to live of cached user-details entries"
    )
    default_locale: str = Field(
        default="en", description="Locale used when the request names none we know"
    )


class MailConfig(BaseModel):
    """Outgoing mail configuration."""

    enabled: bool = Field(default=False, description="Send emails over SMTP")
    smtp_host: str = Field(default="localhost", description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_user: str | None = Field(default=None, description="SMTP login user")
    smtp_password: str | None = Field(default=None, description="SMTP login password")
    use_tls: bool = Field(default=True, description="Issue STARTTLS before login")
    timeout_seconds: float = Field(default=10.0, description="SMTP socket timeout")
    from_address: str = Field(
        default="no-reply@example.com", description="Sender address"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./data/auth.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string, injecting a file-mounted password."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if not self.password_file:
            return self.url

        if base_url.password:
            logger.warning(
                "Database URL already contains a password; ignoring password_file"
            )
            return self.url

        try:
            with open(self.password_file) as f:
                password = f.read().strip()
        except OSError as e:
            raise ValueError("Failed to read database password from file.") from e

        return base_url.set(password=password).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used to build links in outgoing emails",
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="JWT configuration"
    )
    auth: AuthConfig = Field(
        default_factory=AuthConfig, description="Authentication flow configuration"
    )
    mail: MailConfig = Field(
        default_factory=MailConfig, description="Outgoing mail configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
