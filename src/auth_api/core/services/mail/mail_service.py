"""Email service for verification and password reset emails."""

import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from urllib.parse import urlencode

from loguru import logger

from src.auth_api.core.errors import MailDeliveryError
from src.auth_api.runtime.config.config_data import MailConfig


class MailService(ABC):
    """Sends the account emails the user service needs."""

    def __init__(self, frontend_url: str) -> None:
        self._frontend_url = frontend_url.rstrip("/")

    @abstractmethod
    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        """Deliver a message or raise :class:`MailDeliveryError`."""
        raise NotImplementedError

    def link(self, path: str, token: str) -> str:
        return f"{self._frontend_url}/{path.lstrip('/')}?{urlencode({'token': token})}"

    def send_email_verification(self, to_email: str, token: str) -> None:
        url = self.link("verify-email", token)
        subject = "Verify your email"
        text_body = (
            "Hello,\n\n"
            "Follow this link to verify your email address:\n"
            f"{url}\n\n"
            "If you didn't ask to verify this address, you can ignore this email."
        )
        html_body = (
            "<p>Hello,</p>"
            "<p>Follow this link to verify your email address:</p>"
            f'<p><a href="{url}">{url}</a></p>'
            "<p>If you didn't ask to verify this address, you can ignore this email.</p>"
        )
        self.send(to_email, subject, text_body, html_body)

    def send_password_reset(self, to_email: str, token: str) -> None:
        url = self.link("password-reset", token)
        subject = "Reset your password"
        text_body = (
            "Hello,\n\n"
            "Follow this link to reset your password:\n"
            f"{url}\n\n"
            "If you didn't ask to reset your password, you can ignore this email."
        )
        html_body = (
            "<p>Hello,</p>"
            "<p>Follow this link to reset your password:</p>"
            f'<p><a href="{url}">{url}</a></p>'
            "<p>If you didn't ask to reset your password, you can ignore this email.</p>"
        )
        self.send(to_email, subject, text_body, html_body)


class SmtpMailService(MailService):
    """Service for sending emails via SMTP."""

    def __init__(self, config: MailConfig, frontend_url: str) -> None:
        super().__init__(frontend_url)
        self._config = config

        if not config.enabled:
            logger.warning("[Email] SMTP disabled. Emails will be logged, not sent.")
        else:
            logger.info(
                "[Email] Service initialized: {}:{}", config.smtp_host, config.smtp_port
            )

    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        cfg = self._config
        if not cfg.enabled:
            logger.info("[Email] Would have sent '{}' to {}", subject, to_email)
            return

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = cfg.from_address
        msg["To"] = to_email
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout_seconds) as server:
                if cfg.use_tls:
                    server.starttls()
                if cfg.smtp_user and cfg.smtp_password:
                    server.login(cfg.smtp_user, cfg.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("[Email] Failed to send email to {}: {}", to_email, e)
            raise MailDeliveryError(f"Failed to send email to {to_email}") from e

        logger.info("[Email] Sent '{}' to {}", subject, to_email)
