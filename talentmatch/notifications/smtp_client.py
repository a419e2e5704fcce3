"""SMTP client wrapper for email delivery.

This module provides a thin wrapper around Python's smtplib with support
for TLS/SSL, authentication, and proper connection lifecycle management.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email

from talentmatch.config.environment import EnvironmentConfig

from .models import SMTPDeliveryError

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class SMTPClient:
    """Wrapper around smtplib for sending email messages.

    Opens one connection per message. Factories can be injected so tests never
    touch the network.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def _connect(self, env_config: EnvironmentConfig, use_tls: bool):
        host, port = env_config.smtp_host, env_config.smtp_port
        if port == IMPLICIT_TLS_PORT:
            logger.debug(f"Connecting to {host}:{port} with implicit TLS")
            return self.smtp_ssl_factory(host, port, context=ssl.create_default_context())

        logger.debug(f"Connecting to {host}:{port}")
        smtp = self.smtp_factory(host, port)
        if use_tls:
            smtp.starttls(context=ssl.create_default_context())
        return smtp

    def send(
        self,
        message: EmailMessage,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
    ) -> None:
        """Send an email message via SMTP.

        Args:
            message: Fully constructed EmailMessage to send
            env_config: Environment configuration with SMTP settings
            use_tls: Whether to upgrade with STARTTLS (port 465 always uses implicit TLS)

        Raises:
            SMTPDeliveryError: If SMTP is not configured or delivery fails
        """
        if not env_config.smtp_configured:
            raise SMTPDeliveryError("SMTP is not configured (SMTP_HOST/SMTP_PORT missing)")

        smtp = None
        try:
            smtp = self._connect(env_config, use_tls)
            if env_config.smtp_user and env_config.smtp_pass:
                smtp.login(env_config.smtp_user, env_config.smtp_pass)
            smtp.send_message(message)
            logger.debug(f"Message sent to {message['To']}")

        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def validate_recipient(address: Optional[str]) -> str:
    """Validate and normalize a talent's email address.

    Raises:
        ValueError: If the address is missing or invalid
    """
    if not address or not address.strip():
        raise ValueError("Talent has no email address")
    try:
        return validate_email(address.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValueError(f"Invalid talent email address '{address}': {e}") from e


def build_sender_address(env_config: EnvironmentConfig) -> str:
    """Build the 'From' header, e.g. ``Talent Match <matches@example.com>``.

    Uses SMTP_SENDER_EMAIL, then SMTP_USER, then noreply@<smtp host>.
    """
    sender_email = (
        env_config.smtp_sender_email
        or env_config.smtp_user
        or f"noreply@{env_config.smtp_host or 'localhost'}"
    )
    return formataddr((env_config.smtp_sender_name, sender_email))
