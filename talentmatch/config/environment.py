"""Settings read from environment variables.

Secrets and deployment details live in the environment (or a ``.env`` file
loaded by the CLI): the SMTP server, the database URL and the public base URL
used in offer links. Scoring parameters live in the YAML file instead.
"""

import os
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/talent_match.db"
DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_SENDER_NAME = "Talent Match"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_VARS = (
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_SENDER_NAME",
    "SMTP_SENDER_EMAIL",
    "LOG_LEVEL",
    "DATABASE_URL",
    "APP_BASE_URL",
)

ENVIRONMENT_HINTS = (
    "Copy .env.example to .env and fill in your settings",
    "Disable email notifications in config.yaml if no SMTP server is available",
)


class EnvironmentConfig:
    """Deployment settings: SMTP server, database and public URL."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        smtp_sender_name: Optional[str] = None,
        smtp_sender_email: Optional[str] = None,
        log_level: Optional[str] = None,
        database_url: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.smtp_sender_name = smtp_sender_name or DEFAULT_SENDER_NAME
        self.smtp_sender_email = smtp_sender_email
        self.log_level = log_level
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")

    @property
    def smtp_configured(self) -> bool:
        """Whether enough SMTP settings are present to send email."""
        return bool(self.smtp_host and self.smtp_port)


def load_environment_config(require_smtp: bool = True) -> EnvironmentConfig:
    """
    Read and check the environment.

    ``SMTP_HOST`` and ``SMTP_PORT`` are mandatory only when ``require_smtp``
    is true. ``SMTP_USER`` and ``SMTP_PASS`` go together. ``SMTP_SENDER_NAME``,
    ``SMTP_SENDER_EMAIL``, ``LOG_LEVEL``, ``DATABASE_URL`` and ``APP_BASE_URL``
    are optional.

    Raises:
        ConfigurationError: Listing every missing or invalid variable
    """
    env = {name: os.getenv(name) or None for name in ENV_VARS}
    errors: List[str] = []

    if require_smtp:
        errors.extend(
            f"Missing required environment variable: {name}"
            for name in ("SMTP_HOST", "SMTP_PORT")
            if not env[name]
        )

    smtp_port = _parse_port(env["SMTP_PORT"], errors)
    _check_credentials(env["SMTP_USER"], env["SMTP_PASS"], errors)

    sender = env["SMTP_SENDER_EMAIL"]
    if sender:
        try:
            validate_email(sender, check_deliverability=False)
        except EmailNotValidError as e:
            errors.append(f"Invalid SMTP_SENDER_EMAIL '{sender}': {e}")

    log_level = env["LOG_LEVEL"].upper() if env["LOG_LEVEL"] else None
    if log_level and log_level not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{env['LOG_LEVEL']}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    base_url = env["APP_BASE_URL"]
    if base_url and not base_url.startswith(("http://", "https://")):
        errors.append(f"Invalid APP_BASE_URL: '{base_url}'. Must start with http:// or https://")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=ENVIRONMENT_HINTS,
            source="environment",
        )

    return EnvironmentConfig(
        smtp_host=env["SMTP_HOST"],
        smtp_port=smtp_port,
        smtp_user=env["SMTP_USER"],
        smtp_pass=env["SMTP_PASS"],
        smtp_sender_name=env["SMTP_SENDER_NAME"],
        smtp_sender_email=sender,
        log_level=log_level,
        database_url=env["DATABASE_URL"],
        base_url=base_url,
    )


def _parse_port(raw: Optional[str], errors: List[str]) -> Optional[int]:
    if not raw:
        return None
    try:
        port = int(raw)
    except ValueError:
        errors.append(f"Invalid SMTP_PORT: '{raw}'. Must be a valid integer.")
        return None
    if not 1 <= port <= 65535:
        errors.append(f"Invalid SMTP_PORT: {port}. Must be between 1 and 65535.")
    return port


def _check_credentials(user: Optional[str], password: Optional[str], errors: List[str]) -> None:
    if user and not password:
        errors.append("SMTP_USER is set but SMTP_PASS is not. Both must be set for authentication.")
    elif password and not user:
        errors.append("SMTP_PASS is set but SMTP_USER is not. Both must be set for authentication.")
