"""Dispatch of accepted matches: persistence and talent notification.

This module provides:
- MatchEventDispatcher: consumes MatchAcceptedEvents from a bulk run
- DispatchResult / EmailResult: outcome of each dispatch
- TemplateRenderer: Jinja2-based email template rendering
- SMTPClient: SMTP wrapper with TLS/SSL support
- Payload utilities: in-app notification and email context builders
"""

from .models import (
    DispatchResult,
    EmailResult,
    NotificationError,
    NotificationTemplateError,
    SMTPDeliveryError,
)
from .payloads import build_in_app_notification, build_notification_context, build_offer_url
from .service import MatchEventDispatcher
from .smtp_client import SMTPClient, build_sender_address, validate_recipient
from .templates import TemplateRenderer

__all__ = [
    # Main service
    "MatchEventDispatcher",
    # Models and results
    "DispatchResult",
    "EmailResult",
    # Exceptions
    "NotificationError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
    # Components
    "TemplateRenderer",
    "SMTPClient",
    # Utilities
    "build_in_app_notification",
    "build_notification_context",
    "build_offer_url",
    "build_sender_address",
    "validate_recipient",
]
