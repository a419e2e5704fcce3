"""Data models and exceptions for match event dispatch.

This module defines result types and custom exceptions used while persisting
accepted matches and notifying talents.
"""

from dataclasses import dataclass
from typing import Optional, Union

Identifier = Union[int, str]


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to configuration or missing variables."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when SMTP delivery fails."""

    pass


@dataclass
class EmailResult:
    """Outcome of emailing a talent about a new match.

    Attributes:
        attempts: Number of send attempts made
        status: "sent", "skipped" (no address, email disabled) or "failed"
        error: Error message when delivery failed or was skipped
    """

    attempts: int
    status: str
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"


@dataclass
class DispatchResult:
    """Outcome of dispatching one MatchAcceptedEvent.

    Attributes:
        offer_id: Offer of the match
        talent_id: Talent of the match
        score: Match score
        status: "persisted" (stored, no notification), "notified" (stored and
            in-app notification created) or "failed" (nothing stored)
        email: Email outcome when a notification was created
        error: Error message when the dispatch failed
    """

    offer_id: Optional[Identifier]
    talent_id: Identifier
    score: int
    status: str
    email: Optional[EmailResult] = None
    error: Optional[str] = None

    @property
    def persisted(self) -> bool:
        return self.status in ("persisted", "notified")

    @property
    def notified(self) -> bool:
        return self.status == "notified"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def email_sent(self) -> bool:
        return self.email is not None and self.email.is_success()
