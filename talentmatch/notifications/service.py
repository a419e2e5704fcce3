"""Match event dispatcher: persist accepted matches and notify talents.

The matching engine returns MatchAcceptedEvents and performs no I/O. This
module consumes them: each event is stored as a match record, and when the
caller asked for notifications the talent gets an in-app notification and an
email (retried with exponential backoff).
"""

import logging
import time
from email.message import EmailMessage
from typing import Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from talentmatch.config.environment import EnvironmentConfig
from talentmatch.config.models import EmailConfig, NotificationConfig
from talentmatch.logging import get_logger
from talentmatch.logging.context import log_context
from talentmatch.matching.models import MatchAcceptedEvent
from talentmatch.persistence.exceptions import PersistenceError
from talentmatch.persistence.repositories import MatchRepository, NotificationRepository
from talentmatch.utils.timestamps import utc_now

from .models import DispatchResult, EmailResult, NotificationTemplateError, SMTPDeliveryError
from .payloads import build_in_app_notification, build_notification_context, build_offer_url
from .smtp_client import SMTPClient, build_sender_address, validate_recipient
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notification")

MAX_RETRY_DELAY = 60.0


class MatchEventDispatcher:
    """Consumes MatchAcceptedEvents produced by a bulk run.

    For each event:
    1. Upsert the match record (with rate/experience feedback)
    2. If the event asks for it and its score reaches the notification
       threshold, create the in-app notification and mark the match notified
    3. Email the talent, retrying with backoff

    Steps 1-2 run inside a SAVEPOINT of the caller's session: a failure rolls
    back that event only and yields a "failed" DispatchResult. Email failures
    never undo the stored match. The caller commits the session.
    """

    def __init__(
        self,
        env_config: EnvironmentConfig,
        email_config: Optional[EmailConfig] = None,
        notification_config: Optional[NotificationConfig] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        smtp_client: Optional[SMTPClient] = None,
        logger_instance: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the dispatcher.

        Args:
            env_config: Environment configuration (SMTP settings, base URL)
            email_config: Email settings and retry policy
            notification_config: Notification threshold and offer link template
            template_renderer: Template renderer instance (creates default if None)
            smtp_client: SMTP client instance (creates default if None)
            logger_instance: Logger instance (uses module logger if None)
            sleep: Sleep function used between retries
        """
        self.env_config = env_config
        self.email_config = email_config or EmailConfig()
        self.notification_config = notification_config or NotificationConfig()
        self.template_renderer = template_renderer or TemplateRenderer()
        self.smtp_client = smtp_client or SMTPClient()
        self.logger = logger_instance or logger
        self._sleep = sleep

    def should_notify(self, event: MatchAcceptedEvent) -> bool:
        return (
            event.notify
            and self.notification_config.enabled
            and event.score >= self.notification_config.min_score
        )

    def dispatch(self, events: Iterable[MatchAcceptedEvent], session: Session) -> List[DispatchResult]:
        """Dispatch a batch of events, continuing past individual failures.

        Args:
            events: Events from a bulk run
            session: Session of the caller's transaction

        Returns:
            One DispatchResult per event, in input order
        """
        match_repo = MatchRepository(session)
        notification_repo = NotificationRepository(session)
        results = [self.dispatch_one(event, session, match_repo, notification_repo) for event in events]

        persisted = sum(1 for r in results if r.persisted)
        notified = sum(1 for r in results if r.notified)
        emailed = sum(1 for r in results if r.email_sent)
        failed = sum(1 for r in results if r.failed)
        self.logger.info(
            f"Dispatch batch complete: {persisted} persisted, {notified} notified, "
            f"{emailed} emailed, {failed} failed (total: {len(results)})",
            extra={
                "event": "dispatch.batch.completed",
                "persisted": persisted,
                "notified": notified,
                "emailed": emailed,
                "failed": failed,
            },
        )
        return results

    def dispatch_one(
        self,
        event: MatchAcceptedEvent,
        session: Session,
        match_repo: Optional[MatchRepository] = None,
        notification_repo: Optional[NotificationRepository] = None,
    ) -> DispatchResult:
        """Persist one event and notify the talent if requested."""
        match_repo = match_repo or MatchRepository(session)
        notification_repo = notification_repo or NotificationRepository(session)

        with log_context(offer_id=event.offer_id, talent_id=event.talent_id):
            notify = self.should_notify(event)
            offer_url = build_offer_url(event, self.env_config.base_url, self.notification_config)
            now = utc_now()

            try:
                with session.begin_nested():
                    match_repo.upsert_from_event(event, now=now)
                    if notify:
                        notification_repo.create(build_in_app_notification(event, offer_url, now))
                        match_repo.mark_notified(event.offer_id, event.talent_id, now)
            except (PersistenceError, SQLAlchemyError) as e:
                self.logger.error(
                    f"Failed to persist match {event.offer_id}/{event.talent_id}: {e}",
                    extra={"event": "dispatch.match.failed", "error_type": type(e).__name__},
                )
                return DispatchResult(
                    offer_id=event.offer_id,
                    talent_id=event.talent_id,
                    score=event.score,
                    status="failed",
                    error=str(e),
                )

            self.logger.info(
                f"Match persisted: {event.offer_id}/{event.talent_id} (score {event.score})",
                extra={"event": "dispatch.match.persisted", "score": event.score, "notify": notify},
            )
            if not notify:
                return DispatchResult(
                    offer_id=event.offer_id,
                    talent_id=event.talent_id,
                    score=event.score,
                    status="persisted",
                )

            return DispatchResult(
                offer_id=event.offer_id,
                talent_id=event.talent_id,
                score=event.score,
                status="notified",
                email=self.send_email(event, offer_url),
            )

    def send_email(self, event: MatchAcceptedEvent, offer_url: str) -> EmailResult:
        """Email the talent about a match, retrying SMTP failures with backoff.

        Returns:
            EmailResult; never raises
        """
        if not self.email_config.enabled:
            return EmailResult(attempts=0, status="skipped", error="email disabled")

        try:
            recipient = validate_recipient(event.talent_email)
        except ValueError as e:
            self.logger.info(
                f"Skipping email for talent {event.talent_id}: {e}",
                extra={"event": "notification.skip", "reason": "no_valid_address"},
            )
            return EmailResult(attempts=0, status="skipped", error=str(e))

        try:
            context = build_notification_context(event, offer_url, self.email_config.subject_prefix)
            rendered = self.template_renderer.render(context)
        except NotificationTemplateError as e:
            # Template errors are fatal (developer misconfiguration)
            self.logger.error(f"Template rendering failed: {e}", exc_info=True)
            return EmailResult(attempts=0, status="failed", error=str(e))

        message = EmailMessage()
        message["Subject"] = rendered["subject"]
        message["From"] = build_sender_address(self.env_config)
        message["To"] = recipient
        message.set_content(rendered["text_body"])
        message.add_alternative(rendered["html_body"], subtype="html")

        max_attempts = self.email_config.max_retries + 1
        last_error = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.email_config.retry_initial_delay * (
                    self.email_config.retry_backoff_multiplier ** (attempt - 2)
                )
                delay = min(delay, MAX_RETRY_DELAY)
                self.logger.warning(
                    f"Retrying email to talent {event.talent_id} "
                    f"(attempt {attempt}/{max_attempts}) after {delay:.1f}s delay",
                    extra={"event": "notification.send.attempt", "attempt": attempt},
                )
                self._sleep(delay)

            try:
                self.smtp_client.send(message, self.env_config, self.email_config.use_tls)
            except SMTPDeliveryError as e:
                last_error = str(e)
                retry_remaining = attempt < max_attempts
                log = self.logger.warning if retry_remaining else self.logger.error
                log(
                    f"SMTP delivery failed for talent {event.talent_id} "
                    f"(attempt {attempt}/{max_attempts}): {e}",
                    extra={
                        "event": "notification.send.failure",
                        "attempt": attempt,
                        "error_type": type(e).__name__,
                        "retry_remaining": retry_remaining,
                    },
                )
                continue

            self.logger.info(
                f"Match email sent to talent {event.talent_id} (attempts: {attempt})",
                extra={"event": "notification.send.success", "attempt": attempt},
            )
            return EmailResult(attempts=attempt, status="sent")

        return EmailResult(attempts=max_attempts, status="failed", error=last_error)
