"""Data access layer (repositories) for persistence operations.

This module provides repository classes for match records and talent
notifications. Repositories encapsulate database operations and return domain
models rather than ORM models.
"""

import logging
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from talentmatch.domain.models import MatchRecord, TalentNotification
from talentmatch.matching.models import MatchAcceptedEvent, MatchResult
from talentmatch.matching.utils import build_match_feedback, build_score_details
from talentmatch.utils.timestamps import utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import MatchModel, NotificationModel, _format_datetime

logger = logging.getLogger(__name__)


class MatchRepository:
    """Repository for match-related database operations."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def _find(self, offer_id, talent_id) -> Optional[MatchModel]:
        stmt = select(MatchModel).where(
            MatchModel.offer_id == str(offer_id),
            MatchModel.talent_id == str(talent_id),
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get(self, offer_id, talent_id) -> Optional[MatchRecord]:
        """Retrieve the match for an (offer, talent) pair.

        Returns:
            MatchRecord if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self._find(offer_id, talent_id)
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving match {offer_id}/{talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve match: {e}") from e

    def existing_talent_ids(self, offer_id) -> Set[str]:
        """Ids of the talents already matched with an offer.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(MatchModel.talent_id).where(MatchModel.offer_id == str(offer_id))
            return set(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing matched talents for offer {offer_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list matched talents: {e}") from e

    def upsert_from_event(self, event: MatchAcceptedEvent, now: Optional[datetime] = None) -> MatchRecord:
        """Persist the match carried by a MatchAcceptedEvent."""
        return self.upsert_result(event.result, offer_id=event.offer_id, talent_id=event.talent_id, now=now)

    def upsert_result(
        self,
        result: MatchResult,
        offer_id=None,
        talent_id=None,
        now: Optional[datetime] = None,
    ) -> MatchRecord:
        """Insert a new match or refresh the score and feedback of an existing one.

        Seen and notification flags of an existing match are preserved.

        Args:
            result: MatchResult to persist
            offer_id: Offer id (defaults to result.offer_id)
            talent_id: Talent id (defaults to result.talent_id)
            now: Timestamp for created_at/updated_at (defaults to UTC now)

        Returns:
            Persisted MatchRecord

        Raises:
            DataIntegrityError: If a constraint is violated
            PersistenceError: If database error occurs
        """
        offer_id = result.offer_id if offer_id is None else offer_id
        talent_id = result.talent_id if talent_id is None else talent_id
        if offer_id is None or talent_id is None:
            raise PersistenceError("Cannot persist a match without offer and talent ids")

        now = now or utc_now()
        feedback = build_match_feedback(result)

        try:
            existing = self._find(offer_id, talent_id)
            previous = existing.to_domain() if existing else None
            record = MatchRecord(
                offer_id=offer_id,
                talent_id=talent_id,
                score=result.score,
                score_details=build_score_details(result),
                notes=previous.notes if previous else None,
                seen_by_talent=previous.seen_by_talent if previous else False,
                notification_sent=previous.notification_sent if previous else False,
                notification_sent_at=previous.notification_sent_at if previous else None,
                created_at=previous.created_at if previous else now,
                updated_at=now,
                **feedback,
            )

            if existing:
                existing.apply(record)
                self.session.flush()
                logger.debug(
                    f"Match updated: {offer_id}/{talent_id}",
                    extra={"event": "match.updated", "offer_id": str(offer_id),
                           "talent_id": str(talent_id), "score": result.score},
                )
                return existing.to_domain()

            model = MatchModel.from_domain(record)
            self.session.add(model)
            self.session.flush()
            logger.debug(
                f"Match created: {offer_id}/{talent_id}",
                extra={"event": "match.created", "offer_id": str(offer_id),
                       "talent_id": str(talent_id), "score": result.score},
            )
            return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error upserting match {offer_id}/{talent_id}: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Failed to upsert match due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting match {offer_id}/{talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert match: {e}") from e

    def mark_seen(self, offer_id, talent_id) -> None:
        """Flag a match as seen by the talent.

        Raises:
            RecordNotFoundError: If the match doesn't exist
            PersistenceError: If database error occurs
        """
        try:
            model = self._find(offer_id, talent_id)
            if model is None:
                raise RecordNotFoundError(f"Match not found: {offer_id}/{talent_id}")
            model.seen_by_talent = True
            model.updated_at = _format_datetime(utc_now())
            self.session.flush()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error marking match {offer_id}/{talent_id} as seen: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark match as seen: {e}") from e

    def mark_notified(self, offer_id, talent_id, sent_at: Optional[datetime] = None) -> None:
        """Record that the talent was notified about a match.

        Raises:
            RecordNotFoundError: If the match doesn't exist
            PersistenceError: If database error occurs
        """
        sent_at = sent_at or utc_now()
        try:
            model = self._find(offer_id, talent_id)
            if model is None:
                raise RecordNotFoundError(f"Match not found: {offer_id}/{talent_id}")
            model.notification_sent = True
            model.notification_sent_at = _format_datetime(sent_at)
            self.session.flush()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error marking match {offer_id}/{talent_id} as notified: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark match as notified: {e}") from e

    def best_for_offer(self, offer_id, limit: int = 20) -> List[MatchRecord]:
        """Best matches of an offer, highest score first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(MatchModel)
                .where(MatchModel.offer_id == str(offer_id))
                .order_by(MatchModel.score.desc(), MatchModel.talent_id)
                .limit(limit)
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving best matches for offer {offer_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve matches: {e}") from e

    def for_talent(self, talent_id, min_score: int = 0) -> List[MatchRecord]:
        """A talent's matches at or above ``min_score``, highest score first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(MatchModel)
                .where(MatchModel.talent_id == str(talent_id), MatchModel.score >= min_score)
                .order_by(MatchModel.score.desc(), MatchModel.offer_id)
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving matches for talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve matches: {e}") from e


class NotificationRepository:
    """Repository for in-app talent notifications."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, notification: TalentNotification) -> TalentNotification:
        """Insert a notification.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = NotificationModel.from_domain(notification)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(
                f"Error creating notification for talent {notification.talent_id}: {e}",
                exc_info=True,
            )
            raise PersistenceError(f"Failed to create notification: {e}") from e

    def list_for_talent(
        self, talent_id, unread_only: bool = False, limit: Optional[int] = None
    ) -> List[TalentNotification]:
        """A talent's notifications, newest first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(NotificationModel).where(NotificationModel.talent_id == str(talent_id))
            if unread_only:
                stmt = stmt.where(NotificationModel.read.is_(False))
            stmt = stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            if limit is not None:
                stmt = stmt.limit(limit)
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing notifications for talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list notifications: {e}") from e
