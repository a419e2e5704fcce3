"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the matches and notifications
tables and provides conversion methods between ORM models and domain models.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Boolean, Column, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from talentmatch.domain.models import MatchRecord, TalentNotification

logger = logging.getLogger(__name__)

# Create base class for ORM models
Base = declarative_base()


class MatchModel(Base):
    """ORM model for matches table.

    One row per (offer, talent) pair, holding the score and the feedback shown
    on the talent's match card.
    """

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    offer_id = Column(String(64), nullable=False)
    talent_id = Column(String(64), nullable=False)

    # Scoring
    score = Column(Integer, nullable=False)
    score_details = Column(JSON, nullable=False, default=dict)
    matched_skills = Column(JSON, nullable=False, default=list)
    missing_skills = Column(JSON, nullable=False, default=list)

    # Feedback for the talent
    rate_too_high = Column(Boolean, nullable=False, default=False)
    experience_insufficient = Column(Boolean, nullable=False, default=False)
    feedback_rate = Column(Text, nullable=True)
    feedback_experience = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Tracking (timestamps stored as ISO 8601 strings)
    seen_by_talent = Column(Boolean, nullable=False, default=False)
    notification_sent = Column(Boolean, nullable=False, default=False)
    notification_sent_at = Column(String(50), nullable=True)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("offer_id", "talent_id", name="uq_matches_offer_talent"),
        Index("idx_matches_offer_score", "offer_id", "score"),
        Index("idx_matches_talent", "talent_id"),
    )

    def to_domain(self) -> MatchRecord:
        return MatchRecord(
            offer_id=self.offer_id,
            talent_id=self.talent_id,
            score=self.score,
            score_details=dict(self.score_details or {}),
            matched_skills=list(self.matched_skills or []),
            missing_skills=list(self.missing_skills or []),
            rate_too_high=bool(self.rate_too_high),
            experience_insufficient=bool(self.experience_insufficient),
            feedback_rate=self.feedback_rate,
            feedback_experience=self.feedback_experience,
            notes=self.notes,
            seen_by_talent=bool(self.seen_by_talent),
            notification_sent=bool(self.notification_sent),
            notification_sent_at=_parse_datetime(self.notification_sent_at),
            created_at=_parse_datetime(self.created_at),
            updated_at=_parse_datetime(self.updated_at),
        )

    @classmethod
    def from_domain(cls, record: MatchRecord) -> "MatchModel":
        model = cls(offer_id=record.offer_id, talent_id=record.talent_id)
        model.apply(record)
        model.created_at = _format_datetime(record.created_at)
        return model

    def apply(self, record: MatchRecord) -> None:
        """Copy the mutable fields of ``record`` onto this row.

        The pair key and creation time are left untouched.
        """
        self.score = record.score
        self.score_details = dict(record.score_details)
        self.matched_skills = list(record.matched_skills)
        self.missing_skills = list(record.missing_skills)
        self.rate_too_high = record.rate_too_high
        self.experience_insufficient = record.experience_insufficient
        self.feedback_rate = record.feedback_rate
        self.feedback_experience = record.feedback_experience
        self.notes = record.notes
        self.seen_by_talent = record.seen_by_talent
        self.notification_sent = record.notification_sent
        self.notification_sent_at = _format_datetime(record.notification_sent_at)
        self.updated_at = _format_datetime(record.updated_at)


class NotificationModel(Base):
    """ORM model for notifications table.

    In-app feed entries for talents (new matching offer, ...).
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    talent_id = Column(String(64), nullable=False)
    kind = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(Text, nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_notifications_talent", "talent_id", "created_at"),)

    def to_domain(self) -> TalentNotification:
        return TalentNotification(
            talent_id=self.talent_id,
            kind=self.kind,
            title=self.title,
            message=self.message,
            link=self.link,
            data=dict(self.data or {}),
            read=bool(self.read),
            created_at=_parse_datetime(self.created_at),
        )

    @classmethod
    def from_domain(cls, notification: TalentNotification) -> "NotificationModel":
        return cls(
            talent_id=notification.talent_id,
            kind=notification.kind,
            title=notification.title,
            message=notification.message,
            link=notification.link,
            data=dict(notification.data),
            read=notification.read,
            created_at=_format_datetime(notification.created_at),
        )


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO 8601 string for database storage.

    Args:
        dt: Datetime object (naive values are taken as UTC)

    Returns:
        ISO 8601 formatted string or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO 8601 string back to an aware UTC datetime."""
    if not dt_str:
        return None

    dt_str = dt_str.rstrip("Z")
    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        from sqlalchemy import inspect

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
