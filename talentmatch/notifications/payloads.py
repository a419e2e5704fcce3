"""Payload resolution for match notifications.

This module builds the in-app notification and the email template context
from a MatchAcceptedEvent.
"""

from datetime import datetime
from typing import Dict

from talentmatch.config.models import NotificationConfig
from talentmatch.domain.models import TalentNotification
from talentmatch.matching.models import MatchAcceptedEvent
from talentmatch.matching.utils import build_match_feedback

NEW_MATCH_KIND = "NOUVELLE_OFFRE_MATCH"


def build_offer_url(event: MatchAcceptedEvent, base_url: str, config: NotificationConfig) -> str:
    """Link to the offer page, using its slug when it has one."""
    slug = event.offer_slug or event.offer_id
    return config.offer_url_template.format(base_url=base_url.rstrip("/"), slug=slug)


def build_in_app_notification(
    event: MatchAcceptedEvent, offer_url: str, created_at: datetime
) -> TalentNotification:
    """In-app feed entry telling a talent a new offer matches their profile."""
    title = event.offer_title or f"Offer {event.offer_id}"
    return TalentNotification(
        talent_id=event.talent_id,
        kind=NEW_MATCH_KIND,
        title="New offer matching your profile",
        message=f'The offer "{title}" matches your profile at {event.score}%',
        link=offer_url,
        data={"offerId": event.offer_id, "score": event.score},
        created_at=created_at,
    )


def build_notification_context(
    event: MatchAcceptedEvent, offer_url: str, subject_prefix: str = ""
) -> Dict:
    """Build the email template context for a new match.

    Returns:
        Dictionary with template context keys:
        - subject_prefix: Configured subject prefix (may be empty)
        - first_name: Talent first name (may be None)
        - offer_title, offer_url: Offer metadata
        - score, recommendation, message: Overall result
        - matched_skills, missing_skills: Skill lists
        - feedback_rate, feedback_experience: Feedback texts (may be None)
        - availability: Availability explanation
    """
    result = event.result
    feedback = build_match_feedback(result)
    return {
        "subject_prefix": subject_prefix,
        "first_name": event.talent_first_name,
        "offer_title": event.offer_title or f"Offer {event.offer_id}",
        "offer_url": offer_url,
        "score": event.score,
        "recommendation": result.recommendation.value,
        "message": result.message,
        "matched_skills": feedback["matched_skills"],
        "missing_skills": feedback["missing_skills"],
        "feedback_rate": feedback["feedback_rate"],
        "feedback_experience": feedback["feedback_experience"],
        "availability": result.availability.message,
    }
