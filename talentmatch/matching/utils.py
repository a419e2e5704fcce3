"""Utility functions for preparing match results for downstream consumers.

This module shapes MatchResults into the JSON payloads served by the platform
API, the per-dimension score details stored with a match, and the feedback
shown to a talent on a match card.
"""

from typing import Dict, List, Optional

from .models import (
    BulkMatchResult,
    ExperienceStatus,
    MatchResult,
    RateStatus,
)


def build_match_payload(result: MatchResult, already_applied: bool = False) -> Dict:
    """Build the single-match API payload.

    Args:
        result: MatchResult for one talent/offer pair
        already_applied: Whether the talent already applied to the offer

    Returns:
        Dict with keys:
        - score, canApply, recommendation, message
        - details: per-dimension breakdown (competences, experience, tjm,
          disponibilite, localisation)
        - alreadyApplied
    """
    return {
        "score": result.score,
        "canApply": result.can_apply,
        "recommendation": result.recommendation.value,
        "message": result.message,
        "details": {
            "competences": {
                "matched": list(result.skills.matched),
                "missing": list(result.skills.missing),
                "bonus": list(result.skills.bonus),
                "score": result.skills.score,
            },
            "experience": {
                "required": result.experience.required,
                "yours": result.experience.yours,
                "status": result.experience.status.value,
                "message": result.experience.message,
            },
            "tjm": {
                "offreMin": result.rate.offer_min,
                "offreMax": result.rate.offer_max,
                "yours": result.rate.yours,
                "status": result.rate.status.value,
                "message": result.rate.message,
            },
            "disponibilite": {
                "status": result.availability.status.value,
                "message": result.availability.message,
                "conflits": [c.as_dict() for c in result.availability.conflicts],
            },
            "localisation": {
                "status": result.location.status.value,
                "message": result.location.message,
            },
        },
        "alreadyApplied": already_applied,
    }


def build_bulk_payload(bulk: BulkMatchResult) -> Dict:
    """Build the bulk-match API payload.

    ``competencesMatchees`` lists the matched required skills followed by the
    bonus skills.
    """
    return {
        "offerId": bulk.offer_id,
        "count": bulk.retained_count,
        "matches": [
            {
                "talentId": result.talent_id,
                "score": result.score,
                "competencesMatchees": list(result.skills.matched) + list(result.skills.bonus),
                "competencesManquantes": list(result.skills.missing),
            }
            for result in bulk.matches
        ],
    }


def build_score_details(result: MatchResult) -> Dict[str, int]:
    """Per-dimension scores stored alongside a persisted match."""
    return dict(result.dimension_scores)


def build_match_feedback(result: MatchResult) -> Dict:
    """Feedback flags and texts stored on a match for the talent's match card.

    Returns:
        Dict with keys:
        - rate_too_high / feedback_rate: set when the talent's rate exceeds the budget
        - experience_insufficient / feedback_experience: set on an experience shortfall
        - matched_skills / missing_skills: skill lists (matched includes bonus skills)
    """
    rate_too_high = result.rate.status == RateStatus.TROP_HAUT
    experience_insufficient = result.experience.status == ExperienceStatus.INSUFFISANT

    feedback_rate: Optional[str] = None
    if rate_too_high:
        feedback_rate = f"Your day-rate is above the budget. Budget: {result.rate.budget_hint}"

    feedback_experience: Optional[str] = None
    if experience_insufficient:
        feedback_experience = (
            f"{result.experience.required} years of experience required, "
            f"you have {result.experience.yours}"
        )

    matched: List[str] = list(result.skills.matched) + list(result.skills.bonus)
    return {
        "rate_too_high": rate_too_high,
        "feedback_rate": feedback_rate,
        "experience_insufficient": experience_insufficient,
        "feedback_experience": feedback_experience,
        "matched_skills": matched,
        "missing_skills": list(result.skills.missing),
    }
