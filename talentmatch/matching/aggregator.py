"""Score aggregator: combine dimension results into one recommendation."""

from typing import Optional, Tuple

from talentmatch.config.models import ScoringConfig
from talentmatch.utils.numbers import clamp_score

from .models import (
    AvailabilityResult,
    ExperienceResult,
    LocationResult,
    LocationStatus,
    MatchResult,
    RateResult,
    Recommendation,
    SkillsResult,
)

DIMENSIONS = ("skills", "experience", "rate", "availability", "location")

_TIER_MESSAGES = {
    Recommendation.EXCELLENT: "Excellent match",
    Recommendation.BON: "Good match",
    Recommendation.MOYEN: "Average match",
    Recommendation.FAIBLE: "Weak match",
    Recommendation.NON_RECOMMANDE: "Not recommended",
}

_DIMENSION_LABELS = {
    "skills": "skills",
    "experience": "experience",
    "rate": "day-rate",
    "availability": "availability",
    "location": "location",
}


class ScoreAggregator:
    """Weights dimension scores, applies blocking rules and picks a tier.

    Responsibilities:
    - Weighted sum of the five dimension scores (half-up rounding)
    - Application blocking on incompatible location or unavailability
    - Capping a blocked talent's score below the weak tier
    - Tier classification and the summary message
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def weighted_score(self, scores: dict) -> int:
        weights = self.config.weights.as_dict()
        total = sum(weights[name] * scores[name] for name in DIMENSIONS)
        return clamp_score(total / 100)

    def classify(self, score: int) -> Recommendation:
        """Tier of ``score``; thresholds are inclusive lower bounds."""
        tiers = self.config.tiers
        if score >= tiers.excellent:
            return Recommendation.EXCELLENT
        if score >= tiers.good:
            return Recommendation.BON
        if score >= tiers.average:
            return Recommendation.MOYEN
        if score >= tiers.weak:
            return Recommendation.FAIBLE
        return Recommendation.NON_RECOMMANDE

    @staticmethod
    def blocking_reason(
        availability: AvailabilityResult, location: LocationResult
    ) -> Optional[str]:
        """Why the talent cannot apply, or None."""
        if location.status == LocationStatus.NON_COMPATIBLE:
            return location.message
        if availability.status.blocks_application:
            return availability.message
        return None

    def aggregate(
        self,
        skills: SkillsResult,
        experience: ExperienceResult,
        rate: RateResult,
        availability: AvailabilityResult,
        location: LocationResult,
        talent_id=None,
        offer_id=None,
    ) -> MatchResult:
        """Build the MatchResult from the five dimension results."""
        scores = {
            "skills": skills.score,
            "experience": experience.score,
            "rate": rate.score,
            "availability": availability.score,
            "location": location.score,
        }
        score = self.weighted_score(scores)

        reason = self.blocking_reason(availability, location)
        can_apply = reason is None
        if not can_apply:
            score = min(score, self.config.blocked_score_cap)

        recommendation = self.classify(score)
        if can_apply:
            message = self._summary(recommendation, scores)
        else:
            message = f"{_TIER_MESSAGES[recommendation]}: {reason}"

        return MatchResult(
            score=score,
            recommendation=recommendation,
            can_apply=can_apply,
            message=message,
            skills=skills,
            experience=experience,
            rate=rate,
            availability=availability,
            location=location,
            talent_id=talent_id,
            offer_id=offer_id,
        )

    @staticmethod
    def _summary(recommendation: Recommendation, scores: dict) -> str:
        weakest, weakest_score = _weakest_dimension(scores)
        if weakest_score >= 100:
            return f"{_TIER_MESSAGES[recommendation]}: compatible on every criterion"
        return f"{_TIER_MESSAGES[recommendation]}, weakest point: {_DIMENSION_LABELS[weakest]}"


def _weakest_dimension(scores: dict) -> Tuple[str, int]:
    """Lowest-scoring dimension, the first in dimension order on ties."""
    weakest = min(DIMENSIONS, key=lambda name: scores[name])
    return weakest, scores[weakest]
