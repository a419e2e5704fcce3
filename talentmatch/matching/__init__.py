"""Matching engine for scoring talents against job offers.

This module provides:
- Five pure evaluators (skills, experience, rate, availability, location)
- ScoreAggregator: weighted score, blocking rules and recommendation tier
- MatchingEngine: single evaluation and concurrent bulk ranking
- Utility functions for building API payloads and match feedback
"""

from .aggregator import ScoreAggregator
from .availability import check_availability
from .engine import MatchingEngine
from .exceptions import EntityNotFoundError, InvalidInputError, MatchingError
from .experience import evaluate_experience
from .location import check_location
from .models import (
    AvailabilityResult,
    AvailabilityStatus,
    BulkMatchResult,
    CommitmentConflict,
    ExperienceResult,
    ExperienceStatus,
    LocationResult,
    LocationStatus,
    MatchAcceptedEvent,
    MatchResult,
    RateResult,
    RateStatus,
    Recommendation,
    RejectedTalent,
    SkillsResult,
    SkillStatus,
)
from .rate import check_rate
from .skills import match_skills
from .utils import (
    build_bulk_payload,
    build_match_feedback,
    build_match_payload,
    build_score_details,
)

__all__ = [
    "MatchingEngine",
    "ScoreAggregator",
    # Evaluators
    "match_skills",
    "evaluate_experience",
    "check_rate",
    "check_availability",
    "check_location",
    # Results
    "MatchResult",
    "BulkMatchResult",
    "MatchAcceptedEvent",
    "RejectedTalent",
    "SkillsResult",
    "ExperienceResult",
    "RateResult",
    "AvailabilityResult",
    "CommitmentConflict",
    "LocationResult",
    # Statuses
    "SkillStatus",
    "ExperienceStatus",
    "RateStatus",
    "AvailabilityStatus",
    "LocationStatus",
    "Recommendation",
    # Payloads
    "build_match_payload",
    "build_bulk_payload",
    "build_score_details",
    "build_match_feedback",
    # Exceptions
    "MatchingError",
    "InvalidInputError",
    "EntityNotFoundError",
]
