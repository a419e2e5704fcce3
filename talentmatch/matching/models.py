"""Data models for the matching engine.

This module defines the per-dimension results produced by the evaluators,
the aggregated MatchResult, and the structures returned by a bulk run.
All results are frozen: the same inputs always produce equal results.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple, Union

from talentmatch.domain.models import CommitmentKind

Identifier = Union[int, str]


class SkillStatus(str, Enum):
    COMPLET = "COMPLET"
    PARTIEL = "PARTIEL"
    AUCUN = "AUCUN"


class ExperienceStatus(str, Enum):
    OK = "OK"
    INSUFFISANT = "INSUFFISANT"
    SURQUALIFIE = "SURQUALIFIE"


class RateStatus(str, Enum):
    OK = "OK"
    TROP_HAUT = "TROP_HAUT"
    TROP_BAS = "TROP_BAS"
    NON_RENSEIGNE = "NON_RENSEIGNE"


class AvailabilityStatus(str, Enum):
    DISPONIBLE = "DISPONIBLE"
    BIENTOT = "BIENTOT"
    EN_MISSION = "EN_MISSION"
    NON_DISPONIBLE = "NON_DISPONIBLE"

    @property
    def blocks_application(self) -> bool:
        return self in (AvailabilityStatus.EN_MISSION, AvailabilityStatus.NON_DISPONIBLE)


class LocationStatus(str, Enum):
    OK = "OK"
    ELOIGNE = "ELOIGNE"
    NON_COMPATIBLE = "NON_COMPATIBLE"


class Recommendation(str, Enum):
    """Recommendation tier, from best to worst."""

    EXCELLENT = "EXCELLENT"
    BON = "BON"
    MOYEN = "MOYEN"
    FAIBLE = "FAIBLE"
    NON_RECOMMANDE = "NON_RECOMMANDE"


@dataclass(frozen=True)
class SkillsResult:
    """Skill overlap between a talent and an offer.

    Attributes:
        score: Share of required skills the talent has (0-100)
        status: COMPLET, PARTIEL or AUCUN
        matched: Required skills the talent has, in offer order and spelling
        missing: Required skills the talent lacks
        bonus: Optional skills the talent has (never affect the score)
        message: Human-readable explanation
    """

    score: int
    status: SkillStatus
    matched: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()
    bonus: Tuple[str, ...] = ()
    message: str = ""


@dataclass(frozen=True)
class ExperienceResult:
    score: int
    status: ExperienceStatus
    required: Optional[int]
    yours: int
    message: str = ""


@dataclass(frozen=True)
class RateResult:
    """Day-rate compatibility.

    ``budget_hint`` is set only when the talent is too expensive; it is the
    offer's budget formatted for feedback ("400-600").
    """

    score: int
    status: RateStatus
    offer_min: Optional[int]
    offer_max: Optional[int]
    yours: Optional[int]
    message: str = ""
    budget_hint: Optional[str] = None


@dataclass(frozen=True)
class CommitmentConflict:
    """A talent commitment overlapping the offer window."""

    kind: CommitmentKind
    start: date
    end: date
    overlap_days: int

    def as_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "dateDebut": self.start.isoformat(),
            "dateFin": self.end.isoformat(),
            "joursEnConflit": self.overlap_days,
        }


@dataclass(frozen=True)
class AvailabilityResult:
    score: int
    status: AvailabilityStatus
    available_from: Optional[date] = None
    delay_days: Optional[int] = None
    conflicts: Tuple[CommitmentConflict, ...] = ()
    message: str = ""


@dataclass(frozen=True)
class LocationResult:
    score: int
    status: LocationStatus
    message: str = ""


@dataclass(frozen=True)
class MatchResult:
    """Full compatibility report for one talent/offer pair.

    Attributes:
        score: Weighted overall score (0-100)
        recommendation: Tier derived from the score
        can_apply: False when location or availability blocks the application
        message: One-line summary for the talent
        skills, experience, rate, availability, location: Dimension results
        talent_id, offer_id: Echo of the input identifiers
    """

    score: int
    recommendation: Recommendation
    can_apply: bool
    message: str
    skills: SkillsResult
    experience: ExperienceResult
    rate: RateResult
    availability: AvailabilityResult
    location: LocationResult
    talent_id: Optional[Identifier] = None
    offer_id: Optional[Identifier] = None

    @property
    def dimension_scores(self) -> dict:
        """Per-dimension scores in dimension order."""
        return {
            "skills": self.skills.score,
            "experience": self.experience.score,
            "rate": self.rate.score,
            "availability": self.availability.score,
            "location": self.location.score,
        }


@dataclass(frozen=True)
class MatchAcceptedEvent:
    """Emitted for every match retained by a bulk run.

    Carries what the persistence and notification collaborator needs; the
    engine itself never writes or sends anything.
    """

    offer_id: Optional[Identifier]
    talent_id: Identifier
    score: int
    result: MatchResult
    notify: bool = False
    talent_email: Optional[str] = None
    talent_first_name: Optional[str] = None
    offer_title: Optional[str] = None
    offer_slug: Optional[str] = None


@dataclass(frozen=True)
class RejectedTalent:
    """A talent of the pool that could not be evaluated."""

    index: int
    talent_id: Optional[Identifier]
    error: str


@dataclass
class BulkMatchResult:
    """Ranked outcome of matching a talent pool against one offer.

    Attributes:
        offer_id: Offer the pool was matched against
        matches: Retained results, best first
        events: One MatchAcceptedEvent per retained result, same order
        rejected: Talents that failed validation
        evaluated_count: Talents actually scored
        excluded_count: Talents skipped because they were already matched
        min_score: Threshold applied
    """

    offer_id: Optional[Identifier]
    matches: Tuple[MatchResult, ...] = ()
    events: Tuple[MatchAcceptedEvent, ...] = ()
    rejected: Tuple[RejectedTalent, ...] = ()
    evaluated_count: int = 0
    excluded_count: int = 0
    min_score: int = 0
    retained_count: int = field(init=False)

    def __post_init__(self):
        self.retained_count = len(self.matches)

    @property
    def count(self) -> int:
        return self.retained_count
