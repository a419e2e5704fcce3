"""Core domain models for talents, offers, commitments and matches.

This module defines the data structures used throughout the application:
- TalentProfile: read-only snapshot of a freelancer profile used for matching
- OfferRequirements: read-only snapshot of a job offer's requirements
- Commitment: a confirmed period during which a talent is busy
- MatchRecord: persisted link between a talent and an offer with its score
- TalentNotification: in-app notification entry for a talent

Input models accept both their Python field names and the field names used by
the platform's API (``competences``, ``tjmMax``, ``dateDebut``...).
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator, model_validator

from talentmatch.utils.timestamps import as_date, parse_iso_date

from .exceptions import InvalidInputError

Identifier = Union[int, str]


class WorkMode(str, Enum):
    """Work mode of an offer, or mobility preference of a talent."""

    FULL_REMOTE = "FULL_REMOTE"
    HYBRIDE = "HYBRIDE"
    SUR_SITE = "SUR_SITE"
    FLEXIBLE = "FLEXIBLE"

    @classmethod
    def parse(cls, value: Any) -> "WorkMode":
        """Parse a work mode case-insensitively, accepting TELETRAVAIL as FULL_REMOTE."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Work mode must be a string, got {type(value).__name__}")
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        key = _WORK_MODE_SYNONYMS.get(key, key)
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown work mode '{value}'. Expected one of: {valid}") from None

    @property
    def requires_presence(self) -> bool:
        """Whether the mode involves being physically on site."""
        return self in (WorkMode.SUR_SITE, WorkMode.HYBRIDE)


_WORK_MODE_SYNONYMS = {
    "TELETRAVAIL": "FULL_REMOTE",
    "TÉLÉTRAVAIL": "FULL_REMOTE",
}


class AvailabilityState(str, Enum):
    """Availability declared on a talent profile."""

    IMMEDIATE = "IMMEDIATE"
    SOUS_15_JOURS = "SOUS_15_JOURS"
    SOUS_1_MOIS = "SOUS_1_MOIS"
    SOUS_2_MOIS = "SOUS_2_MOIS"
    SOUS_3_MOIS = "SOUS_3_MOIS"
    DATE_PRECISE = "DATE_PRECISE"
    NON_DISPONIBLE = "NON_DISPONIBLE"

    @property
    def offset_days(self) -> Optional[int]:
        """Days until the talent is free, None for states without a fixed offset."""
        return _AVAILABILITY_OFFSETS.get(self)


_AVAILABILITY_OFFSETS = {
    AvailabilityState.IMMEDIATE: 0,
    AvailabilityState.SOUS_15_JOURS: 15,
    AvailabilityState.SOUS_1_MOIS: 30,
    AvailabilityState.SOUS_2_MOIS: 60,
    AvailabilityState.SOUS_3_MOIS: 90,
}


class CommitmentKind(str, Enum):
    """Type of a talent's planning entry."""

    MISSION = "MISSION"
    CONGE = "CONGE"
    ARRET_MALADIE = "ARRET_MALADIE"
    INDISPONIBLE = "INDISPONIBLE"

    @classmethod
    def parse(cls, value: Any) -> "CommitmentKind":
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        # Planning entries are stored as EN_MISSION on the platform
        if key == "EN_MISSION":
            key = "MISSION"
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown commitment kind '{value}'. Expected one of: {valid}") from None


def _clean_skills(values: Any) -> Tuple[str, ...]:
    """Strip skill names and drop blanks, keeping order."""
    if values is None:
        return ()
    if isinstance(values, str):
        raise ValueError("Skills must be a list of strings, not a single string")
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            raise ValueError(f"Skill must be a string, got {type(value).__name__}")
        stripped = value.strip()
        if stripped:
            cleaned.append(stripped)
    return tuple(cleaned)


def _coerce_date(value: Any) -> Optional[date]:
    """Accept dates, datetimes and ISO strings (with or without time)."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return as_date(value)
    if isinstance(value, str):
        parsed = parse_iso_date(value)
        if parsed is None:
            raise ValueError(f"Invalid date: '{value}'")
        return parsed
    raise ValueError(f"Invalid date: {value!r}")


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class TalentProfile(BaseModel):
    """Snapshot of a freelancer profile, read-only input to the engine."""

    talent_id: Optional[Identifier] = Field(
        None, validation_alias=AliasChoices("talent_id", "talentId", "id")
    )
    skills: Tuple[str, ...] = Field(
        ..., validation_alias=AliasChoices("skills", "competences"),
        description="Declared skills, compared case-insensitively",
    )
    years_experience: int = Field(
        0, ge=0, validation_alias=AliasChoices("years_experience", "anneesExperience")
    )
    rate: Optional[int] = Field(None, gt=0, validation_alias=AliasChoices("rate", "tjm"))
    rate_min: Optional[int] = Field(None, gt=0, validation_alias=AliasChoices("rate_min", "tjmMin"))
    rate_max: Optional[int] = Field(None, gt=0, validation_alias=AliasChoices("rate_max", "tjmMax"))
    availability: AvailabilityState = Field(
        AvailabilityState.IMMEDIATE,
        validation_alias=AliasChoices("availability", "disponibilite"),
    )
    available_from: Optional[date] = Field(
        None, validation_alias=AliasChoices("available_from", "disponibleLe")
    )
    mobility: WorkMode = Field(
        WorkMode.FLEXIBLE, validation_alias=AliasChoices("mobility", "mobilite")
    )
    city: Optional[str] = Field(None, validation_alias=AliasChoices("city", "ville"))
    email: Optional[str] = Field(None, description="Contact address for match notifications")
    first_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("first_name", "prenom")
    )

    model_config = {"frozen": True}

    @field_validator("skills", mode="before")
    @classmethod
    def validate_skills(cls, v: Any) -> Tuple[str, ...]:
        """A talent profile must declare at least one skill."""
        skills = _clean_skills(v)
        if not skills:
            raise ValueError("Talent profile must declare at least one skill")
        return skills

    @field_validator("talent_id")
    @classmethod
    def validate_identifier(cls, v: Optional[Identifier]) -> Optional[Identifier]:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("talent_id cannot be blank")
        return v

    @field_validator("availability", mode="before")
    @classmethod
    def parse_availability(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("mobility", mode="before")
    @classmethod
    def parse_mobility(cls, v: Any) -> WorkMode:
        return WorkMode.parse(v)

    @field_validator("available_from", mode="before")
    @classmethod
    def parse_available_from(cls, v: Any) -> Optional[date]:
        return _coerce_date(v)

    @field_validator("city", "email", "first_name")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)

    @model_validator(mode="after")
    def validate_consistency(self):
        """Check rate range ordering and date-bound availability."""
        if self.rate_min is not None and self.rate_max is not None and self.rate_min > self.rate_max:
            raise ValueError(
                f"rate_min ({self.rate_min}) cannot be greater than rate_max ({self.rate_max})"
            )
        if self.availability == AvailabilityState.DATE_PRECISE and self.available_from is None:
            raise ValueError("available_from is required when availability is DATE_PRECISE")
        return self

    @property
    def declares_rate(self) -> bool:
        return any(v is not None for v in (self.rate, self.rate_min, self.rate_max))

    @property
    def rate_floor(self) -> Optional[int]:
        """Lowest day-rate the talent accepts."""
        if self.rate_min is not None:
            return self.rate_min
        if self.rate is not None:
            return self.rate
        return self.rate_max

    @property
    def rate_ceiling(self) -> Optional[int]:
        """Highest day-rate the talent asks for."""
        if self.rate_max is not None:
            return self.rate_max
        if self.rate is not None:
            return self.rate
        return self.rate_min

    @property
    def displayed_rate(self) -> Optional[int]:
        """The rate shown back to the talent in explanations."""
        if self.rate is not None:
            return self.rate
        return self.rate_min if self.rate_min is not None else self.rate_max

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TalentProfile":
        """Validate an API-shaped mapping, raising InvalidInputError on failure."""
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            raise InvalidInputError.from_validation_error("talent", e) from e


class OfferRequirements(BaseModel):
    """Requirements of a job offer, read-only input to the engine."""

    offer_id: Optional[Identifier] = Field(
        None, validation_alias=AliasChoices("offer_id", "offerId", "id")
    )
    title: Optional[str] = Field(None, validation_alias=AliasChoices("title", "titre"))
    slug: Optional[str] = None
    required_skills: Tuple[str, ...] = Field(
        (), validation_alias=AliasChoices("required_skills", "competencesRequises")
    )
    optional_skills: Tuple[str, ...] = Field(
        (), validation_alias=AliasChoices("optional_skills", "competencesSouhaitees")
    )
    min_experience: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("min_experience", "experienceMin")
    )
    budget_min: Optional[int] = Field(
        None, gt=0, validation_alias=AliasChoices("budget_min", "tjmMin")
    )
    budget_max: Optional[int] = Field(
        None, gt=0, validation_alias=AliasChoices("budget_max", "tjmMax")
    )
    start_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("start_date", "dateDebut")
    )
    end_date: Optional[date] = Field(None, validation_alias=AliasChoices("end_date", "dateFin"))
    work_mode: WorkMode = Field(
        WorkMode.FLEXIBLE, validation_alias=AliasChoices("work_mode", "mobilite")
    )
    location: Optional[str] = Field(None, validation_alias=AliasChoices("location", "lieu", "ville"))

    model_config = {"frozen": True}

    @field_validator("required_skills", "optional_skills", mode="before")
    @classmethod
    def clean_skills(cls, v: Any) -> Tuple[str, ...]:
        return _clean_skills(v)

    @field_validator("work_mode", mode="before")
    @classmethod
    def parse_work_mode(cls, v: Any) -> WorkMode:
        return WorkMode.parse(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Optional[date]:
        return _coerce_date(v)

    @field_validator("title", "slug", "location")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)

    @model_validator(mode="after")
    def validate_ranges(self):
        """Budget and dates must be ordered."""
        if (
            self.budget_min is not None
            and self.budget_max is not None
            and self.budget_min > self.budget_max
        ):
            raise ValueError(
                f"budget_min ({self.budget_min}) cannot be greater than budget_max ({self.budget_max})"
            )
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) cannot be before start_date ({self.start_date})"
            )
        return self

    @property
    def declares_budget(self) -> bool:
        return self.budget_min is not None or self.budget_max is not None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OfferRequirements":
        """Validate an API-shaped mapping, raising InvalidInputError on failure."""
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            raise InvalidInputError.from_validation_error("offer", e) from e


class Commitment(BaseModel):
    """A confirmed period during which the talent is not free."""

    kind: CommitmentKind = Field(..., validation_alias=AliasChoices("kind", "type"))
    start: date = Field(..., validation_alias=AliasChoices("start", "date", "dateDebut"))
    end: Optional[date] = Field(None, validation_alias=AliasChoices("end", "dateFin"))

    model_config = {"frozen": True}

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, v: Any) -> CommitmentKind:
        return CommitmentKind.parse(v)

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Optional[date]:
        return _coerce_date(v)

    @model_validator(mode="after")
    def validate_period(self):
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Commitment end ({self.end}) cannot be before start ({self.start})")
        return self

    @property
    def last_day(self) -> date:
        """Single-day entries end on their start date."""
        return self.end if self.end is not None else self.start

    def overlap_days(self, window_start: date, window_end: date) -> int:
        """Number of days this commitment shares with ``[window_start, window_end]``."""
        first = max(self.start, window_start)
        last = min(self.last_day, window_end)
        return max(0, (last - first).days + 1)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Commitment":
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            raise InvalidInputError.from_validation_error("commitment", e) from e


def _ensure_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class MatchRecord(BaseModel):
    """Persisted link between a talent and an offer.

    Created by the dispatcher for every match kept by a bulk run, and refreshed
    when a talent updates their profile.
    """

    offer_id: str = Field(..., description="Offer identifier")
    talent_id: str = Field(..., description="Talent identifier")
    score: int = Field(..., ge=0, le=100)
    score_details: Dict[str, int] = Field(default_factory=dict)
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    rate_too_high: bool = False
    experience_insufficient: bool = False
    feedback_rate: Optional[str] = None
    feedback_experience: Optional[str] = None
    notes: Optional[str] = None
    seen_by_talent: bool = False
    notification_sent: bool = False
    notification_sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("offer_id", "talent_id", mode="before")
    @classmethod
    def stringify_identifier(cls, v: Any) -> str:
        """Identifiers are stored as text whatever their source type."""
        if v is None:
            raise ValueError("Identifier is required")
        return str(v)

    @field_validator("notification_sent_at", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _ensure_utc(v)

    model_config = {"json_schema_extra": {"example": {
        "offer_id": "42",
        "talent_id": "1337",
        "score": 86,
        "score_details": {"skills": 100, "experience": 100, "rate": 40,
                          "availability": 100, "location": 100},
        "matched_skills": ["React", "Node.js", "AWS"],
        "missing_skills": [],
        "rate_too_high": True,
        "feedback_rate": "Your day-rate is above the budget. Budget: 400-600",
        "seen_by_talent": False,
        "notification_sent": True,
        "created_at": "2026-10-18T09:00:00Z",
        "updated_at": "2026-10-18T09:00:00Z",
    }}}


class TalentNotification(BaseModel):
    """In-app notification shown in a talent's feed."""

    talent_id: str
    kind: str = "NOUVELLE_OFFRE_MATCH"
    title: str
    message: str
    link: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    read: bool = False
    created_at: datetime

    @field_validator("talent_id", mode="before")
    @classmethod
    def stringify_identifier(cls, v: Any) -> str:
        return str(v)

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _ensure_utc(v)
