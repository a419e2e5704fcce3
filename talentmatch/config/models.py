"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .duration import DurationParseError, check_days_range, parse_duration_days

MAX_WINDOW_DAYS = 365


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ScoringWeights(BaseModel):
    """Weight of each dimension in the overall score, in percent."""

    skills: int = Field(50, ge=0, le=100, description="Weight of the skill match")
    experience: int = Field(15, ge=0, le=100, description="Weight of the experience check")
    rate: int = Field(15, ge=0, le=100, description="Weight of the day-rate check")
    availability: int = Field(10, ge=0, le=100, description="Weight of the availability check")
    location: int = Field(10, ge=0, le=100, description="Weight of the location/mobility check")

    @model_validator(mode="after")
    def validate_total(self):
        """Weights must sum to exactly 100."""
        total = sum(self.as_dict().values())
        if total != 100:
            raise ValueError(f"Scoring weights must sum to 100, got {total}")
        return self

    def as_dict(self) -> Dict[str, int]:
        """Weights keyed by dimension name, in dimension order."""
        return {
            "skills": self.skills,
            "experience": self.experience,
            "rate": self.rate,
            "availability": self.availability,
            "location": self.location,
        }


class TierThresholds(BaseModel):
    """Inclusive lower bounds of the recommendation tiers."""

    excellent: int = Field(80, ge=1, le=100)
    good: int = Field(60, ge=1, le=100)
    average: int = Field(40, ge=1, le=100)
    weak: int = Field(20, ge=1, le=100)

    @model_validator(mode="after")
    def validate_ordering(self):
        """Thresholds must be strictly decreasing from excellent to weak."""
        if not (self.excellent > self.good > self.average > self.weak):
            raise ValueError(
                "Tier thresholds must be strictly decreasing: "
                f"excellent={self.excellent}, good={self.good}, "
                f"average={self.average}, weak={self.weak}"
            )
        return self


class ExperienceScoring(BaseModel):
    """Experience evaluator parameters."""

    shortfall_penalty_per_year: int = Field(
        20, ge=1, le=100, description="Points lost per missing year of experience"
    )
    overqualified_margin_years: int = Field(
        5, ge=0, description="Years above the minimum beyond which a talent is overqualified"
    )


class RateScoring(BaseModel):
    """Day-rate evaluator parameters."""

    unspecified_score: int = Field(
        70, ge=0, le=100, description="Neutral score when either side declares no rate"
    )
    overshoot_penalty: int = Field(
        300,
        ge=1,
        description="Points lost per 100% of overshoot above the budget maximum",
    )
    too_high_floor: int = Field(0, ge=0, le=100, description="Lowest score for a rate too high")


class AvailabilityScoring(BaseModel):
    """Availability evaluator parameters."""

    grace_window: str = Field("30d", description="Acceptable delay after the offer start")
    soon_min_score: int = Field(
        80, ge=0, le=100, description="Score at the end of the grace window"
    )
    late_penalty_per_day: float = Field(
        1.0, ge=0.0, description="Points lost per day of delay beyond the grace window"
    )
    late_floor: int = Field(10, ge=0, le=100, description="Lowest score for a late talent")
    unavailable_score: int = Field(
        0, ge=0, le=100, description="Score of a talent declared unavailable"
    )
    commitment_horizon: str = Field(
        "90d", description="Assumed mission length when the offer has no end date"
    )

    # Computed fields
    grace_window_days: Optional[int] = None
    commitment_horizon_days: Optional[int] = None

    @field_validator("grace_window", "commitment_horizon")
    @classmethod
    def validate_window(cls, v: str, info: ValidationInfo) -> str:
        """Validate duration strings."""
        try:
            check_days_range(parse_duration_days(v), 1, MAX_WINDOW_DAYS, label=info.field_name)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_days(self):
        """Compute day counts and check the late floor."""
        self.grace_window_days = parse_duration_days(self.grace_window)
        self.commitment_horizon_days = parse_duration_days(self.commitment_horizon)
        if self.late_floor > self.soon_min_score:
            raise ValueError(
                f"late_floor ({self.late_floor}) cannot exceed soon_min_score ({self.soon_min_score})"
            )
        return self


class LocationScoring(BaseModel):
    """Location/mobility evaluator parameters."""

    distant_score: int = Field(50, ge=0, le=100, description="Score for a distant hybrid match")
    incompatible_score: int = Field(20, ge=0, le=100, description="Score for an incompatible match")


class ScoringConfig(BaseModel):
    """The single table holding every tunable of the scoring engine."""

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    tiers: TierThresholds = Field(default_factory=TierThresholds)
    experience: ExperienceScoring = Field(default_factory=ExperienceScoring)
    rate: RateScoring = Field(default_factory=RateScoring)
    availability: AvailabilityScoring = Field(default_factory=AvailabilityScoring)
    location: LocationScoring = Field(default_factory=LocationScoring)
    blocked_score_cap: int = Field(
        19,
        ge=0,
        le=100,
        description="Highest overall score of a talent who cannot apply",
    )


class BulkConfig(BaseModel):
    """Bulk matching settings."""

    min_score: int = Field(60, ge=0, le=100, description="Threshold for keeping a match")
    max_workers: int = Field(4, ge=1, le=64, description="Threads scoring the talent pool")


class EmailConfig(BaseModel):
    """Email notification settings."""

    enabled: bool = Field(True, description="Send emails for new matches")
    use_tls: bool = Field(True, description="Use TLS/STARTTLS for secure connection")
    subject_prefix: str = Field("", description="Prefix prepended to subjects")
    max_retries: int = Field(
        3, ge=0, le=10, description="Number of retry attempts for failed email sends"
    )
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier for retries"
    )
    retry_initial_delay: int = Field(
        5, ge=1, le=60, description="Initial retry delay in seconds"
    )


class NotificationConfig(BaseModel):
    """New-match notification settings."""

    enabled: bool = Field(True, description="Create notifications for new matches")
    min_score: int = Field(
        60, ge=0, le=100, description="Only matches at or above this score notify the talent"
    )
    offer_url_template: str = Field(
        "{base_url}/offres/{slug}", description="Link to the offer inside notifications"
    )

    @field_validator("offer_url_template")
    @classmethod
    def validate_template(cls, v: str) -> str:
        """The template may only use the base_url and slug placeholders."""
        try:
            v.format(base_url="", slug="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Invalid offer_url_template '{v}': {e}") from e
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration object for the talent match engine."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    bulk: BulkConfig = Field(default_factory=BulkConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def email_required(self) -> bool:
        """Whether SMTP settings are needed to run."""
        return self.notifications.enabled and self.email.enabled
