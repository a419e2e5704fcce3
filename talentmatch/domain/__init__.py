"""Domain models for the talent match engine."""

from .exceptions import EntityNotFoundError, InvalidInputError, MatchingError
from .models import (
    AvailabilityState,
    Commitment,
    CommitmentKind,
    MatchRecord,
    OfferRequirements,
    TalentNotification,
    TalentProfile,
    WorkMode,
)

__all__ = [
    "TalentProfile",
    "OfferRequirements",
    "Commitment",
    "MatchRecord",
    "TalentNotification",
    "WorkMode",
    "AvailabilityState",
    "CommitmentKind",
    "MatchingError",
    "InvalidInputError",
    "EntityNotFoundError",
]
