"""Exceptions raised for invalid or missing matching inputs.

All of them inherit from MatchingError so API handlers can map the whole family
to client errors with a single except clause.
"""

from typing import List, Optional

from pydantic import ValidationError


class MatchingError(Exception):
    """Base exception for all matching engine errors."""

    pass


class InvalidInputError(MatchingError):
    """Raised when a talent or offer is structurally invalid.

    Examples:
    - Negative years of experience
    - Empty skill set on a talent profile
    - Unknown availability or mobility value
    - Rate range with min above max

    Attributes:
        entity: Which input was rejected ("talent", "offer", "commitment")
        errors: Individual validation messages
    """

    def __init__(self, entity: str, errors: Optional[List[str]] = None):
        self.entity = entity
        self.errors = list(errors or [])
        message = f"Invalid {entity}"
        if self.errors:
            message += ": " + "; ".join(self.errors)
        super().__init__(message)

    @classmethod
    def from_validation_error(cls, entity: str, error: ValidationError) -> "InvalidInputError":
        """Build from a pydantic ValidationError, one message per failing field."""
        messages = []
        for item in error.errors():
            location = ".".join(str(loc) for loc in item["loc"])
            msg = item["msg"]
            # Strip pydantic's "Value error, " prefix from custom validator messages
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            messages.append(f"{location}: {msg}" if location else msg)
        return cls(entity, messages)


class EntityNotFoundError(MatchingError):
    """Raised when a talent or offer required for matching does not exist."""

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity.capitalize()} not found: {identifier}")
