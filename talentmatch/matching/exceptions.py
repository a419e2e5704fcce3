"""Exceptions raised by the matching engine.

They are defined alongside the domain models, which raise them during
validation, and re-exported here for callers of the engine.
"""

from talentmatch.domain.exceptions import EntityNotFoundError, InvalidInputError, MatchingError

__all__ = ["MatchingError", "InvalidInputError", "EntityNotFoundError"]
