"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so the dispatcher can
turn any storage failure into a failed dispatch result.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails.

    Examples:
    - Invalid or empty DATABASE_URL
    - Database file or directory not writable
    - Database server unreachable
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation targets a match that does not exist.

    Lookups return None instead of raising this.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on a constraint violation, e.g. a second match for the same offer and talent."""

    pass
