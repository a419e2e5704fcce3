"""Storage of matches and in-app notifications (SQLAlchemy).

Call ``init_database`` once, then work inside ``get_session()`` scopes with
MatchRepository and NotificationRepository:

    >>> init_database("sqlite:///./data/talent_match.db")
    >>> with get_session() as session:
    ...     best = MatchRepository(session).best_for_offer(42, limit=20)
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import MatchRepository, NotificationRepository

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "MatchRepository",
    "NotificationRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
