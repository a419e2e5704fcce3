"""Engine and session lifecycle for the match store.

One engine per process, created by ``init_database`` at startup and disposed
by ``close_database``. Sessions come from ``get_session``, which commits on
success and rolls back on error.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from talentmatch.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")

NOT_INITIALIZED = "Database not initialized. Call init_database() first"


def init_database(database_url: str) -> None:
    """Create the engine, check the connection and create missing tables.

    For SQLite files the parent directory is created. ``sqlite:///:memory:``
    uses a single shared connection so every session sees the same data.

    Raises:
        DatabaseConnectionError: If the URL is invalid or the database unreachable
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")
    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise DatabaseConnectionError(f"Invalid database URL: {e}") from e

    safe_url = url.render_as_string(hide_password=True)
    logger.info("Initializing database", extra={"event": "database.initializing", "database_url": safe_url})

    from .schema import create_schema

    try:
        engine = create_engine(url, **_engine_options(url))
        if url.get_backend_name() == "sqlite":
            _enable_sqlite_savepoints(engine, in_memory=_is_memory_sqlite(url))
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        create_schema(engine)
    except (SQLAlchemyError, OSError) as e:
        message = f"Failed to initialize database: {e}"
        logger.error(message, exc_info=True, extra={"event": "database.init_failed"})
        raise DatabaseConnectionError(message) from e

    _engine = engine
    _session_factory = sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)
    logger.info("Database initialized", extra={"event": "database.initialised", "database_url": safe_url})


def _is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _engine_options(url: URL) -> Dict[str, Any]:
    """Keyword arguments for create_engine; creates the SQLite file's directory."""
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        return options

    # Sessions stay on the calling thread but the driver check is per connection
    options["connect_args"] = {"check_same_thread": False, "timeout": 30}
    if _is_memory_sqlite(url):
        options["poolclass"] = StaticPool
    else:
        directory = Path(url.database).parent
        if not directory.exists():
            logger.info("Creating database directory %s", directory)
            directory.mkdir(parents=True, exist_ok=True)
    return options


def _enable_sqlite_savepoints(engine: Engine, in_memory: bool) -> None:
    """Let SQLAlchemy drive transactions so per-event SAVEPOINTs work on SQLite.

    pysqlite defers BEGIN until the first write; its own transaction handling
    is switched off and BEGIN is emitted whenever SQLAlchemy opens one.
    """

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN")


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Session scope: commit on success, roll back on exception, always close.

    Raises:
        DatabaseConnectionError: If the database is not initialized

    Example:
        >>> with get_session() as session:
        ...     best = MatchRepository(session).best_for_offer(42)
    """
    if _session_factory is None:
        raise DatabaseConnectionError(NOT_INITIALIZED)

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(
            "Database session rolled back: %s",
            e,
            extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the engine created by init_database."""
    if _engine is None:
        raise DatabaseConnectionError(NOT_INITIALIZED)
    return _engine


def close_database() -> None:
    """Dispose of the engine. Call at shutdown."""
    global _engine, _session_factory

    if _engine is None:
        return
    logger.info("Closing database connections", extra={"event": "database.closed"})
    _engine.dispose()
    _engine = None
    _session_factory = None
