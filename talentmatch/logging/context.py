"""Scoped fields for log records.

A run pushes ``run_id`` and ``offer_id`` once, the dispatcher adds
``talent_id`` per event, and every record emitted inside those scopes carries
them (see ContextualFilter). Fields live in a ContextVar; thread pool workers
only see them when the submitted callable is wrapped with ``bind_context``.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token, copy_context
from typing import Any, Callable, Dict, Iterator

_fields: ContextVar[Dict[str, Any]] = ContextVar("talentmatch_log_fields", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return dict(_fields.get())


def push_log_context(**fields: Any) -> Token:
    """Add ``fields`` on top of the current ones; undo with pop_log_context."""
    return _fields.set({**_fields.get(), **fields})


def pop_log_context(token: Token) -> None:
    _fields.reset(token)


def clear_log_context() -> None:
    """Drop every field. Used by tests."""
    _fields.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """
    Attach ``fields`` to every record logged inside the block.

    Example:
        >>> with log_context(run_id="abc123", offer_id=42):
        ...     logger.info("Scoring talent pool")
    """
    token = push_log_context(**fields)
    try:
        yield
    finally:
        pop_log_context(token)


def bind_context(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap ``func`` to run in a snapshot of the caller's fields, for executor workers."""
    snapshot = copy_context()

    def run_in_snapshot(*args, **kwargs):
        return snapshot.copy().run(func, *args, **kwargs)

    return run_in_snapshot
