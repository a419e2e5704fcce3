"""Shared fixtures."""

import pytest

from talentmatch.persistence import close_database, init_database


@pytest.fixture
def in_memory_db():
    """Initialize an in-memory SQLite match store for one test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()
