"""Tests for logging context propagation."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from talentmatch.logging.context import (
    bind_context,
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


def test_empty_context():
    assert get_log_context() == {}


def test_push_and_pop():
    token = push_log_context(run_id="abc123", offer_id=42)
    assert get_log_context() == {"run_id": "abc123", "offer_id": 42}

    pop_log_context(token)
    assert get_log_context() == {}


def test_nested_pushes_restore_in_order():
    outer = push_log_context(run_id="abc123")
    inner = push_log_context(talent_id=7)
    assert get_log_context() == {"run_id": "abc123", "talent_id": 7}

    pop_log_context(inner)
    assert get_log_context() == {"run_id": "abc123"}

    pop_log_context(outer)
    assert get_log_context() == {}


def test_inner_value_overrides_outer():
    with log_context(talent_id=1):
        with log_context(talent_id=2):
            assert get_log_context()["talent_id"] == 2
        assert get_log_context()["talent_id"] == 1


def test_context_manager_restores_on_exception():
    with pytest.raises(RuntimeError):
        with log_context(run_id="abc123"):
            raise RuntimeError("boom")

    assert get_log_context() == {}


def test_clear_context():
    push_log_context(run_id="abc123")

    clear_log_context()

    assert get_log_context() == {}


def test_get_returns_a_copy():
    with log_context(run_id="abc123"):
        context = get_log_context()
        context["offer_id"] = "modified"

        assert get_log_context() == {"run_id": "abc123"}


def test_worker_threads_do_not_inherit_context():
    with log_context(run_id="abc123"):
        with ThreadPoolExecutor(max_workers=1) as pool:
            seen = pool.submit(get_log_context).result()

    assert seen == {}


def test_bind_context_carries_context_into_workers():
    """Test pool workers see the submitting scope's run and offer ids."""
    def worker(talent_id):
        with log_context(talent_id=talent_id):
            return get_log_context()

    with log_context(run_id="abc123", offer_id=42):
        with ThreadPoolExecutor(max_workers=2) as pool:
            contexts = list(pool.map(bind_context(worker), [1, 2, 3]))

    assert contexts == [
        {"run_id": "abc123", "offer_id": 42, "talent_id": talent_id} for talent_id in (1, 2, 3)
    ]
    assert get_log_context() == {}
