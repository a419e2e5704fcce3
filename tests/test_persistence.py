"""Unit tests for persistence layer."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, text

from talentmatch.domain.models import TalentNotification
from talentmatch.matching import MatchingEngine
from talentmatch.persistence import (
    DatabaseConnectionError,
    MatchRepository,
    NotificationRepository,
    PersistenceError,
    RecordNotFoundError,
    close_database,
    get_engine,
    get_session,
    init_database,
)
from talentmatch.persistence.schema import MatchModel, _format_datetime, _parse_datetime
from tests.helpers import REFERENCE_DATE, make_offer, make_talent

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_init_database_success(self, tmp_path):
        """Test successful database initialization."""
        db_file = tmp_path / "test.db"

        init_database(f"sqlite:///{db_file}")

        assert db_file.exists()
        with get_session() as session:
            assert session is not None

        close_database()

    def test_init_database_creates_parent_directories(self, tmp_path):
        db_file = tmp_path / "subdir" / "nested" / "test.db"

        init_database(f"sqlite:///{db_file}")

        assert db_file.exists()
        close_database()

    def test_init_database_in_memory(self, in_memory_db):
        with get_engine().connect() as conn:
            tables = {
                row[0]
                for row in conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
            }

        assert {"matches", "notifications"} <= tables

    @pytest.mark.parametrize("url", ["", "not a url"])
    def test_init_database_invalid_url_raises_error(self, url):
        with pytest.raises(DatabaseConnectionError):
            init_database(url)

    def test_schema_creation_is_idempotent(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'test.db'}"

        init_database(db_url)
        with get_session() as session:
            MatchRepository(session).upsert_result(sample_result(), now=NOW)
        close_database()

        init_database(db_url)
        with get_session() as session:
            assert MatchRepository(session).get(42, 1) is not None
        close_database()


class TestSessionManagement:
    """Tests for session management."""

    def test_session_commits_on_success(self, in_memory_db):
        with get_session() as session:
            MatchRepository(session).upsert_result(sample_result(), now=NOW)

        with get_session() as session:
            assert session.execute(select(MatchModel)).scalars().first() is not None

    def test_session_rolls_back_on_exception(self, in_memory_db):
        with pytest.raises(ValueError):
            with get_session() as session:
                MatchRepository(session).upsert_result(sample_result(), now=NOW)
                raise ValueError("Test exception")

        with get_session() as session:
            assert session.execute(select(MatchModel)).scalars().first() is None

    def test_savepoint_rolls_back_alone(self, in_memory_db):
        """Test a failed nested transaction keeps the outer work."""
        with get_session() as session:
            repo = MatchRepository(session)
            repo.upsert_result(sample_result(talent_id=1), now=NOW)
            with pytest.raises(ValueError):
                with session.begin_nested():
                    repo.upsert_result(sample_result(talent_id=2), now=NOW)
                    raise ValueError("boom")

        with get_session() as session:
            assert MatchRepository(session).existing_talent_ids(42) == {"1"}

    def test_get_session_without_init_raises_error(self):
        close_database()

        with pytest.raises(DatabaseConnectionError, match="Database not initialized"):
            with get_session():
                pass

    def test_get_engine_without_init_raises_error(self):
        close_database()

        with pytest.raises(DatabaseConnectionError):
            get_engine()


class TestDatetimeStorage:
    """Tests for timestamp conversions."""

    def test_round_trip_is_utc(self):
        paris = timezone(timedelta(hours=2))
        stored = _format_datetime(datetime(2026, 10, 18, 11, 0, 0, 123456, tzinfo=paris))

        assert stored == "2026-10-18T09:00:00.123456Z"
        assert _parse_datetime(stored) == datetime(2026, 10, 18, 9, 0, 0, 123456, tzinfo=timezone.utc)

    def test_parse_without_fraction(self):
        assert _parse_datetime("2026-10-18T09:00:00Z") == NOW

    def test_none_values(self):
        assert _format_datetime(None) is None
        assert _parse_datetime(None) is None
        assert _parse_datetime("") is None


class TestMatchRepository:
    """Tests for MatchRepository."""

    @pytest.fixture(autouse=True)
    def setup_database(self, in_memory_db):
        yield

    def test_upsert_inserts_new_match(self):
        with get_session() as session:
            record = MatchRepository(session).upsert_result(sample_result(), now=NOW)

        assert record.offer_id == "42"
        assert record.talent_id == "1"
        assert record.score == 100
        assert record.score_details["skills"] == 100
        assert record.matched_skills == ["React", "Node.js", "AWS"]
        assert record.created_at == NOW
        assert record.seen_by_talent is False

    def test_upsert_stores_feedback(self):
        result = MatchingEngine().evaluate(
            make_talent(tjm=700, anneesExperience=1),
            make_offer(),
            reference_date=REFERENCE_DATE,
        )

        with get_session() as session:
            record = MatchRepository(session).upsert_result(result, now=NOW)

        assert record.rate_too_high is True
        assert record.feedback_rate == "Your day-rate is above the budget. Budget: 400-600"
        assert record.experience_insufficient is True
        assert record.feedback_experience == "3 years of experience required, you have 1"

    def test_upsert_updates_existing_match(self):
        """Test a second upsert refreshes the score and keeps tracking flags."""
        later = NOW + timedelta(days=3)
        with get_session() as session:
            repo = MatchRepository(session)
            repo.upsert_result(sample_result(), now=NOW)
            repo.mark_seen(42, 1)
            repo.mark_notified(42, 1, sent_at=NOW)

        with get_session() as session:
            updated = MatchRepository(session).upsert_result(
                sample_result(competences=["React"]), now=later
            )

        assert updated.score < 100
        assert updated.missing_skills == ["Node.js"]
        assert updated.created_at == NOW
        assert updated.updated_at == later
        assert updated.seen_by_talent is True
        assert updated.notification_sent is True
        assert updated.notification_sent_at == NOW

        with get_session() as session:
            assert len(MatchRepository(session).best_for_offer(42)) == 1

    def test_upsert_requires_identifiers(self):
        result = MatchingEngine().evaluate(
            make_talent(id=None), make_offer(), reference_date=REFERENCE_DATE
        )

        with get_session() as session:
            with pytest.raises(PersistenceError, match="without offer and talent ids"):
                MatchRepository(session).upsert_result(result)

    def test_explicit_identifiers_override_result(self):
        with get_session() as session:
            record = MatchRepository(session).upsert_result(
                sample_result(), offer_id="offer-9", talent_id="t-1", now=NOW
            )

        assert (record.offer_id, record.talent_id) == ("offer-9", "t-1")

    def test_get_returns_none_when_not_found(self):
        with get_session() as session:
            assert MatchRepository(session).get(42, 999) is None

    def test_existing_talent_ids_are_strings(self):
        with get_session() as session:
            repo = MatchRepository(session)
            repo.upsert_result(sample_result(talent_id=1), now=NOW)
            repo.upsert_result(sample_result(talent_id="abc"), now=NOW)
            repo.upsert_result(sample_result(talent_id=3), offer_id=7, now=NOW)

        with get_session() as session:
            assert MatchRepository(session).existing_talent_ids(42) == {"1", "abc"}

    def test_mark_seen_missing_match(self):
        with get_session() as session:
            with pytest.raises(RecordNotFoundError):
                MatchRepository(session).mark_seen(42, 999)

    def test_mark_notified_missing_match(self):
        with get_session() as session:
            with pytest.raises(RecordNotFoundError):
                MatchRepository(session).mark_notified(42, 999)

    def test_best_for_offer_ordering_and_limit(self):
        with get_session() as session:
            repo = MatchRepository(session)
            repo.upsert_result(sample_result(talent_id=3, competences=["React"]), now=NOW)
            repo.upsert_result(sample_result(talent_id=2), now=NOW)
            repo.upsert_result(sample_result(talent_id=1), now=NOW)

        with get_session() as session:
            best = MatchRepository(session).best_for_offer(42, limit=2)

        assert [r.talent_id for r in best] == ["1", "2"]

    def test_for_talent_filters_by_score(self):
        with get_session() as session:
            repo = MatchRepository(session)
            repo.upsert_result(sample_result(), offer_id=1, now=NOW)
            repo.upsert_result(sample_result(competences=["Cobol"]), offer_id=2, now=NOW)

        with get_session() as session:
            repo = MatchRepository(session)
            assert [r.offer_id for r in repo.for_talent(1)] == ["1", "2"]
            assert [r.offer_id for r in repo.for_talent(1, min_score=60)] == ["1"]


class TestNotificationRepository:
    """Tests for NotificationRepository."""

    @pytest.fixture(autouse=True)
    def setup_database(self, in_memory_db):
        yield

    def test_create_and_list(self):
        with get_session() as session:
            created = NotificationRepository(session).create(
                make_notification(title="First", created_at=NOW, data={"offreId": "42", "score": 86})
            )

        assert created.title == "First"
        assert created.data == {"offreId": "42", "score": 86}

        with get_session() as session:
            notifications = NotificationRepository(session).list_for_talent(1)

        assert len(notifications) == 1
        assert notifications[0].created_at == NOW

    def test_list_newest_first_with_limit(self):
        with get_session() as session:
            repo = NotificationRepository(session)
            repo.create(make_notification(title="Old", created_at=NOW))
            repo.create(make_notification(title="New", created_at=NOW + timedelta(hours=1)))
            repo.create(make_notification(talent_id=2, title="Other", created_at=NOW))

        with get_session() as session:
            repo = NotificationRepository(session)
            assert [n.title for n in repo.list_for_talent(1)] == ["New", "Old"]
            assert [n.title for n in repo.list_for_talent(1, limit=1)] == ["New"]

    def test_unread_only(self):
        with get_session() as session:
            repo = NotificationRepository(session)
            repo.create(make_notification(title="Read", read=True))
            repo.create(make_notification(title="Unread"))

        with get_session() as session:
            unread = NotificationRepository(session).list_for_talent(1, unread_only=True)

        assert [n.title for n in unread] == ["Unread"]


# Helper functions for creating test fixtures


def sample_result(talent_id=1, **talent_overrides):
    """Score a talent against the default offer."""
    return MatchingEngine().evaluate(
        make_talent(id=talent_id, **talent_overrides),
        make_offer(),
        reference_date=REFERENCE_DATE,
    )


def make_notification(talent_id=1, title="New offer", created_at=NOW, **overrides):
    return TalentNotification(
        talent_id=talent_id,
        title=title,
        message="An offer matches your profile",
        link="http://localhost:3000/offres/developpeur-full-stack",
        created_at=created_at,
        **overrides,
    )
