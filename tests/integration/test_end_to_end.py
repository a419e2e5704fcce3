"""Integration tests for a matching run with notifications.

Tests end-to-end flow:
- Sample files → MatchingEngine → MatchEventDispatcher → match store
- No second notification across repeated runs
- Profile refresh after a talent update
- Real SQLite database (in-memory)
- Mocked SMTP connection behind the real SMTPClient
"""

from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from talentmatch.config.loader import load_config
from talentmatch.domain.loader import load_offer, load_talents
from talentmatch.notifications import MatchEventDispatcher, SMTPClient
from talentmatch.persistence import (
    MatchRepository,
    NotificationRepository,
    get_session,
)
from talentmatch.pipeline import OfferMatchingRun

ROOT = Path(__file__).parent.parent.parent
REFERENCE_DATE = date(2026, 10, 19)


@pytest.fixture
def smtp_connection():
    return MagicMock()


@pytest.fixture
def matching_run(in_memory_db, smtp_connection, monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.test.com")
    monkeypatch.setenv("SMTP_PORT", "587")
    monkeypatch.delenv("SMTP_USER", raising=False)
    monkeypatch.delenv("SMTP_PASS", raising=False)
    monkeypatch.setenv("APP_BASE_URL", "https://talents.test.com")
    app_config, env_config = load_config(ROOT / "config.example.yaml")

    dispatcher = MatchEventDispatcher(
        env_config,
        email_config=app_config.email,
        notification_config=app_config.notifications,
        smtp_client=SMTPClient(smtp_factory=MagicMock(return_value=smtp_connection)),
        sleep=MagicMock(),
    )
    return OfferMatchingRun(app_config, env_config, dispatcher=dispatcher)


@pytest.fixture
def samples():
    offer = load_offer(ROOT / "samples" / "offer.yaml")
    talents, commitments = load_talents(ROOT / "samples" / "talents.yaml")
    return offer, talents, commitments


def test_run_stores_ranked_matches_and_notifies(matching_run, samples, smtp_connection):
    offer, talents, commitments = samples

    result = matching_run.run_for_offer(
        offer, talents, commitments=commitments, reference_date=REFERENCE_DATE
    )

    assert result.rejected == 1
    assert result.failed == 0
    assert result.retained == result.persisted > 0
    retained_ids = [m.talent_id for m in result.bulk.matches]
    assert retained_ids[0] == 1001
    assert 1004 not in retained_ids

    with get_session() as session:
        best = MatchRepository(session).best_for_offer(42)
        assert [r.talent_id for r in best] == [str(t) for t in retained_ids]
        assert all(r.notification_sent for r in best)

        feed = NotificationRepository(session).list_for_talent(1001)
        assert len(feed) == 1
        assert feed[0].link == (
            "https://talents.test.com/offres/developpeur-full-stack-react-node-lyon"
        )

    # Talents without an address are notified in-app only
    emailed = [r for r in result.dispatch_results if r.email_sent]
    assert smtp_connection.send_message.call_count == len(emailed) == result.emailed
    first_message = smtp_connection.send_message.call_args_list[0].args[0]
    assert first_message["To"] == "camille@example.com"
    assert first_message["Subject"].startswith("[Talent Match] New offer matching your profile")


def test_second_run_sends_nothing_new(matching_run, samples, smtp_connection):
    offer, talents, commitments = samples
    first = matching_run.run_for_offer(offer, talents, commitments=commitments, reference_date=REFERENCE_DATE)
    smtp_connection.reset_mock()

    second = matching_run.run_for_offer(offer, talents, commitments=commitments, reference_date=REFERENCE_DATE)

    assert second.excluded == first.retained
    assert second.retained == 0
    smtp_connection.send_message.assert_not_called()
    with get_session() as session:
        assert len(NotificationRepository(session).list_for_talent(1001)) == 1


def test_refresh_after_profile_update(matching_run, samples):
    offer, talents, commitments = samples
    matching_run.run_for_offer(offer, talents, commitments=commitments, reference_date=REFERENCE_DATE)

    camille = dict(talents[0], tjm=800)
    refresh = matching_run.refresh_talent(camille, [offer], reference_date=REFERENCE_DATE)

    assert refresh.updated == 1
    with get_session() as session:
        record = MatchRepository(session).get(42, 1001)
    assert record.rate_too_high is True
    assert record.feedback_rate == "Your day-rate is above the budget. Budget: 450-600"
    assert record.notification_sent is True
