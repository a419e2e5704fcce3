"""Unit tests for notification payload builders."""

from datetime import datetime, timezone

from talentmatch.config.models import NotificationConfig
from talentmatch.notifications.payloads import (
    NEW_MATCH_KIND,
    build_in_app_notification,
    build_notification_context,
    build_offer_url,
)
from tests.helpers import make_event, make_offer

BASE_URL = "https://talents.example.com"
NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def test_offer_url_uses_slug():
    url = build_offer_url(make_event(), BASE_URL, NotificationConfig())

    assert url == "https://talents.example.com/offres/developpeur-full-stack"


def test_offer_url_falls_back_to_offer_id():
    event = make_event(offer=make_offer(slug=None))

    url = build_offer_url(event, BASE_URL + "/", NotificationConfig())

    assert url == "https://talents.example.com/offres/42"


def test_offer_url_custom_template():
    config = NotificationConfig(offer_url_template="{base_url}/jobs/{slug}?ref=match")

    url = build_offer_url(make_event(), BASE_URL, config)

    assert url == "https://talents.example.com/jobs/developpeur-full-stack?ref=match"


def test_in_app_notification():
    event = make_event()

    notification = build_in_app_notification(event, "https://x/offres/1", NOW)

    assert notification.talent_id == "1"
    assert notification.kind == NEW_MATCH_KIND
    assert notification.title == "New offer matching your profile"
    assert notification.message == 'The offer "Développeur Full-Stack" matches your profile at 100%'
    assert notification.link == "https://x/offres/1"
    assert notification.data == {"offerId": 42, "score": 100}
    assert notification.read is False
    assert notification.created_at == NOW


def test_in_app_notification_without_title():
    event = make_event(offer=make_offer(titre=None))

    notification = build_in_app_notification(event, "https://x", NOW)

    assert '"Offer 42"' in notification.message


def test_notification_context():
    event = make_event(tjm=650, prenom="Inès")

    context = build_notification_context(event, "https://x/offres/1", subject_prefix="[TM]")

    assert context["subject_prefix"] == "[TM]"
    assert context["first_name"] == "Inès"
    assert context["offer_title"] == "Développeur Full-Stack"
    assert context["offer_url"] == "https://x/offres/1"
    assert context["score"] == event.score
    assert context["recommendation"] == event.result.recommendation.value
    assert context["matched_skills"] == ["React", "Node.js", "AWS"]
    assert context["missing_skills"] == []
    assert context["feedback_rate"] == "Your day-rate is above the budget. Budget: 400-600"
    assert context["feedback_experience"] is None
    assert context["availability"] == event.result.availability.message
