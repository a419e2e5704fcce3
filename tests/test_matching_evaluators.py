"""Unit tests for the five dimension evaluators.

Covers:
- Skill matching (case-insensitive exact equality, bonus skills)
- Experience shortfall and overqualification
- Day-rate checks against the offer budget
- Availability delay curve and commitment conflicts
- Location/mobility compatibility
"""

from datetime import date

import pytest

from talentmatch.config.models import (
    AvailabilityScoring,
    ExperienceScoring,
    LocationScoring,
    RateScoring,
)
from talentmatch.domain.models import CommitmentKind
from talentmatch.matching import (
    AvailabilityStatus,
    ExperienceStatus,
    LocationStatus,
    RateStatus,
    SkillStatus,
    check_availability,
    check_location,
    check_rate,
    evaluate_experience,
    match_skills,
)
from talentmatch.matching.availability import available_date, find_conflicts, offer_window
from talentmatch.matching.rate import format_budget
from talentmatch.matching.skills import dedupe_skills, normalize_skill
from tests.helpers import REFERENCE_DATE, make_commitment, make_offer, make_talent


class TestSkillMatching:
    """Tests for match_skills."""

    def test_all_required_skills_matched(self):
        """Test complete coverage scores 100 and reports bonus skills."""
        result = match_skills(["react", "node.js", "aws"], ["React", "Node.js"], ["AWS"])

        assert result.score == 100
        assert result.status == SkillStatus.COMPLET
        assert result.matched == ("React", "Node.js")
        assert result.missing == ()
        assert result.bonus == ("AWS",)
        assert "Bonus: AWS" in result.message

    def test_partial_match_rounds_half_up(self):
        """Test 2 of 3 required skills gives 67."""
        result = match_skills(["React", "TypeScript"], ["React", "Node.js", "TypeScript"])

        assert result.score == 67
        assert result.status == SkillStatus.PARTIEL
        assert result.matched == ("React", "TypeScript")
        assert result.missing == ("Node.js",)

    def test_no_required_skill_matched(self):
        """Test zero overlap scores 0."""
        result = match_skills(["Vue.js"], ["React", "Node.js"])

        assert result.score == 0
        assert result.status == SkillStatus.AUCUN
        assert result.matched == ()
        assert result.missing == ("React", "Node.js")

    def test_offer_without_required_skills_scores_full(self):
        """Test an offer listing no required skills is not penalizing."""
        result = match_skills(["Python"], [], ["Django"])

        assert result.score == 100
        assert result.status == SkillStatus.COMPLET
        assert result.bonus == ()

    def test_optional_skills_never_change_the_score(self):
        """Test bonus skills are reported but not scored."""
        without_bonus = match_skills(["React"], ["React", "Node.js"], [])
        with_bonus = match_skills(["React", "AWS"], ["React", "Node.js"], ["AWS"])

        assert with_bonus.score == without_bonus.score == 50
        assert with_bonus.bonus == ("AWS",)

    def test_comparison_is_exact_after_casefold(self):
        """Test near-synonyms are not matched."""
        result = match_skills(["react.js", " NODE.JS "], ["React", "Node.js"])

        assert result.matched == ("Node.js",)
        assert result.missing == ("React",)

    def test_duplicate_required_skills_counted_once(self):
        """Test duplicates in the offer do not inflate the denominator."""
        result = match_skills(["React"], ["React", "react", "Node.js"])

        assert result.score == 50
        assert result.matched == ("React",)

    def test_matched_and_missing_partition_required(self):
        """Test every required skill lands in exactly one list."""
        required = ["React", "Node.js", "Go", "Kubernetes"]
        result = match_skills(["go", "react"], required)

        assert set(result.matched) | set(result.missing) == set(required)
        assert not set(result.matched) & set(result.missing)

    def test_normalize_and_dedupe(self):
        """Test the comparison key and first-spelling deduplication."""
        assert normalize_skill("  TypeScript ") == "typescript"
        assert dedupe_skills(["AWS", "aws ", "", "GCP"]) == ("AWS", "GCP")


class TestExperienceEvaluation:
    """Tests for evaluate_experience."""

    def test_no_minimum_is_ok(self):
        result = evaluate_experience(0, None)

        assert result.score == 100
        assert result.status == ExperienceStatus.OK
        assert result.required is None

    def test_meets_minimum(self):
        result = evaluate_experience(3, 3)

        assert result.score == 100
        assert result.status == ExperienceStatus.OK

    @pytest.mark.parametrize(
        "years,minimum,expected",
        [(2, 3, 80), (1, 3, 60), (0, 5, 0), (0, 10, 0)],
    )
    def test_shortfall_penalty(self, years, minimum, expected):
        """Test each missing year costs 20 points, floored at 0."""
        result = evaluate_experience(years, minimum)

        assert result.score == expected
        assert result.status == ExperienceStatus.INSUFFISANT
        assert result.required == minimum
        assert result.yours == years

    def test_overqualified_is_not_penalized(self):
        """Test more than 5 years above the minimum is reported only."""
        result = evaluate_experience(12, 3)

        assert result.score == 100
        assert result.status == ExperienceStatus.SURQUALIFIE

    def test_margin_boundary_is_ok(self):
        """Test exactly minimum + margin stays OK."""
        assert evaluate_experience(8, 3).status == ExperienceStatus.OK

    def test_custom_penalty(self):
        config = ExperienceScoring(shortfall_penalty_per_year=25)

        assert evaluate_experience(1, 3, config).score == 50


class TestRateCheck:
    """Tests for check_rate."""

    def test_rate_within_budget(self):
        result = check_rate(make_talent(tjm=500), make_offer())

        assert result.score == 100
        assert result.status == RateStatus.OK
        assert result.offer_min == 400
        assert result.offer_max == 600
        assert result.yours == 500

    def test_rate_too_high_scales_with_overshoot(self):
        """Test 20% above the maximum scores 40 and carries the budget hint."""
        result = check_rate(make_talent(tjm=720), make_offer())

        assert result.score == 40
        assert result.status == RateStatus.TROP_HAUT
        assert result.budget_hint == "400-600"

    def test_rate_far_too_high_is_floored(self):
        result = check_rate(make_talent(tjm=900), make_offer())

        assert result.score == 0
        assert result.status == RateStatus.TROP_HAUT

    def test_rate_too_high_floor_is_configurable(self):
        config = RateScoring(too_high_floor=10)

        assert check_rate(make_talent(tjm=900), make_offer(), config).score == 10

    def test_rate_below_budget_is_not_penalized(self):
        result = check_rate(make_talent(tjm=300), make_offer())

        assert result.score == 100
        assert result.status == RateStatus.TROP_BAS
        assert result.budget_hint is None

    def test_talent_without_rate_is_neutral(self):
        result = check_rate(make_talent(tjm=None), make_offer())

        assert result.score == 70
        assert result.status == RateStatus.NON_RENSEIGNE
        assert result.yours is None

    def test_offer_without_budget_is_neutral(self):
        result = check_rate(make_talent(), make_offer(tjmMin=None, tjmMax=None))

        assert result.score == 70
        assert result.status == RateStatus.NON_RENSEIGNE

    def test_rate_range_overlapping_budget_is_ok(self):
        """Test a range is compatible as long as its floor fits the maximum."""
        result = check_rate(make_talent(tjm=None, tjmMin=550, tjmMax=700), make_offer())

        assert result.status == RateStatus.OK
        assert result.yours == 550

    def test_rate_range_floor_above_budget(self):
        result = check_rate(make_talent(tjm=None, tjmMin=660, tjmMax=800), make_offer())

        assert result.status == RateStatus.TROP_HAUT
        assert result.score == 70

    def test_open_ended_budget(self):
        """Test an offer with only a minimum never finds a rate too high."""
        result = check_rate(make_talent(tjm=1500), make_offer(tjmMax=None))

        assert result.status == RateStatus.OK

    @pytest.mark.parametrize(
        "budget_min,budget_max,expected",
        [(400, 600, "400-600"), (600, 600, "600"), (None, 600, "600"), (400, None, "400+")],
    )
    def test_format_budget(self, budget_min, budget_max, expected):
        assert format_budget(budget_min, budget_max) == expected


class TestAvailabilityCheck:
    """Tests for check_availability."""

    def test_immediate_talent_is_available(self):
        result = check_availability(make_talent(), make_offer(), reference_date=REFERENCE_DATE)

        assert result.score == 100
        assert result.status == AvailabilityStatus.DISPONIBLE
        assert result.available_from == REFERENCE_DATE
        assert result.delay_days == 0
        assert result.conflicts == ()

    def test_available_before_a_later_start(self):
        """Test a talent free before the offer starts has no delay."""
        offer = make_offer(dateDebut="2026-12-01")
        talent = make_talent(disponibilite="SOUS_1_MOIS")

        result = check_availability(talent, offer, reference_date=REFERENCE_DATE)

        assert result.status == AvailabilityStatus.DISPONIBLE
        assert result.delay_days < 0

    @pytest.mark.parametrize(
        "state,expected_score",
        [("SOUS_15_JOURS", 90), ("SOUS_1_MOIS", 80), ("SOUS_2_MOIS", 50), ("SOUS_3_MOIS", 20)],
    )
    def test_delay_curve(self, state, expected_score):
        """Test the linear decay inside the grace window and the late penalty past it."""
        result = check_availability(
            make_talent(disponibilite=state), make_offer(), reference_date=REFERENCE_DATE
        )

        assert result.score == expected_score
        assert result.status == AvailabilityStatus.BIENTOT

    def test_late_score_is_floored(self):
        talent = make_talent(disponibilite="DATE_PRECISE", disponibleLe="2027-09-01")

        result = check_availability(talent, make_offer(), reference_date=REFERENCE_DATE)

        assert result.score == 10
        assert result.available_from == date(2027, 9, 1)

    def test_unavailable_talent(self):
        result = check_availability(
            make_talent(disponibilite="NON_DISPONIBLE"), make_offer(), reference_date=REFERENCE_DATE
        )

        assert result.score == 0
        assert result.status == AvailabilityStatus.NON_DISPONIBLE
        assert result.available_from is None
        assert result.status.blocks_application

    def test_unavailable_talent_on_mission(self):
        """Test an overlapping mission turns NON_DISPONIBLE into EN_MISSION."""
        mission = make_commitment("EN_MISSION", date(2026, 9, 1), date(2027, 2, 28))

        result = check_availability(
            make_talent(disponibilite="NON_DISPONIBLE"),
            make_offer(),
            [mission],
            reference_date=REFERENCE_DATE,
        )

        assert result.status == AvailabilityStatus.EN_MISSION
        assert result.score == 0
        assert result.conflicts[0].kind == CommitmentKind.MISSION

    def test_conflicts_are_reported_without_changing_the_score(self):
        leave = make_commitment("CONGE", date(2026, 12, 21), date(2027, 1, 2))

        result = check_availability(
            make_talent(), make_offer(dateFin="2027-03-31"), [leave], reference_date=REFERENCE_DATE
        )

        assert result.score == 100
        assert len(result.conflicts) == 1
        assert result.conflicts[0].overlap_days == 13
        assert result.conflicts[0].as_dict() == {
            "type": "CONGE",
            "dateDebut": "2026-12-21",
            "dateFin": "2027-01-02",
            "joursEnConflit": 13,
        }
        assert "1 commitment(s)" in result.message

    def test_commitments_outside_window_ignored(self):
        before = make_commitment("MISSION", date(2026, 1, 1), date(2026, 6, 30))
        after = make_commitment("CONGE", date(2027, 6, 1), date(2027, 6, 15))

        result = check_availability(
            make_talent(), make_offer(dateFin="2027-03-31"), [before, after], reference_date=REFERENCE_DATE
        )

        assert result.conflicts == ()

    def test_open_ended_offer_uses_horizon(self):
        """Test an offer without end date spans the configured horizon."""
        offer = make_offer()
        start, end = offer_window(offer, REFERENCE_DATE, 90)

        assert start == REFERENCE_DATE
        assert end == date(2027, 1, 17)

    def test_offer_without_start_starts_on_reference_date(self):
        offer = make_offer(dateDebut=None)

        start, _ = offer_window(offer, REFERENCE_DATE, 90)

        assert start == REFERENCE_DATE

    def test_conflicts_sorted_by_start(self):
        late = make_commitment("CONGE", date(2026, 12, 1), date(2026, 12, 5))
        early = make_commitment("ARRET_MALADIE", date(2026, 11, 1))

        conflicts = find_conflicts([late, early], REFERENCE_DATE, date(2027, 1, 17))

        assert [c.start for c in conflicts] == [date(2026, 11, 1), date(2026, 12, 1)]
        assert conflicts[0].overlap_days == 1

    def test_available_date_for_precise_date(self):
        talent = make_talent(disponibilite="DATE_PRECISE", disponibleLe="2026-11-15")

        assert available_date(talent, REFERENCE_DATE) == date(2026, 11, 15)

    def test_custom_grace_window(self):
        config = AvailabilityScoring(grace_window="2w", soon_min_score=60)
        talent = make_talent(disponibilite="SOUS_15_JOURS")

        result = check_availability(talent, make_offer(), reference_date=REFERENCE_DATE, config=config)

        # One day past a 14-day window
        assert result.score == 59


class TestLocationCheck:
    """Tests for check_location."""

    def test_full_remote_offer_accepts_everyone(self):
        result = check_location(make_talent(mobilite="SUR_SITE", ville="Paris"), make_offer())

        assert result.score == 100
        assert result.status == LocationStatus.OK

    def test_flexible_talent_is_ok(self):
        offer = make_offer(mobilite="SUR_SITE", lieu="Paris")

        assert check_location(make_talent(mobilite="FLEXIBLE"), offer).status == LocationStatus.OK

    def test_remote_only_talent_on_site_offer(self):
        offer = make_offer(mobilite="SUR_SITE")

        result = check_location(make_talent(mobilite="FULL_REMOTE"), offer)

        assert result.status == LocationStatus.NON_COMPATIBLE
        assert result.score == 20

    def test_remote_only_talent_hybrid_offer(self):
        offer = make_offer(mobilite="HYBRIDE")

        result = check_location(make_talent(mobilite="TELETRAVAIL"), offer)

        assert result.status == LocationStatus.NON_COMPATIBLE

    def test_same_city_is_case_insensitive(self):
        offer = make_offer(mobilite="SUR_SITE", lieu="Lyon")

        result = check_location(make_talent(mobilite="SUR_SITE", ville=" lyon "), offer)

        assert result.status == LocationStatus.OK

    def test_hybrid_offer_in_another_city(self):
        offer = make_offer(mobilite="HYBRIDE", lieu="Lyon")

        result = check_location(make_talent(mobilite="HYBRIDE", ville="Paris"), offer)

        assert result.status == LocationStatus.ELOIGNE
        assert result.score == 50

    def test_on_site_offer_in_another_city(self):
        offer = make_offer(mobilite="SUR_SITE", lieu="Lyon")

        result = check_location(make_talent(mobilite="SUR_SITE", ville="Paris"), offer)

        assert result.status == LocationStatus.NON_COMPATIBLE

    def test_unknown_city_is_not_penalized(self):
        offer = make_offer(mobilite="SUR_SITE", lieu=None)

        result = check_location(make_talent(mobilite="HYBRIDE", ville="Paris"), offer)

        assert result.status == LocationStatus.OK

    def test_custom_scores(self):
        config = LocationScoring(distant_score=30)
        offer = make_offer(mobilite="HYBRIDE", lieu="Lyon")

        assert check_location(make_talent(mobilite="HYBRIDE", ville="Nice"), offer, config).score == 30
