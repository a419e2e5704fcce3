"""Tests for loading offers and talents from files."""

from datetime import date
from pathlib import Path

import pytest

from talentmatch.domain import CommitmentKind, EntityNotFoundError, InvalidInputError, WorkMode
from talentmatch.domain.loader import load_commitments, load_offer, load_talent, load_talents

SAMPLES_DIR = Path(__file__).parent.parent / "samples"


class TestLoadOffer:
    """Tests for load_offer."""

    def test_sample_offer(self):
        offer = load_offer(SAMPLES_DIR / "offer.yaml")

        assert offer.offer_id == 42
        assert offer.slug == "developpeur-full-stack-react-node-lyon"
        assert offer.required_skills == ("React", "Node.js", "TypeScript")
        assert offer.work_mode == WorkMode.HYBRIDE
        assert offer.start_date == date(2026, 11, 2)

    def test_json_offer_under_offer_key(self, tmp_path):
        offer_file = tmp_path / "offer.json"
        offer_file.write_text('{"offer": {"id": "abc", "competencesRequises": ["Go"]}}')

        offer = load_offer(offer_file)

        assert offer.offer_id == "abc"
        assert offer.required_skills == ("Go",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(EntityNotFoundError) as exc_info:
            load_offer(tmp_path / "missing.yaml")

        assert exc_info.value.entity == "offer"
        assert str(exc_info.value).startswith("Offer not found: ")

    def test_invalid_yaml(self, tmp_path):
        offer_file = tmp_path / "offer.yaml"
        offer_file.write_text("titre: [unclosed\n")

        with pytest.raises(InvalidInputError, match="not valid YAML/JSON"):
            load_offer(offer_file)

    def test_list_document_rejected(self, tmp_path):
        offer_file = tmp_path / "offer.yaml"
        offer_file.write_text("- id: 1\n")

        with pytest.raises(InvalidInputError, match="expected a mapping"):
            load_offer(offer_file)


class TestLoadTalent:
    """Tests for load_talent."""

    def test_sample_talent_with_commitments(self):
        talent, commitments = load_talent(SAMPLES_DIR / "talent.yaml")

        assert talent.talent_id == 1001
        assert talent.rate == 550
        assert len(commitments) == 1
        assert commitments[0].kind == CommitmentKind.CONGE
        assert commitments[0].end == date(2027, 1, 2)

    def test_talent_without_commitments(self, tmp_path):
        talent_file = tmp_path / "talent.yaml"
        talent_file.write_text("id: 7\ncompetences: [Python]\n")

        talent, commitments = load_talent(talent_file)

        assert talent.skills == ("Python",)
        assert commitments == []

    def test_invalid_talent(self, tmp_path):
        talent_file = tmp_path / "talent.yaml"
        talent_file.write_text("id: 7\ncompetences: []\n")

        with pytest.raises(InvalidInputError) as exc_info:
            load_talent(talent_file)

        assert exc_info.value.entity == "talent"


class TestLoadTalents:
    """Tests for load_talents."""

    def test_sample_pool(self):
        talents, commitments = load_talents(SAMPLES_DIR / "talents.yaml")

        assert [t["id"] for t in talents] == [1001, 1002, 1003, 1004, 1005]
        assert "planning" not in talents[3]
        assert list(commitments) == [1004]
        assert commitments[1004][0].kind == CommitmentKind.MISSION

    def test_invalid_talents_are_kept_raw(self):
        """Test a bad profile does not reject the whole file."""
        talents, _ = load_talents(SAMPLES_DIR / "talents.yaml")

        assert talents[4]["competences"] == []

    def test_top_level_list(self, tmp_path):
        talents_file = tmp_path / "talents.yaml"
        talents_file.write_text(
            "- talentId: a1\n"
            "  competences: [Go]\n"
            "  commitments:\n"
            "    - {type: CONGE, dateDebut: 2026-11-01}\n"
            "- talentId: a2\n"
            "  competences: [Rust]\n"
        )

        talents, commitments = load_talents(talents_file)

        assert len(talents) == 2
        assert list(commitments) == ["a1"]
        assert commitments["a1"][0].last_day == date(2026, 11, 1)

    def test_mapping_without_talents_key(self, tmp_path):
        talents_file = tmp_path / "talents.yaml"
        talents_file.write_text("people: []\n")

        with pytest.raises(InvalidInputError, match="'talents' key"):
            load_talents(talents_file)

    def test_non_mapping_entry(self, tmp_path):
        talents_file = tmp_path / "talents.yaml"
        talents_file.write_text("talents:\n  - just a string\n")

        with pytest.raises(InvalidInputError, match="entry 0"):
            load_talents(talents_file)


class TestLoadCommitments:
    """Tests for load_commitments."""

    def test_empty(self):
        assert load_commitments(None) == []
        assert load_commitments([]) == []

    def test_not_a_list(self):
        with pytest.raises(InvalidInputError, match="must be a list"):
            load_commitments({"type": "CONGE"})
