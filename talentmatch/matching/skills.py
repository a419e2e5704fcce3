"""Skill matcher: overlap between a talent's skills and an offer's requirements.

Skills are compared on their stripped, casefolded form with exact equality.
"React" matches "react " but not "React.js".
"""

from typing import Iterable, List, Tuple

from talentmatch.utils.numbers import clamp_score

from .models import SkillsResult, SkillStatus


def normalize_skill(skill: str) -> str:
    """Comparison key of a skill name."""
    return skill.strip().casefold()


def dedupe_skills(skills: Iterable[str]) -> Tuple[str, ...]:
    """Drop duplicates on the normalized form, keeping the first spelling."""
    seen = set()
    unique: List[str] = []
    for skill in skills:
        key = normalize_skill(skill)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(skill.strip())
    return tuple(unique)


def match_skills(
    talent_skills: Iterable[str],
    required: Iterable[str],
    optional: Iterable[str] = (),
) -> SkillsResult:
    """Compare a talent's skills with an offer's required and optional skills.

    Args:
        talent_skills: Skills declared by the talent
        required: Skills the offer requires
        optional: Nice-to-have skills (reported as bonus, never scored)

    Returns:
        SkillsResult with matched/missing/bonus lists in offer order
    """
    owned = {normalize_skill(skill) for skill in talent_skills}
    required = dedupe_skills(required)
    optional = dedupe_skills(optional)

    matched = tuple(skill for skill in required if normalize_skill(skill) in owned)
    missing = tuple(skill for skill in required if normalize_skill(skill) not in owned)
    bonus = tuple(skill for skill in optional if normalize_skill(skill) in owned)

    if not required:
        score = 100
    else:
        score = clamp_score(len(matched) / len(required) * 100)

    if not missing:
        status = SkillStatus.COMPLET
    elif matched:
        status = SkillStatus.PARTIEL
    else:
        status = SkillStatus.AUCUN

    return SkillsResult(
        score=score,
        status=status,
        matched=matched,
        missing=missing,
        bonus=bonus,
        message=_skills_message(status, matched, missing, bonus, bool(required)),
    )


def _skills_message(status, matched, missing, bonus, has_requirements) -> str:
    if not has_requirements:
        message = "The offer lists no required skills"
    elif status == SkillStatus.COMPLET:
        message = f"You have all {len(matched)} required skills"
    elif status == SkillStatus.PARTIEL:
        message = (
            f"You have {len(matched)} of {len(matched) + len(missing)} required skills; "
            f"missing: {', '.join(missing)}"
        )
    else:
        message = f"You have none of the required skills ({', '.join(missing)})"

    if bonus:
        message += f". Bonus: {', '.join(bonus)}"
    return message
