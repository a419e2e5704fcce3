"""Experience evaluator: talent seniority against the offer's minimum."""

from typing import Optional

from talentmatch.config.models import ExperienceScoring

from .models import ExperienceResult, ExperienceStatus


def evaluate_experience(
    years: int, minimum: Optional[int], config: Optional[ExperienceScoring] = None
) -> ExperienceResult:
    """Score ``years`` of experience against an optional ``minimum``.

    A shortfall costs ``shortfall_penalty_per_year`` points per missing year.
    Overqualification is reported but never penalized.
    """
    config = config or ExperienceScoring()

    if minimum is None:
        return ExperienceResult(
            score=100,
            status=ExperienceStatus.OK,
            required=None,
            yours=years,
            message="The offer sets no minimum experience",
        )

    if years < minimum:
        shortfall = minimum - years
        score = max(0, 100 - shortfall * config.shortfall_penalty_per_year)
        return ExperienceResult(
            score=score,
            status=ExperienceStatus.INSUFFISANT,
            required=minimum,
            yours=years,
            message=(
                f"{minimum} years of experience required, you have {years} "
                f"({shortfall} missing)"
            ),
        )

    if years - minimum > config.overqualified_margin_years:
        return ExperienceResult(
            score=100,
            status=ExperienceStatus.SURQUALIFIE,
            required=minimum,
            yours=years,
            message=f"You have {years} years of experience, well above the {minimum} required",
        )

    return ExperienceResult(
        score=100,
        status=ExperienceStatus.OK,
        required=minimum,
        yours=years,
        message=f"{minimum} years of experience required, you have {years}",
    )
