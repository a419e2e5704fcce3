"""Rate compatibility checker: talent day-rate against the offer budget."""

from typing import Optional

from talentmatch.config.models import RateScoring
from talentmatch.domain.models import OfferRequirements, TalentProfile
from talentmatch.utils.numbers import clamp_score

from .models import RateResult, RateStatus


def format_budget(budget_min: Optional[int], budget_max: Optional[int]) -> str:
    """Budget range as shown in feedback: ``"400-600"``, ``"600"`` or ``"400+"``."""
    if budget_min is not None and budget_max is not None:
        if budget_min == budget_max:
            return str(budget_max)
        return f"{budget_min}-{budget_max}"
    if budget_max is not None:
        return str(budget_max)
    if budget_min is not None:
        return f"{budget_min}+"
    return ""


def check_rate(
    talent: TalentProfile, offer: OfferRequirements, config: Optional[RateScoring] = None
) -> RateResult:
    """Compare the talent's rate range with the offer's budget.

    The talent's floor (lowest acceptable rate) is tested against the budget
    maximum and its ceiling against the budget minimum. A talent cheaper than
    the budget is reported but not penalized.
    """
    config = config or RateScoring()
    yours = talent.displayed_rate

    def result(score, status, message, budget_hint=None):
        return RateResult(
            score=score,
            status=status,
            offer_min=offer.budget_min,
            offer_max=offer.budget_max,
            yours=yours,
            message=message,
            budget_hint=budget_hint,
        )

    if not talent.declares_rate:
        return result(
            config.unspecified_score,
            RateStatus.NON_RENSEIGNE,
            "You have not set a day-rate",
        )
    if not offer.declares_budget:
        return result(
            config.unspecified_score,
            RateStatus.NON_RENSEIGNE,
            "The offer does not state a budget",
        )

    floor = talent.rate_floor
    ceiling = talent.rate_ceiling
    budget = format_budget(offer.budget_min, offer.budget_max)

    if offer.budget_max is not None and floor > offer.budget_max:
        overshoot = (floor - offer.budget_max) / offer.budget_max
        score = clamp_score(100 - overshoot * config.overshoot_penalty, lower=config.too_high_floor)
        return result(
            score,
            RateStatus.TROP_HAUT,
            f"Your day-rate ({floor}) is above the budget ({budget})",
            budget_hint=budget,
        )

    if offer.budget_min is not None and ceiling < offer.budget_min:
        return result(
            100,
            RateStatus.TROP_BAS,
            f"Your day-rate ({ceiling}) is below the budget ({budget})",
        )

    return result(100, RateStatus.OK, f"Your day-rate fits the budget ({budget})")
