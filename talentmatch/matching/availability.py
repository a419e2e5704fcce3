"""Availability checker: when the talent is free against when the offer starts.

The talent's declared availability gives the score. Confirmed commitments
(missions, leave) overlapping the offer window are reported as conflicts so the
talent can see them, but they do not move the score. The one exception is a
talent declared unavailable who is on a mission during the window: the status
becomes EN_MISSION instead of NON_DISPONIBLE.
"""

from datetime import date
from typing import Iterable, Optional, Tuple

from talentmatch.config.models import AvailabilityScoring
from talentmatch.domain.models import (
    AvailabilityState,
    Commitment,
    CommitmentKind,
    OfferRequirements,
    TalentProfile,
)
from talentmatch.utils.numbers import clamp_score
from talentmatch.utils.timestamps import add_days, days_between, utc_today

from .models import AvailabilityResult, AvailabilityStatus, CommitmentConflict


def offer_window(
    offer: OfferRequirements, reference_date: date, horizon_days: int
) -> Tuple[date, date]:
    """Period the offer occupies: [start, end], or ``horizon_days`` from start when open-ended."""
    start = offer.start_date or reference_date
    end = offer.end_date or add_days(start, horizon_days)
    return start, end


def find_conflicts(
    commitments: Iterable[Commitment], window_start: date, window_end: date
) -> Tuple[CommitmentConflict, ...]:
    """Commitments overlapping the window, sorted by start date."""
    conflicts = []
    for commitment in commitments:
        overlap = commitment.overlap_days(window_start, window_end)
        if overlap > 0:
            conflicts.append(
                CommitmentConflict(
                    kind=commitment.kind,
                    start=commitment.start,
                    end=commitment.last_day,
                    overlap_days=overlap,
                )
            )
    conflicts.sort(key=lambda c: (c.start, c.end, c.kind.value))
    return tuple(conflicts)


def available_date(talent: TalentProfile, reference_date: date) -> Optional[date]:
    """First day the talent can start, None when declared unavailable."""
    if talent.availability == AvailabilityState.NON_DISPONIBLE:
        return None
    if talent.availability == AvailabilityState.DATE_PRECISE:
        return talent.available_from
    return add_days(reference_date, talent.availability.offset_days)


def check_availability(
    talent: TalentProfile,
    offer: OfferRequirements,
    commitments: Iterable[Commitment] = (),
    reference_date: Optional[date] = None,
    config: Optional[AvailabilityScoring] = None,
) -> AvailabilityResult:
    """Score how soon the talent can start relative to the offer start.

    Args:
        talent: Talent profile
        offer: Offer requirements
        commitments: Talent's confirmed commitments
        reference_date: "Today" for relative availability states (default: UTC today)
        config: Availability scoring parameters

    Returns:
        AvailabilityResult with score, status and conflicts (possibly empty)
    """
    config = config or AvailabilityScoring()
    reference_date = reference_date or utc_today()

    window_start, window_end = offer_window(offer, reference_date, config.commitment_horizon_days)
    conflicts = find_conflicts(commitments, window_start, window_end)

    if talent.availability == AvailabilityState.NON_DISPONIBLE:
        on_mission = any(c.kind == CommitmentKind.MISSION for c in conflicts)
        if on_mission:
            return AvailabilityResult(
                score=config.unavailable_score,
                status=AvailabilityStatus.EN_MISSION,
                conflicts=conflicts,
                message="You are on a mission during the offer period",
            )
        return AvailabilityResult(
            score=config.unavailable_score,
            status=AvailabilityStatus.NON_DISPONIBLE,
            conflicts=conflicts,
            message="You are marked as unavailable",
        )

    free_from = available_date(talent, reference_date)
    delay = days_between(window_start, free_from)
    grace = config.grace_window_days

    if delay <= 0:
        score = 100
        status = AvailabilityStatus.DISPONIBLE
        message = "You are available for the offer start"
    elif delay <= grace:
        score = clamp_score(100 - delay / grace * (100 - config.soon_min_score))
        status = AvailabilityStatus.BIENTOT
        message = f"You are available {delay} days after the offer start"
    else:
        late = config.soon_min_score - (delay - grace) * config.late_penalty_per_day
        score = clamp_score(late, lower=config.late_floor)
        status = AvailabilityStatus.BIENTOT
        message = f"You are available {delay} days after the offer start, past the {grace}-day window"

    if conflicts:
        message += f"; {len(conflicts)} commitment(s) overlap the offer period"

    return AvailabilityResult(
        score=score,
        status=status,
        available_from=free_from,
        delay_days=delay,
        conflicts=conflicts,
        message=message,
    )
