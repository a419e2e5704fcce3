"""Location/mobility checker: talent work-mode preference against the offer."""

from typing import Optional

from talentmatch.config.models import LocationScoring
from talentmatch.domain.models import OfferRequirements, TalentProfile, WorkMode

from .models import LocationResult, LocationStatus


def _same_place(a: Optional[str], b: Optional[str]) -> Optional[bool]:
    """Case-insensitive comparison, None when either side is unknown."""
    if not a or not b:
        return None
    return a.strip().casefold() == b.strip().casefold()


def check_location(
    talent: TalentProfile, offer: OfferRequirements, config: Optional[LocationScoring] = None
) -> LocationResult:
    """Decide whether the talent's mobility fits the offer's work mode and place."""
    config = config or LocationScoring()

    def result(status: LocationStatus, message: str) -> LocationResult:
        scores = {
            LocationStatus.OK: 100,
            LocationStatus.ELOIGNE: config.distant_score,
            LocationStatus.NON_COMPATIBLE: config.incompatible_score,
        }
        return LocationResult(score=scores[status], status=status, message=message)

    if offer.work_mode == WorkMode.FULL_REMOTE:
        return result(LocationStatus.OK, "The offer is fully remote")
    if WorkMode.FLEXIBLE in (offer.work_mode, talent.mobility):
        return result(LocationStatus.OK, "Work mode is flexible")

    # The offer requires presence from here on
    if talent.mobility == WorkMode.FULL_REMOTE:
        return result(
            LocationStatus.NON_COMPATIBLE,
            "The offer requires presence on site and you only work remotely",
        )

    same = _same_place(talent.city, offer.location)
    if same is None:
        return result(LocationStatus.OK, "Location could not be compared")
    if same:
        return result(LocationStatus.OK, f"The offer is located in {offer.location}")
    if offer.work_mode == WorkMode.HYBRIDE:
        return result(
            LocationStatus.ELOIGNE,
            f"The hybrid offer is in {offer.location}, you are in {talent.city}",
        )
    return result(
        LocationStatus.NON_COMPATIBLE,
        f"The on-site offer is in {offer.location}, you are in {talent.city}",
    )
