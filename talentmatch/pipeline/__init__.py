"""Run orchestration for matching talent pools and dispatching the matches."""

from .models import MatchingRunResult, TalentRefreshResult
from .runner import OfferMatchingRun

__all__ = [
    "OfferMatchingRun",
    "MatchingRunResult",
    "TalentRefreshResult",
]
