"""Data models for matching run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

from talentmatch.matching.models import BulkMatchResult
from talentmatch.notifications.models import DispatchResult

Identifier = Union[int, str]


@dataclass
class MatchingRunResult:
    """
    Results of matching a talent pool against one offer and dispatching the matches.

    Attributes:
        offer_id: Offer the run was for
        run_id: Identifier stamped on every log record of the run
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        duration_seconds: Total time for the run
        evaluated: Talents scored
        retained: Matches at or above the threshold
        excluded: Talents skipped because they already had a match
        rejected: Talents that failed validation
        persisted: Matches stored
        notified: In-app notifications created
        emailed: Emails delivered
        failed: Matches that could not be stored
        bulk: Ranked matching output
        dispatch_results: Per-match dispatch outcomes
        skipped: Whether the run was skipped (another run for the offer in progress)
    """

    offer_id: Optional[Identifier]
    run_id: str
    run_started_at: datetime
    run_finished_at: datetime
    duration_seconds: float = 0.0
    evaluated: int = 0
    retained: int = 0
    excluded: int = 0
    rejected: int = 0
    persisted: int = 0
    notified: int = 0
    emailed: int = 0
    failed: int = 0
    bulk: Optional[BulkMatchResult] = None
    dispatch_results: List[DispatchResult] = field(default_factory=list)
    skipped: bool = False

    def __post_init__(self):
        """Compute counters from the bulk output and dispatch results."""
        if self.bulk is not None:
            self.evaluated = self.bulk.evaluated_count
            self.retained = self.bulk.retained_count
            self.excluded = self.bulk.excluded_count
            self.rejected = len(self.bulk.rejected)

        if self.dispatch_results:
            self.persisted = sum(1 for r in self.dispatch_results if r.persisted)
            self.notified = sum(1 for r in self.dispatch_results if r.notified)
            self.emailed = sum(1 for r in self.dispatch_results if r.email_sent)
            self.failed = sum(1 for r in self.dispatch_results if r.failed)

        if self.duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.duration_seconds = delta.total_seconds()

    @property
    def had_errors(self) -> bool:
        return self.failed > 0 or self.rejected > 0


@dataclass
class TalentRefreshResult:
    """
    Results of recomputing a talent's matches after a profile change.

    Attributes:
        talent_id: Talent whose matches were refreshed
        evaluated: Offers scored
        created: New matches stored
        updated: Existing matches whose score was refreshed
        failed: Offers that could not be scored or stored
        errors: Error messages for failed offers
    """

    talent_id: Identifier
    evaluated: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
