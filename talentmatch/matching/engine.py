"""Matching engine for scoring talents against job offers.

This module implements the two matching modes:
1. Single: full compatibility report for one talent/offer pair
2. Bulk: rank a talent pool against one offer, keeping matches above a
   threshold and emitting a MatchAcceptedEvent for each of them

The engine does no I/O. Persisting matches and notifying talents is left to
the consumer of the returned events.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from talentmatch.config.models import AppConfig, BulkConfig, ScoringConfig
from talentmatch.domain.exceptions import InvalidInputError
from talentmatch.domain.models import Commitment, OfferRequirements, TalentProfile
from talentmatch.logging import get_logger
from talentmatch.logging.context import bind_context
from talentmatch.utils.timestamps import utc_today

from .aggregator import ScoreAggregator
from .availability import check_availability
from .experience import evaluate_experience
from .location import check_location
from .models import BulkMatchResult, Identifier, MatchAcceptedEvent, MatchResult, RejectedTalent
from .rate import check_rate
from .skills import match_skills

logger = get_logger(__name__, component="matching")

TalentInput = Union[TalentProfile, Mapping[str, Any]]
OfferInput = Union[OfferRequirements, Mapping[str, Any]]
CommitmentsByTalent = Mapping[Identifier, Sequence[Commitment]]


def _as_talent(talent: TalentInput) -> TalentProfile:
    if isinstance(talent, TalentProfile):
        return talent
    if not isinstance(talent, Mapping):
        raise InvalidInputError("talent", [f"expected a mapping, got {type(talent).__name__}"])
    return TalentProfile.from_payload(talent)


def _as_offer(offer: OfferInput) -> OfferRequirements:
    if isinstance(offer, OfferRequirements):
        return offer
    return OfferRequirements.from_payload(offer)


def _ranking_key(result: MatchResult) -> Tuple:
    """Score descending, then talent id (integers before strings)."""
    talent_id = result.talent_id
    if isinstance(talent_id, int) and not isinstance(talent_id, bool):
        id_key = (0, talent_id, "")
    else:
        id_key = (1, 0, str(talent_id))
    return (-result.score, id_key)


class MatchingEngine:
    """Scores talents against offers.

    Responsibilities:
    - Run the five dimension evaluators for a talent/offer pair
    - Aggregate them into a MatchResult
    - Evaluate a talent pool concurrently and rank the retained matches
    - Collect invalid talents without aborting the pool
    """

    def __init__(
        self,
        scoring: Optional[ScoringConfig] = None,
        bulk: Optional[BulkConfig] = None,
        logger_instance=None,
    ):
        """Initialize MatchingEngine.

        Args:
            scoring: Weights, tiers and curves (defaults when omitted)
            bulk: Threshold and worker count for bulk matching
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.scoring = scoring or ScoringConfig()
        self.bulk = bulk or BulkConfig()
        self.aggregator = ScoreAggregator(self.scoring)
        self.logger = logger_instance or logger

    @classmethod
    def from_config(cls, config: AppConfig, logger_instance=None) -> "MatchingEngine":
        return cls(scoring=config.scoring, bulk=config.bulk, logger_instance=logger_instance)

    def evaluate(
        self,
        talent: TalentInput,
        offer: OfferInput,
        commitments: Iterable[Commitment] = (),
        reference_date: Optional[date] = None,
    ) -> MatchResult:
        """Compute the full compatibility report for one talent and one offer.

        Args:
            talent: TalentProfile or API-shaped mapping
            offer: OfferRequirements or API-shaped mapping
            commitments: Talent's confirmed commitments, reported as conflicts
            reference_date: Date relative availability is computed from (default: UTC today)

        Returns:
            MatchResult with all five dimension results

        Raises:
            InvalidInputError: If the talent or offer fails validation
        """
        talent = _as_talent(talent)
        offer = _as_offer(offer)

        skills = match_skills(talent.skills, offer.required_skills, offer.optional_skills)
        experience = evaluate_experience(
            talent.years_experience, offer.min_experience, self.scoring.experience
        )
        rate = check_rate(talent, offer, self.scoring.rate)
        availability = check_availability(
            talent, offer, commitments, reference_date, self.scoring.availability
        )
        location = check_location(talent, offer, self.scoring.location)

        result = self.aggregator.aggregate(
            skills,
            experience,
            rate,
            availability,
            location,
            talent_id=talent.talent_id,
            offer_id=offer.offer_id,
        )

        self.logger.debug(
            f"Talent scored: {result.talent_id} -> {result.score}",
            extra={
                "event": "matching.talent.scored",
                "talent_id": result.talent_id,
                "offer_id": result.offer_id,
                "score": result.score,
                "recommendation": result.recommendation.value,
                "can_apply": result.can_apply,
            },
        )
        return result

    def match_pool(
        self,
        offer: OfferInput,
        talents: Iterable[TalentInput],
        min_score: Optional[int] = None,
        notify: bool = False,
        commitments: Optional[CommitmentsByTalent] = None,
        exclude_talent_ids: Iterable[Identifier] = (),
        reference_date: Optional[date] = None,
    ) -> BulkMatchResult:
        """Rank a talent pool against one offer.

        Algorithm:
        1. Validate each talent; invalid ones (or ones without an id) are rejected
        2. Skip talents listed in ``exclude_talent_ids`` (already matched)
        3. Score the rest in a bounded thread pool
        4. Drop results below ``min_score``
        5. Sort by score descending, then talent id
        6. Emit one MatchAcceptedEvent per retained result

        Args:
            offer: Offer the pool is matched against
            talents: TalentProfiles or API-shaped mappings
            min_score: Retention threshold (default: bulk.min_score)
            notify: Copied onto every event for the dispatcher
            commitments: Commitments keyed by talent id
            exclude_talent_ids: Talents to skip
            reference_date: Shared "today" for the whole pool (default: UTC today)

        Returns:
            BulkMatchResult

        Raises:
            InvalidInputError: If the offer itself is invalid
        """
        started = time.monotonic()
        offer = _as_offer(offer)
        threshold = self.bulk.min_score if min_score is None else min_score
        reference_date = reference_date or utc_today()
        commitments = commitments or {}
        excluded_ids = {str(talent_id) for talent_id in exclude_talent_ids}

        prepared, rejected, excluded_count = self._prepare_pool(talents, excluded_ids)

        def score(talent: TalentProfile) -> MatchResult:
            return self.evaluate(
                talent,
                offer,
                _commitments_for(commitments, talent.talent_id),
                reference_date,
            )

        results: List[MatchResult] = []
        if prepared:
            workers = min(self.bulk.max_workers, len(prepared))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="match") as pool:
                # map() yields in submission order whatever the completion order
                results = list(pool.map(bind_context(score), prepared))

        retained = sorted((r for r in results if r.score >= threshold), key=_ranking_key)
        talents_by_id = {str(t.talent_id): t for t in prepared}
        events = tuple(
            self._accepted_event(result, offer, talents_by_id[str(result.talent_id)], notify)
            for result in retained
        )

        bulk_result = BulkMatchResult(
            offer_id=offer.offer_id,
            matches=tuple(retained),
            events=events,
            rejected=tuple(rejected),
            evaluated_count=len(results),
            excluded_count=excluded_count,
            min_score=threshold,
        )

        self.logger.info(
            f"Pool matched against offer {offer.offer_id}: "
            f"{bulk_result.retained_count}/{bulk_result.evaluated_count} retained",
            extra={
                "event": "matching.pool.completed",
                "offer_id": offer.offer_id,
                "evaluated": bulk_result.evaluated_count,
                "retained": bulk_result.retained_count,
                "rejected": len(bulk_result.rejected),
                "excluded": excluded_count,
                "min_score": threshold,
                "duration_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return bulk_result

    def _prepare_pool(
        self, talents: Iterable[TalentInput], excluded_ids: set
    ) -> Tuple[List[TalentProfile], List[RejectedTalent], int]:
        prepared: List[TalentProfile] = []
        rejected: List[RejectedTalent] = []
        seen_ids = set()
        excluded_count = 0

        for index, raw in enumerate(talents):
            raw_id = _raw_identifier(raw)
            try:
                talent = _as_talent(raw)
            except InvalidInputError as e:
                rejected.append(RejectedTalent(index=index, talent_id=raw_id, error=str(e)))
                continue

            if talent.talent_id is None:
                rejected.append(
                    RejectedTalent(
                        index=index,
                        talent_id=None,
                        error="Invalid talent: talent_id is required in bulk mode",
                    )
                )
                continue

            key = str(talent.talent_id)
            if key in seen_ids:
                rejected.append(
                    RejectedTalent(
                        index=index,
                        talent_id=talent.talent_id,
                        error=f"Invalid talent: duplicate talent_id {talent.talent_id}",
                    )
                )
                continue
            seen_ids.add(key)

            if key in excluded_ids:
                excluded_count += 1
                continue
            prepared.append(talent)

        for item in rejected:
            self.logger.warning(
                f"Talent rejected from pool: {item.error}",
                extra={
                    "event": "matching.talent.rejected",
                    "talent_id": item.talent_id,
                    "index": item.index,
                },
            )
        return prepared, rejected, excluded_count

    @staticmethod
    def _accepted_event(
        result: MatchResult, offer: OfferRequirements, talent: TalentProfile, notify: bool
    ) -> MatchAcceptedEvent:
        return MatchAcceptedEvent(
            offer_id=offer.offer_id,
            talent_id=talent.talent_id,
            score=result.score,
            result=result,
            notify=notify,
            talent_email=talent.email,
            talent_first_name=talent.first_name,
            offer_title=offer.title,
            offer_slug=offer.slug,
        )


def _raw_identifier(raw: TalentInput) -> Optional[Identifier]:
    if isinstance(raw, TalentProfile):
        return raw.talent_id
    if isinstance(raw, Mapping):
        for key in ("talent_id", "talentId", "id"):
            if key in raw:
                return raw[key]
    return None


def _commitments_for(
    commitments: CommitmentsByTalent, talent_id: Identifier
) -> Sequence[Commitment]:
    """Look a talent's commitments up by id, tolerating int/str key mismatches."""
    if talent_id in commitments:
        return commitments[talent_id]
    wanted = str(talent_id)
    for key, value in commitments.items():
        if str(key) == wanted:
            return value
    return ()

