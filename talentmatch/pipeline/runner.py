"""Run orchestration: match a talent pool against an offer and dispatch the results."""

import threading
from datetime import date
from typing import Any, Callable, ContextManager, Dict, Iterable, Mapping, Optional, Sequence
from uuid import uuid4

from sqlalchemy.orm import Session

from talentmatch.config.environment import EnvironmentConfig
from talentmatch.config.models import AppConfig
from talentmatch.domain.exceptions import InvalidInputError, MatchingError
from talentmatch.domain.models import Commitment, OfferRequirements, TalentProfile
from talentmatch.logging import get_logger
from talentmatch.logging.context import log_context
from talentmatch.matching.engine import CommitmentsByTalent, MatchingEngine, TalentInput
from talentmatch.notifications.service import MatchEventDispatcher
from talentmatch.persistence.database import get_session
from talentmatch.persistence.exceptions import PersistenceError
from talentmatch.persistence.repositories import MatchRepository
from talentmatch.utils.timestamps import utc_now

from .models import MatchingRunResult, TalentRefreshResult

logger = get_logger(__name__, component="pipeline")


def _as_offer(offer: Any) -> OfferRequirements:
    if isinstance(offer, OfferRequirements):
        return offer
    if not isinstance(offer, Mapping):
        raise InvalidInputError("offer", [f"expected a mapping, got {type(offer).__name__}"])
    return OfferRequirements.from_payload(offer)


class OfferMatchingRun:
    """
    Orchestrates matching runs against the match store.

    A run for an offer scores every talent not yet matched with it, stores the
    retained matches and notifies the talents. Runs for the same offer never
    overlap: a second concurrent run is skipped.
    """

    def __init__(
        self,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        engine: Optional[MatchingEngine] = None,
        dispatcher: Optional[MatchEventDispatcher] = None,
        session_factory: Callable[[], ContextManager[Session]] = get_session,
    ):
        """
        Initialize the run orchestrator.

        Args:
            app_config: Application configuration
            env_config: Environment configuration
            engine: Matching engine (built from app_config if None)
            dispatcher: Event dispatcher (built from the configs if None)
            session_factory: Context manager factory yielding a committed-on-exit session
        """
        self.app_config = app_config
        self.env_config = env_config
        self.engine = engine or MatchingEngine.from_config(app_config)
        self.dispatcher = dispatcher or MatchEventDispatcher(
            env_config,
            email_config=app_config.email,
            notification_config=app_config.notifications,
        )
        self.session_factory = session_factory
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _offer_lock(self, offer_id) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(str(offer_id), threading.Lock())

    def run_for_offer(
        self,
        offer: Any,
        talents: Iterable[TalentInput],
        min_score: Optional[int] = None,
        notify: bool = True,
        commitments: Optional[CommitmentsByTalent] = None,
        reference_date: Optional[date] = None,
    ) -> MatchingRunResult:
        """
        Match a talent pool against an offer, store the matches and notify talents.

        This method:
        1. Acquires the offer's lock, or returns a skipped result
        2. Loads the ids of talents already matched with the offer
        3. Ranks the remaining talents with the matching engine
        4. Dispatches the accepted matches in the same session

        Args:
            offer: OfferRequirements or API-shaped mapping (must have an id)
            talents: Talent pool
            min_score: Retention threshold (default: bulk.min_score)
            notify: Whether retained matches notify their talent
            commitments: Commitments keyed by talent id
            reference_date: Shared "today" for availability

        Returns:
            MatchingRunResult with counters, ranked matches and dispatch outcomes

        Raises:
            InvalidInputError: If the offer is invalid or has no id
            PersistenceError: If the match store cannot be read
        """
        offer = _as_offer(offer)
        if offer.offer_id is None:
            raise InvalidInputError("offer", ["offer_id is required to run a match"])

        run_started_at = utc_now()
        run_id = uuid4().hex
        lock = self._offer_lock(offer.offer_id)

        if not lock.acquire(blocking=False):
            with log_context(run_id=run_id, offer_id=offer.offer_id):
                logger.warning(
                    "Matching run skipped: another run for this offer is in progress",
                    extra={"event": "pipeline.run.skipped", "reason": "lock_held"},
                )
            return MatchingRunResult(
                offer_id=offer.offer_id,
                run_id=run_id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id, offer_id=offer.offer_id):
                logger.info("Matching run started", extra={"event": "pipeline.run.started"})

                with self.session_factory() as session:
                    already_matched = MatchRepository(session).existing_talent_ids(offer.offer_id)
                    bulk = self.engine.match_pool(
                        offer,
                        talents,
                        min_score=min_score,
                        notify=notify,
                        commitments=commitments,
                        exclude_talent_ids=already_matched,
                        reference_date=reference_date,
                    )
                    dispatch_results = self.dispatcher.dispatch(bulk.events, session)

                result = MatchingRunResult(
                    offer_id=offer.offer_id,
                    run_id=run_id,
                    run_started_at=run_started_at,
                    run_finished_at=utc_now(),
                    bulk=bulk,
                    dispatch_results=dispatch_results,
                )

                logger.info(
                    "Matching run completed",
                    extra={
                        "event": "pipeline.run.completed",
                        "duration_ms": int(result.duration_seconds * 1000),
                        "evaluated": result.evaluated,
                        "retained": result.retained,
                        "excluded": result.excluded,
                        "rejected": result.rejected,
                        "persisted": result.persisted,
                        "notified": result.notified,
                        "emailed": result.emailed,
                        "failed": result.failed,
                        "had_errors": result.had_errors,
                    },
                )
                return result

        finally:
            lock.release()

    def refresh_talent(
        self,
        talent: TalentInput,
        offers: Iterable[Any],
        commitments: Sequence[Commitment] = (),
        reference_date: Optional[date] = None,
    ) -> TalentRefreshResult:
        """
        Recompute a talent's matches after a profile change.

        Existing matches are refreshed whatever their new score; new matches are
        created only at or above bulk.min_score. No notification is sent.

        Args:
            talent: Updated talent profile (must have an id)
            offers: Published offers to score against
            commitments: The talent's commitments
            reference_date: Shared "today" for availability

        Returns:
            TalentRefreshResult with counters; per-offer failures are collected

        Raises:
            InvalidInputError: If the talent is invalid or has no id
        """
        if not isinstance(talent, TalentProfile):
            talent = TalentProfile.from_payload(talent)
        if talent.talent_id is None:
            raise InvalidInputError("talent", ["talent_id is required to refresh matches"])

        refresh = TalentRefreshResult(talent_id=talent.talent_id)
        threshold = self.app_config.bulk.min_score

        with log_context(talent_id=talent.talent_id):
            with self.session_factory() as session:
                repo = MatchRepository(session)
                for raw_offer in offers:
                    try:
                        offer = _as_offer(raw_offer)
                        if offer.offer_id is None:
                            raise InvalidInputError("offer", ["offer_id is required"])
                        result = self.engine.evaluate(talent, offer, commitments, reference_date)
                        refresh.evaluated += 1

                        with session.begin_nested():
                            existing = repo.get(offer.offer_id, talent.talent_id)
                            if existing is not None:
                                repo.upsert_result(result)
                                refresh.updated += 1
                            elif result.score >= threshold:
                                repo.upsert_result(result)
                                refresh.created += 1
                    except (MatchingError, PersistenceError) as e:
                        refresh.failed += 1
                        refresh.errors.append(str(e))
                        logger.warning(
                            f"Could not refresh match for talent {talent.talent_id}: {e}",
                            extra={"event": "pipeline.refresh.failed", "error_type": type(e).__name__},
                        )

            logger.info(
                "Talent matches refreshed",
                extra={
                    "event": "pipeline.refresh.completed",
                    "evaluated": refresh.evaluated,
                    "matches_created": refresh.created,
                    "matches_updated": refresh.updated,
                    "failed": refresh.failed,
                },
            )
        return refresh
