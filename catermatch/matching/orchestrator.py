"""Entry point that turns one event request into persisted, ranked matches."""

from __future__ import annotations

import logging

from ..evals.models import MatchingEval
from ..evals.store import EvalSink
from ..locations.resolver import LocationResolver
from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .engine import rank
from .models import TERMINAL_STATUSES, MatchingOutcome, RequestStatus, Tier
from .ports import CatererRepository, MatchRepository, RequestRepository
from .tiers import compute_total_budget, tier_for

logger = logging.getLogger(__name__)


class RequestNotFoundError(Exception):
    """Raised when the referenced event request does not exist."""


class RequestNotMatchableError(Exception):
    """Raised when the request is booked, completed or cancelled."""


class InvalidBudgetError(Exception):
    """Raised when the request's total budget is not a finite, non-negative number."""


class MatchPersistenceError(Exception):
    """Raised when the match batch could not be written."""


class MatchingOrchestrator:
    """Drives a request through ``pending → matching → matched``.

    Re-running for a request that is already matched replaces its earlier
    matches, so ranks stay unique per request.
    """

    def __init__(
        self,
        requests: RequestRepository,
        caterers: CatererRepository,
        matches: MatchRepository,
        resolver: LocationResolver,
        eval_sink: EvalSink | None = None,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    ) -> None:
        self._requests = requests
        self._caterers = caterers
        self._matches = matches
        self._resolver = resolver
        self._eval_sink = eval_sink
        self._config = config

    def run(self, request_id: str) -> MatchingOutcome:
        request = self._requests.get(request_id)
        if request is None:
            raise RequestNotFoundError(f"Event request {request_id!r} not found")
        if request.status in TERMINAL_STATUSES:
            raise RequestNotMatchableError(
                f"Event request {request_id!r} is {request.status.value} and cannot be matched"
            )

        total_budget = compute_total_budget(request)
        try:
            tier = tier_for(total_budget, self._config)
        except ValueError as exc:
            raise InvalidBudgetError(
                f"Event request {request_id!r} has an unusable budget: {total_budget!r}"
            ) from exc

        self._requests.update_status(request_id, RequestStatus.matching)
        logger.info("Matching started | request_id=%s", request_id)

        location = self._resolver.resolve(request.city or request.normalized_city or "")
        logger.info(
            "Request classified | request_id=%s | city=%s | confidence=%s | total_budget=%.2f | tier=%s",
            request_id,
            location.city,
            location.confidence.value,
            total_budget,
            tier.value,
        )

        caterers = self._caterers.list_active()
        matches = rank(request, location, tier, caterers, self._config)

        try:
            self._matches.replace_for_request(request_id, matches)
        except Exception as exc:
            logger.error(
                "Match persistence failed | request_id=%s | matches=%s",
                request_id,
                len(matches),
                exc_info=True,
            )
            raise MatchPersistenceError(
                f"Failed to persist {len(matches)} matches for request {request_id!r}"
            ) from exc

        self._requests.update_status(request_id, RequestStatus.matched)
        self._record_eval(request_id, total_budget, tier, len(matches))
        logger.info(
            "Matching completed | request_id=%s | pool=%s | matches=%s",
            request_id,
            len(caterers),
            len(matches),
        )

        return MatchingOutcome(
            request_id=request_id,
            match_count=len(matches),
            total_budget=total_budget,
            tier=tier,
            city=location.city,
            confidence=location.confidence.value,
            matches=matches,
        )

    def _record_eval(self, request_id: str, total_budget: float, tier: Tier, match_count: int) -> None:
        if self._eval_sink is None:
            return
        try:
            self._eval_sink.record_matching(
                MatchingEval(
                    request_id=request_id,
                    total_budget=total_budget,
                    assigned_tier=tier,
                    caterers_matched=match_count,
                )
            )
        except Exception:
            logger.warning("Matching eval could not be recorded", exc_info=True)
