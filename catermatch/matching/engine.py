from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from ..locations.models import Confidence, ResolvedLocation
from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .distance import pool_distances_km
from .models import Caterer, EventRequest, Match, Tier
from .rules import SCORING_RULES, Rule, RuleOutcome, ScoringContext, count_overlap

logger = logging.getLogger(__name__)

# Distances reported when no coordinates were available.
SAME_CITY_DISTANCE_KM = 10.0
UNKNOWN_DISTANCE_KM = 50.0


def round_score(total: float) -> float:
    """Round half-up to 2 decimals after clearing float noise from the sum."""
    cleaned = Decimal(repr(round(total, 9)))
    return float(cleaned.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class ScoredCaterer(NamedTuple):
    caterer: Caterer
    overall_score: float
    semantic_score: float
    distance_km: float
    reasons: dict[str, str]


def score_caterer(
    request: EventRequest,
    caterer: Caterer,
    context: ScoringContext,
    rules: tuple[tuple[str, Rule], ...] = SCORING_RULES,
) -> ScoredCaterer:
    """Fold every rule over one caterer and collect the score breakdown."""
    outcomes: dict[str, RuleOutcome] = {}
    reasons: dict[str, str] = {}
    for name, rule in rules:
        outcome = rule(request, caterer, context)
        outcomes[name] = outcome
        if outcome.delta > 0 and outcome.reason:
            reasons[name] = outcome.reason

    total = sum(outcome.delta for outcome in outcomes.values())
    overall = min(1.0, max(0.0, round_score(total)))

    cuisine = outcomes.get("cuisine", RuleOutcome(0.0)).delta
    dietary_hits = count_overlap(request.dietary_requirements, caterer.dietary_capabilities)
    semantic = cuisine + (0.1 if dietary_hits > 0 else 0.0)

    if context.distance_km is not None:
        distance = context.distance_km
    elif outcomes.get("location", RuleOutcome(0.0)).delta > 0:
        distance = SAME_CITY_DISTANCE_KM
    else:
        distance = UNKNOWN_DISTANCE_KM

    return ScoredCaterer(
        caterer=caterer,
        overall_score=overall,
        semantic_score=semantic,
        distance_km=distance,
        reasons=reasons,
    )


def _distance_score(distance_km: float) -> float:
    if distance_km <= 30:
        return 0.9
    if distance_km <= 50:
        return 0.7
    return 0.5


def rank(
    request: EventRequest,
    location: ResolvedLocation | None,
    target_tier: Tier,
    caterers: list[Caterer],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[Match]:
    """Score the caterer pool and return the top matches, best first.

    Low-confidence locations carry placeholder coordinates, so distance is
    only measured for medium or high confidence; otherwise the location rule
    compares city names instead.
    """
    if not caterers:
        return []

    origin: tuple[float, float] | None = None
    request_city = request.normalized_city or request.city or ""
    if location is not None and location.confidence is not Confidence.low:
        origin = (location.latitude, location.longitude)
        request_city = location.city

    distances = pool_distances_km(origin, caterers, config)
    scored = [
        score_caterer(
            request,
            caterer,
            ScoringContext(
                target_tier=target_tier,
                request_city=request_city,
                distance_km=distance,
            ),
        )
        for caterer, distance in zip(caterers, distances)
    ]

    kept = [item for item in scored if item.overall_score > config.min_score]
    # sorted() is stable, so pool order breaks ties
    ordered = sorted(kept, key=lambda item: item.overall_score, reverse=True)
    top = ordered[: config.max_matches]

    logger.info(
        "Ranked caterers | request_id=%s | pool=%s | above_threshold=%s | returned=%s",
        request.id,
        len(caterers),
        len(kept),
        len(top),
    )
    return [
        Match(
            request_id=request.id,
            caterer_id=item.caterer.id,
            semantic_score=item.semantic_score,
            distance_km=round(item.distance_km, 1),
            distance_score=_distance_score(item.distance_km),
            compatibility_score=item.overall_score,
            overall_score=item.overall_score,
            rank=position,
            match_reasons=item.reasons,
        )
        for position, item in enumerate(top, start=1)
    ]
