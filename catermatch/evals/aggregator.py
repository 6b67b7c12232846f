from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from ..locations.models import AddedBy, Confidence, LearnedLocation, LocationSource
from ..locations.store import LearnedLocationStore
from ..matching.models import Tier
from .models import LocationEval, MatchingEval
from .store import InMemoryEvalStore

logger = logging.getLogger(__name__)


def compute_location_stats(evals: list[LocationEval], corrections: int = 0) -> dict[str, int]:
    confidence_counter = Counter(e.confidence for e in evals)
    source_counter = Counter(e.source for e in evals)

    stats = {"total": len(evals)}
    for level in Confidence:
        stats[f"confidence_{level.value}"] = confidence_counter[level]
    for source in LocationSource:
        stats[f"source_{source.value}"] = source_counter[source]
    stats["corrections"] = corrections
    return stats


def compute_matching_stats(evals: list[MatchingEval]) -> dict[str, Any]:
    tier_counter = Counter(e.assigned_tier for e in evals)
    ratings = [e.customer_rating for e in evals if e.customer_rating is not None]

    stats: dict[str, Any] = {"total_matches": len(evals)}
    for tier in Tier:
        stats[f"tier_{tier.value}"] = tier_counter[tier]
    stats["total_caterers_matched"] = sum(e.caterers_matched for e in evals)
    stats["successful_bookings"] = sum(1 for e in evals if e.successful_booking)
    stats["total_rating"] = float(sum(ratings))
    stats["rating_count"] = len(ratings)
    return stats


def compute_system_health(
    location_evals: list[LocationEval],
    matching_evals: list[MatchingEval],
    learned_count: int,
) -> dict[str, float | int]:
    location_stats = compute_location_stats(location_evals)
    matching_stats = compute_matching_stats(matching_evals)

    total_locations = location_stats["total"]
    location_accuracy = (
        location_stats["confidence_high"] / total_locations * 100 if total_locations else 0.0
    )

    total_matches = matching_stats["total_matches"]
    success_rate = (
        matching_stats["successful_bookings"] / total_matches * 100 if total_matches else 0.0
    )

    rating_count = matching_stats["rating_count"]
    average_rating = matching_stats["total_rating"] / rating_count if rating_count else 0.0

    return {
        "location_accuracy": round(location_accuracy, 2),
        "matching_success_rate": round(success_rate, 2),
        "average_rating": round(average_rating, 2),
        "learned_locations_count": learned_count,
    }


def correct_location_eval(
    evals: InMemoryEvalStore,
    learned: LearnedLocationStore,
    eval_id: str,
    city: str,
    province: str,
    latitude: float,
    longitude: float,
) -> LearnedLocation | None:
    """Teach the learned store the right answer for a past resolution.

    Returns the stored mapping, or ``None`` when ``eval_id`` is unknown.
    """
    eval_ = evals.find_location_eval(eval_id)
    if eval_ is None:
        return None

    location = LearnedLocation(
        alias=eval_.input,
        city=city,
        province=province,
        latitude=latitude,
        longitude=longitude,
        use_count=1,
        last_used=datetime.now(timezone.utc),
        added_by=AddedBy.user_correction,
    )
    learned.put(location)
    evals.increment_corrections()
    logger.info("Location corrected | eval_id=%s | alias=%s | city=%s", eval_id, location.alias, city)
    return location
