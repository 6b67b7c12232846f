"""
Scoring rules for the ranking engine.

Each rule is a pure function ``(request, caterer, context) -> RuleOutcome``.
The engine folds them in ``SCORING_RULES`` order: deltas are summed into the
overall score and non-empty reasons land in the match's reasons map under the
rule's key.

Weights:
    tier 0.10 · cuisine 0.30 · dietary 0.25 · capacity 0.20 · service 0.15 · location 0.10
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, NamedTuple

from .models import Caterer, EventRequest, Tier
from .tiers import TIER_RANK

DEFAULT_MIN_GUESTS = 0
DEFAULT_MAX_GUESTS = 1000


class RuleOutcome(NamedTuple):
    delta: float
    reason: str | None = None


@dataclass(frozen=True)
class ScoringContext:
    target_tier: Tier
    request_city: str
    # None when the request or the caterer has no coordinates.
    distance_km: float | None = None


Rule = Callable[[EventRequest, Caterer, ScoringContext], RuleOutcome]


def count_overlap(wanted: list[str], offered: list[str]) -> int:
    """How many of ``wanted`` appear in ``offered`` (case-insensitive)."""
    offered_keys = {item.strip().casefold() for item in offered}
    return sum(1 for item in wanted if item.strip().casefold() in offered_keys)


def tier_rule(request: EventRequest, caterer: Caterer, context: ScoringContext) -> RuleOutcome:
    if TIER_RANK[caterer.subscription_tier] >= TIER_RANK[context.target_tier]:
        return RuleOutcome(0.1, f"{caterer.subscription_tier.value} tier caterer")
    return RuleOutcome(0.0)


def cuisine_rule(request: EventRequest, caterer: Caterer, context: ScoringContext) -> RuleOutcome:
    wanted = request.cuisine_preferences
    if not wanted:
        return RuleOutcome(0.15)
    overlap = count_overlap(wanted, caterer.cuisine_types)
    reason = f"Matches {overlap} cuisine preferences" if overlap else None
    return RuleOutcome(overlap / len(wanted) * 0.3, reason)


def dietary_rule(request: EventRequest, caterer: Caterer, context: ScoringContext) -> RuleOutcome:
    wanted = request.dietary_requirements
    if not wanted:
        return RuleOutcome(0.25, "No dietary requirements to accommodate")
    overlap = count_overlap(wanted, caterer.dietary_capabilities)
    if overlap == len(wanted):
        return RuleOutcome(0.25, "Can accommodate all dietary requirements")
    if overlap:
        return RuleOutcome(
            0.15 * (overlap / len(wanted)),
            f"Matches {overlap}/{len(wanted)} dietary requirements",
        )
    return RuleOutcome(0.0)


def capacity_rule(request: EventRequest, caterer: Caterer, context: ScoringContext) -> RuleOutcome:
    guests = request.guest_count
    min_guests = caterer.min_guests if caterer.min_guests is not None else DEFAULT_MIN_GUESTS
    max_guests = caterer.max_guests if caterer.max_guests is not None else DEFAULT_MAX_GUESTS
    if min_guests <= guests <= max_guests:
        return RuleOutcome(0.2, "Guest count within capacity")
    if min_guests * 0.7 <= guests < min_guests:
        return RuleOutcome(0.1, "Guest count slightly below minimum")
    return RuleOutcome(0.0)


def service_rule(request: EventRequest, caterer: Caterer, context: ScoringContext) -> RuleOutcome:
    style = (request.service_style or "").strip()
    if not style:
        return RuleOutcome(0.075)
    if count_overlap([style], caterer.service_styles):
        return RuleOutcome(0.15, f"Offers {style} service")
    return RuleOutcome(0.0)


def location_rule(request: EventRequest, caterer: Caterer, context: ScoringContext) -> RuleOutcome:
    distance = context.distance_km
    if distance is not None:
        if distance <= 15:
            return RuleOutcome(0.1, "Within 15km")
        if distance <= 30:
            return RuleOutcome(0.07, "Within 30km")
        if distance <= 50:
            return RuleOutcome(0.04, "Within 50km")
        return RuleOutcome(0.0)

    if same_city(caterer.city, context.request_city):
        return RuleOutcome(0.1, "Same city")
    return RuleOutcome(0.0)


def same_city(caterer_city: str | None, request_city: str | None) -> bool:
    a = (caterer_city or "").strip().lower()
    b = (request_city or "").strip().lower()
    return bool(a and b and (a in b or b in a))


SCORING_RULES: tuple[tuple[str, Rule], ...] = (
    ("tier", tier_rule),
    ("cuisine", cuisine_rule),
    ("dietary", dietary_rule),
    ("capacity", capacity_rule),
    ("service", service_rule),
    ("location", location_rule),
)
