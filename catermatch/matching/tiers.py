from __future__ import annotations

import math

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .models import EventRequest, Tier

TIER_RANK: dict[Tier, int] = {Tier.basic: 1, Tier.pro: 2, Tier.business: 3}


def tier_for(total_budget: float, config: MatchingConfig = DEFAULT_MATCHING_CONFIG) -> Tier:
    """Map an event's total budget onto the subscription tier that serves it."""
    if not math.isfinite(total_budget) or total_budget < 0:
        raise ValueError(f"total_budget must be a finite non-negative number, got {total_budget!r}")
    if total_budget >= config.business_tier_min_budget:
        return Tier.business
    if total_budget >= config.pro_tier_min_budget:
        return Tier.pro
    return Tier.basic


def compute_total_budget(request: EventRequest) -> float:
    """Total override, else per-person × guests, else max budget × guests, else 0."""
    if request.total_budget:
        return float(request.total_budget)
    if request.budget_per_person:
        return float(request.budget_per_person * request.guest_count)
    if request.budget_max:
        return float(request.budget_max * request.guest_count)
    return 0.0
