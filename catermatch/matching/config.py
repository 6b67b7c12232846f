from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchingConfig:
    max_matches: int = 10
    # Candidates must score strictly above this to be kept.
    min_score: float = 0.1
    pro_tier_min_budget: float = 20_000.0
    business_tier_min_budget: float = 50_000.0
    earth_radius_miles: float = 3959.0
    km_per_mile: float = 1.60934


DEFAULT_MATCHING_CONFIG = MatchingConfig()
