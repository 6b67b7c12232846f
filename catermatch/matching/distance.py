from __future__ import annotations

import numpy as np
from sklearn.metrics.pairwise import haversine_distances

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .models import Caterer


def pool_distances_km(
    origin: tuple[float, float] | None,
    caterers: list[Caterer],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[float | None]:
    """Distance from ``origin`` to every caterer, ``None`` where either side lacks coordinates."""
    distances: list[float | None] = [None] * len(caterers)
    if origin is None:
        return distances

    located = [i for i, caterer in enumerate(caterers) if caterer.has_coordinates]
    if not located:
        return distances

    origin_rad = np.radians(np.array([origin], dtype=float))
    targets_rad = np.radians(
        np.array(
            [[caterers[i].latitude, caterers[i].longitude] for i in located],
            dtype=float,
        )
    )
    # Unit-sphere radians → miles → kilometers
    km = haversine_distances(origin_rad, targets_rad)[0] * config.earth_radius_miles * config.km_per_mile
    for index, value in zip(located, km):
        distances[index] = float(value)
    return distances
