from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ResolverConfig:
    """
    Settings for the three-tier location resolver.

    The default location is what the AI tier falls back to when inference is
    unavailable; it is always reported with low confidence.
    """

    default_city: str = "Johannesburg"
    default_province: str = "Gauteng"
    default_latitude: float = -26.2041
    default_longitude: float = 28.0473
    # Aliases must be longer than this to be learned from AI output.
    min_learnable_length: int = 2
    learned_db_path: str = os.getenv("CATERMATCH_LEARNED_DB", "")


DEFAULT_RESOLVER_CONFIG = ResolverConfig()
