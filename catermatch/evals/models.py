from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from ..locations.models import Confidence, LocationSource
from ..matching.models import Tier


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LocationEval(BaseModel):
    """One resolver outcome, kept for accuracy auditing only."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"loc_{uuid.uuid4().hex[:12]}")
    input: str
    normalized_city: str
    normalized_province: str
    confidence: Confidence
    source: LocationSource
    timestamp: datetime = Field(default_factory=_now)


class MatchingEval(BaseModel):
    id: str = Field(default_factory=lambda: f"match_{uuid.uuid4().hex[:12]}")
    request_id: str
    total_budget: float = Field(ge=0.0)
    assigned_tier: Tier
    caterers_matched: int = Field(ge=0)
    caterers_contacted: int = Field(default=0, ge=0)
    successful_booking: bool = False
    customer_rating: float | None = Field(default=None, ge=1.0, le=5.0)
    timestamp: datetime = Field(default_factory=_now)
