from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class Tier(str, Enum):
    basic = "basic"
    pro = "pro"
    business = "business"


class RequestStatus(str, Enum):
    pending = "pending"
    matching = "matching"
    matched = "matched"
    booked = "booked"
    completed = "completed"
    cancelled = "cancelled"


TERMINAL_STATUSES = frozenset(
    {RequestStatus.booked, RequestStatus.completed, RequestStatus.cancelled}
)


class MatchStatus(str, Enum):
    pending = "pending"
    viewed = "viewed"
    contacted = "contacted"
    quoted = "quoted"
    accepted = "accepted"
    declined = "declined"


class EventRequest(BaseModel):
    id: str = Field(..., min_length=1)
    event_type: str = "Other"
    event_date: date | None = None
    event_time: str | None = None
    guest_count: int = Field(..., gt=0)
    city: str | None = Field(default=None, description="Raw location text from the form")
    normalized_city: str | None = None
    cuisine_preferences: list[str] = Field(default_factory=list)
    dietary_requirements: list[str] = Field(default_factory=list)
    service_style: str | None = None
    budget_per_person: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    total_budget: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    budget_max: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    status: RequestStatus = RequestStatus.pending


class Caterer(BaseModel):
    id: str = Field(..., min_length=1)
    business_name: str | None = None
    is_active: bool = True
    subscription_tier: Tier = Tier.basic
    cuisine_types: list[str] = Field(default_factory=list)
    dietary_capabilities: list[str] = Field(default_factory=list)
    service_styles: list[str] = Field(default_factory=list)
    min_guests: int | None = Field(default=None, ge=0)
    max_guests: int | None = Field(default=None, ge=0)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    city: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Match(BaseModel):
    request_id: str
    caterer_id: str
    semantic_score: float
    distance_km: float
    distance_score: float
    compatibility_score: float
    overall_score: float = Field(ge=0.0, le=1.0)
    rank: int = Field(..., ge=1)
    match_reasons: dict[str, str] = Field(default_factory=dict)
    status: MatchStatus = MatchStatus.pending


class MatchingOutcome(BaseModel):
    request_id: str
    match_count: int
    total_budget: float
    tier: Tier
    city: str
    confidence: str
    matches: list[Match] = Field(default_factory=list)
