from __future__ import annotations

from pydantic import BaseModel, Field

from .matching.models import Tier


class TriggerMatchingRequest(BaseModel):
    request_id: str = Field(..., min_length=1)


class TriggerMatchingResponse(BaseModel):
    success: bool
    match_count: int
    total_budget: float
    tier: Tier
    city: str


class LearnedLocationIn(BaseModel):
    alias: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class LocationCorrection(BaseModel):
    city: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class MatchingOutcomeUpdate(BaseModel):
    successful_booking: bool
    customer_rating: float | None = Field(default=None, ge=1.0, le=5.0)
