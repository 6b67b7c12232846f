from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def normalize_alias(text: str | None) -> str:
    """Lower-case and trim location text so it can be used as a lookup key."""
    return (text or "").strip().lower()


class Confidence(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class LocationSource(str, Enum):
    alias = "alias"
    learned = "learned"
    ai = "ai"


class AddedBy(str, Enum):
    system = "system"
    admin = "admin"
    user_correction = "user_correction"


class InferredLocation(BaseModel):
    """Schema the AI tier must satisfy."""

    city: str = Field(..., min_length=1, description="The standardized city name")
    province: str = Field(..., min_length=1, description="The South African province")
    latitude: float = Field(..., ge=-90.0, le=90.0, description="Approximate latitude")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Approximate longitude")
    confidence: Confidence = Field(..., description="Confidence in the location match")


class ResolvedLocation(BaseModel):
    city: str
    province: str
    latitude: float
    longitude: float
    confidence: Confidence
    source: LocationSource
    original_input: str = ""


class LearnedLocation(BaseModel):
    alias: str = Field(..., min_length=1)
    city: str
    province: str
    latitude: float
    longitude: float
    use_count: int = Field(default=0, ge=0)
    last_used: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    added_by: AddedBy = AddedBy.system

    @field_validator("alias")
    @classmethod
    def _normalize(cls, value: str) -> str:
        normalized = normalize_alias(value)
        if not normalized:
            raise ValueError("alias must not be blank")
        return normalized
