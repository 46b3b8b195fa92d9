"""
Pydantic models for worker matching and quoting.

``MatchingRequest`` mirrors what the booking form knows about a
request; ``MatchingResult`` is what the matching service (local rule
or generative endpoint) answers with.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class MatchingRequest(BaseModel):
    service_type: str = Field("Custom Domestic Services", description="General description of the request")
    location: Coordinates
    date_time: datetime = Field(..., description="Preferred start time, ISO-8601")
    selected_service_items: list[str] = Field(..., min_length=1)
    radius_km: Optional[float] = Field(None, gt=0)
    customer_notes: Optional[str] = None


class MatchingResult(BaseModel):
    worker_id: str
    estimated_price_cents: int = Field(..., ge=0)
    estimated_duration_minutes: int = Field(..., gt=0)
    confirmation_notes: Optional[str] = None
