"""
Pydantic models for customer bookings.

A booking is one scheduled engagement between one customer and one
worker.  These schemas define the payloads used to create a booking,
change its status, attach a review and query a worker's availability,
along with the shape returned to clients.  Money is always expressed
in integer cents.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookingStatus(str, Enum):
    REQUESTED = "Requested"
    AWAITING_WORKER_CONFIRMATION = "AwaitingWorkerConfirmation"
    CONFIRMED_BY_WORKER = "ConfirmedByWorker"
    IN_PROGRESS = "InProgress"
    COMPLETED_BY_WORKER = "CompletedByWorker"
    CUSTOMER_CONFIRMED_AND_RATED = "CustomerConfirmedAndRated"
    CANCELLED_BY_CUSTOMER = "CancelledByCustomer"
    CANCELLED_BY_WORKER = "CancelledByWorker"
    CANCELLED_BY_ADMIN = "CancelledByAdmin"


class Location(BaseModel):
    address: str = Field(..., min_length=1, examples=["12 Long Street, Cape Town"])
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    model_config = {"from_attributes": True}


class BookingCreate(BaseModel):
    """Schema for creating a booking.

    ``customer_id`` may be omitted when the caller is the customer; the
    endpoint fills it from the token.  ``estimated_duration_minutes`` and
    ``total_price_cents`` override the catalog quote when supplied, for
    example with the figures returned by the matching service; only
    administrators may send them.
    """

    customer_id: Optional[str] = None
    worker_id: str
    service_item_ids: list[str] = Field(..., min_length=1, examples=[["et-sweep-mop", "ll-wash-dry-fold"]])
    booking_date: datetime = Field(..., description="Requested start, ISO-8601")
    estimated_duration_minutes: Optional[int] = Field(None, gt=0)
    total_price_cents: Optional[int] = Field(None, ge=0)
    customer_notes: Optional[str] = Field(None, max_length=2000)
    location: Location


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    # Optimistic concurrency stamp; when given, the update is rejected
    # if the booking has changed since this version was read.
    version: Optional[int] = Field(None, ge=1)


class ReviewCreate(BaseModel):
    """Schema for rating a completed booking."""

    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    review: str = Field("", description="Free-text review")
    version: Optional[int] = Field(None, ge=1)

    @field_validator("review")
    @classmethod
    def sanitize_review(cls, v: str) -> str:
        """Trim whitespace from the review and enforce a maximum length."""
        v = (v or "").strip()
        if len(v) > 1000:
            raise ValueError("Review must be 1000 characters or fewer")
        return v


class AvailabilityRead(BaseModel):
    worker_id: str
    start: datetime
    duration_minutes: int
    available: bool


class BookingRead(BaseModel):
    id: str
    customer_id: str
    customer_name: str
    worker_id: str
    worker_name: str
    service_item_ids: list[str]
    service_names: list[str]
    booking_date: datetime
    estimated_duration_minutes: int
    total_price_cents: int
    status: BookingStatus
    rating: Optional[int] = None
    review: Optional[str] = None
    customer_notes: Optional[str] = None
    location: Location
    created_at: datetime
    version: int

    model_config = {
        "from_attributes": True,
    }
