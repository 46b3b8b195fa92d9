"""
Pydantic models for payment data.

These schemas model the minimal information required to initiate a
payment with the provider and the result returned to clients.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    amount_cents: int = Field(..., gt=0, examples=[31500])
    email: str = Field(..., min_length=3, examples=["customer@example.com"])
    booking_id: Optional[str] = Field(None, description="Booking the payment settles, if any")


class PaymentResult(BaseModel):
    success: bool
    reference: str


class PaymentRead(PaymentCreate):
    id: str
    reference: str
    success: bool
    provider: str
    currency: str
    authorization_url: Optional[str] = None
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
