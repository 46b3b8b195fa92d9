"""
Pydantic models for customer data.

Customers are the people who book services.  The profile is kept
deliberately small: contact details and a default address used to
pre-fill the booking location.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CustomerBase(BaseModel):
    full_name: str = Field(..., min_length=1, examples=["Valued Customer"])
    email: str = Field(..., min_length=3, examples=["customer@example.com"])
    phone: Optional[str] = Field(None, examples=["0821112222"])
    address: Optional[str] = Field(None, examples=["Customer Address 1, Suburbia"])


class CustomerCreate(CustomerBase):
    """Schema for registering a customer."""
    pass


class CustomerUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerRead(CustomerBase):
    id: str
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
