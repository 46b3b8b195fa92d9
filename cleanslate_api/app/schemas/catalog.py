"""
Pydantic models for the service catalog and price quotes.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ServiceItemRead(BaseModel):
    id: str
    name: str
    category_id: str
    estimated_time_minutes: int
    material_fee_cents: int

    model_config = {"from_attributes": True}


class ServiceCategoryRead(BaseModel):
    id: str
    name: str
    description: str
    items: list[ServiceItemRead]

    model_config = {"from_attributes": True}


class QuoteRequest(BaseModel):
    worker_id: str
    service_item_ids: list[str] = Field(..., min_length=1)


class QuoteRead(BaseModel):
    worker_id: Optional[str] = None
    hourly_rate_cents: int
    estimated_duration_minutes: int
    labour_cents: int
    material_fee_cents: int
    total_price_cents: int
    service_names: list[str]
