"""
Pydantic models for the training catalog.

Training modules are catalog-level learning resources.  They are
created by administrators and assigned to workers by reference; the
per-worker progress lives on the worker (see ``schemas.worker``).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TrainingModuleType(str, Enum):
    VIDEO = "Video"
    DOCUMENT = "Document"
    QUIZ = "Quiz"
    MIXED = "Mixed"


class TrainingModuleBase(BaseModel):
    title: str = Field(..., min_length=1, examples=["Basic Cleaning Techniques"])
    type: TrainingModuleType
    description: str = ""
    content_url: Optional[str] = None
    quiz_id: Optional[str] = None
    estimated_duration_minutes: int = Field(..., gt=0, examples=[45])


class TrainingModuleCreate(TrainingModuleBase):
    """Schema for creating a training module."""
    pass


class TrainingModuleRead(TrainingModuleBase):
    id: str

    model_config = {
        "from_attributes": True,
    }
