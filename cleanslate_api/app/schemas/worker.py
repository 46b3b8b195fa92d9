"""
Pydantic models for workers.

Workers apply through ``WorkerCreate`` and then move through a fixed
lifecycle (application, approval, training, onboarding, active)
managed by administrators.  Each worker carries an onboarding
checklist, a list of assigned training modules and the calendar days
on which they cannot be booked.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class WorkerStatus(str, Enum):
    PENDING_APPLICATION = "PendingApplication"
    PENDING_APPROVAL = "PendingApproval"
    TRAINING_PENDING = "TrainingPending"
    ONBOARDING_COMPLETE = "OnboardingComplete"
    ACTIVE = "Active"
    SUSPENDED = "Suspended"
    REJECTED = "Rejected"


class TrainingProgress(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class OnboardingStepRead(BaseModel):
    id: str
    label: str
    completed: bool
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class AssignedTrainingModuleRead(BaseModel):
    module_id: str
    title: str
    status: TrainingProgress
    score: Optional[int] = None
    completion_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class WorkerBase(BaseModel):
    full_name: str = Field(..., min_length=1, examples=["Jane Doe"])
    email: str = Field(..., min_length=3, examples=["jane.doe@example.com"])
    phone: str = Field(..., min_length=5, examples=["0821234567"])
    address: str
    id_number: str = Field(..., min_length=6)
    services_offered: list[str] = Field(default_factory=list, examples=[["essential-tidying"]])
    experience: str = ""


class WorkerCreate(WorkerBase):
    """Schema for a worker application."""

    bank_account_number: str
    bank_name: str
    branch_code: str


class WorkerUpdate(BaseModel):
    """Profile fields a worker (or an admin) may change.

    ``hourly_rate_cents`` may only be set by administrators.
    """

    phone: Optional[str] = Field(None, min_length=5)
    address: Optional[str] = None
    experience: Optional[str] = None
    services_offered: Optional[list[str]] = None
    profile_picture_url: Optional[str] = None
    hourly_rate_cents: Optional[int] = Field(None, gt=0)


class WorkerStatusUpdate(BaseModel):
    status: WorkerStatus
    version: Optional[int] = Field(None, ge=1)


class OnboardingStepUpdate(BaseModel):
    completed: bool
    notes: Optional[str] = None


class UnavailableDatesUpdate(BaseModel):
    unavailable_dates: list[date] = Field(default_factory=list)


class TrainingAssignment(BaseModel):
    module_id: str


class TrainingProgressUpdate(BaseModel):
    status: TrainingProgress
    score: Optional[int] = Field(None, ge=0, le=100)


class WorkerRead(WorkerBase):
    id: str
    status: WorkerStatus
    training_verified: bool
    hourly_rate_cents: int
    profile_picture_url: Optional[str] = None
    unavailable_dates: list[date]
    onboarding_steps: list[OnboardingStepRead]
    assigned_training_modules: list[AssignedTrainingModuleRead]
    created_at: datetime
    version: int

    model_config = {
        "from_attributes": True,
    }


class WorkerPublicRead(BaseModel):
    """What customers and other workers may see of a worker's profile."""

    id: str
    full_name: str
    services_offered: list[str]
    experience: str = ""
    hourly_rate_cents: int
    profile_picture_url: Optional[str] = None
    status: WorkerStatus
    training_verified: bool

    model_config = {
        "from_attributes": True,
    }
