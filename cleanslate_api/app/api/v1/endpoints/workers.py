"""
Worker endpoints for API v1.

Covers applications, the admin-managed lifecycle and onboarding
checklist, profile and calendar maintenance, availability checks and
training assignment.  Workers may change only their own profile,
calendar and training progress.
"""

from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import actor_of, get_current_user, require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.booking import AvailabilityRead
from cleanslate_api.app.schemas.worker import (
    OnboardingStepUpdate,
    TrainingAssignment,
    TrainingProgressUpdate,
    UnavailableDatesUpdate,
    WorkerCreate,
    WorkerPublicRead,
    WorkerRead,
    WorkerStatus,
    WorkerStatusUpdate,
    WorkerUpdate,
)
from cleanslate_api.app.services.availability_service import AvailabilityService
from cleanslate_api.app.services.training_service import TrainingService
from cleanslate_api.app.services.worker_service import WorkerService


router = APIRouter()


def _is_self_or_admin(worker_id: str, current_user: dict) -> bool:
    if current_user.get("role") == "admin":
        return True
    return current_user.get("role") == "worker" and current_user.get("user_id") == worker_id


def _ensure_self_or_admin(worker_id: str, current_user: dict) -> None:
    if not _is_self_or_admin(worker_id, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions for this worker")


@router.post("", response_model=WorkerRead, status_code=status.HTTP_201_CREATED)
async def apply_as_worker(worker: WorkerCreate, store: MarketplaceStore = Depends(get_store)) -> WorkerRead:
    """Submit a worker application.  The worker starts in ``PendingApproval``."""
    return WorkerService(store).register_worker(worker)


@router.get("", response_model=List[WorkerRead])
async def list_workers(
    status_filter: Optional[List[WorkerStatus]] = Query(None, alias="status"),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> List[WorkerRead]:
    """List workers, optionally only those in the given statuses (admin only)."""
    return WorkerService(store).list_workers(status_filter)


@router.get("/{worker_id}", response_model=Union[WorkerRead, WorkerPublicRead])
async def get_worker(
    worker_id: str = Path(..., description="ID of the worker"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> Union[WorkerRead, WorkerPublicRead]:
    """Full profile for the worker and admins; the public profile for everyone else."""
    try:
        worker = WorkerService(store).get_worker(worker_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    if _is_self_or_admin(worker_id, current_user):
        return worker
    return WorkerPublicRead.model_validate(worker.model_dump())


@router.patch("/{worker_id}", response_model=WorkerRead)
async def update_worker_profile(
    update: WorkerUpdate,
    worker_id: str = Path(..., description="ID of the worker"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> WorkerRead:
    """Update profile fields.  Only admins may change the hourly rate."""
    _ensure_self_or_admin(worker_id, current_user)
    if update.hourly_rate_cents is not None and current_user.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change the hourly rate")
    try:
        return WorkerService(store).update_profile(worker_id, update, actor=actor_of(current_user))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.post("/{worker_id}/status", response_model=WorkerRead)
async def update_worker_status(
    update: WorkerStatusUpdate,
    worker_id: str = Path(..., description="ID of the worker"),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> WorkerRead:
    """Approve, train, activate, suspend or reject a worker (admin only)."""
    try:
        return WorkerService(store).update_status(
            worker_id, update.status, actor=actor_of(current_user), expected_version=update.version
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.patch("/{worker_id}/onboarding/{step_id}", response_model=WorkerRead)
async def update_onboarding_step(
    update: OnboardingStepUpdate,
    worker_id: str = Path(..., description="ID of the worker"),
    step_id: str = Path(..., description="Onboarding step, e.g. idVerification"),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> WorkerRead:
    try:
        return WorkerService(store).update_onboarding_step(
            worker_id, step_id, update.completed, notes=update.notes, actor=actor_of(current_user)
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.put("/{worker_id}/unavailable-dates", response_model=WorkerRead)
async def set_unavailable_dates(
    update: UnavailableDatesUpdate,
    worker_id: str = Path(..., description="ID of the worker"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> WorkerRead:
    """Replace the calendar days on which the worker cannot be booked."""
    _ensure_self_or_admin(worker_id, current_user)
    try:
        return WorkerService(store).set_unavailable_dates(
            worker_id, update.unavailable_dates, actor=actor_of(current_user)
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.get("/{worker_id}/availability", response_model=AvailabilityRead)
async def check_availability(
    worker_id: str = Path(..., description="ID of the worker"),
    start: datetime = Query(..., description="Requested start, ISO-8601"),
    duration_minutes: int = Query(..., gt=0),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> AvailabilityRead:
    """Whether the worker can take a booking of ``duration_minutes`` at ``start``."""
    if worker_id not in store.workers:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Worker {worker_id} not found")
    available = AvailabilityService(store).is_available(worker_id, start, duration_minutes)
    return AvailabilityRead(worker_id=worker_id, start=start, duration_minutes=duration_minutes, available=available)


@router.post("/{worker_id}/training", response_model=WorkerRead, status_code=status.HTTP_201_CREATED)
async def assign_training(
    assignment: TrainingAssignment,
    worker_id: str = Path(..., description="ID of the worker"),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> WorkerRead:
    try:
        return TrainingService(store).assign_module(worker_id, assignment.module_id, actor=actor_of(current_user))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.patch("/{worker_id}/training/{module_id}", response_model=WorkerRead)
async def update_training_progress(
    update: TrainingProgressUpdate,
    worker_id: str = Path(..., description="ID of the worker"),
    module_id: str = Path(..., description="ID of the assigned training module"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> WorkerRead:
    """Record progress on an assigned module; completion may finish onboarding."""
    _ensure_self_or_admin(worker_id, current_user)
    try:
        return TrainingService(store).update_progress(
            worker_id, module_id, update.status, score=update.score, actor=actor_of(current_user)
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
