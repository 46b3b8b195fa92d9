"""
Training catalog endpoints for API v1.

Any authenticated user may browse the catalog; only administrators may
add modules.  Assignment and progress live under ``/workers``.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import actor_of, get_current_user, require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.training import TrainingModuleCreate, TrainingModuleRead
from cleanslate_api.app.services.training_service import TrainingService


router = APIRouter()


@router.get("/modules", response_model=List[TrainingModuleRead])
async def list_modules(
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> List[TrainingModuleRead]:
    return TrainingService(store).list_modules()


@router.get("/modules/{module_id}", response_model=TrainingModuleRead)
async def get_module(
    module_id: str = Path(..., description="ID of the training module"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> TrainingModuleRead:
    try:
        return TrainingService(store).get_module(module_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.post("/modules", response_model=TrainingModuleRead, status_code=status.HTTP_201_CREATED)
async def create_module(
    module: TrainingModuleCreate,
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> TrainingModuleRead:
    return TrainingService(store).create_module(module, actor=actor_of(current_user))
