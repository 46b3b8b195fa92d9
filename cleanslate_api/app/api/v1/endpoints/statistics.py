"""
Statistics endpoints for API v1.

The overview and payroll are for administrators; a worker may read
their own earnings.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.services.statistics_service import StatisticsService


router = APIRouter()


@router.get("/overview")
async def overview(
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> Dict[str, Any]:
    return StatisticsService(store).overview()


@router.get("/payroll")
async def payroll(
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> Dict[str, Any]:
    """Estimated payout per active worker for completed bookings."""
    return StatisticsService(store).payroll()


@router.get("/workers/{worker_id}/earnings")
async def worker_earnings(
    worker_id: str = Path(..., description="ID of the worker"),
    current_user: dict = Depends(require_roles("worker", "admin")),
    store: MarketplaceStore = Depends(get_store),
) -> Dict[str, Any]:
    if current_user.get("role") == "worker" and current_user.get("user_id") != worker_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Workers can only view their own earnings")
    try:
        return StatisticsService(store).worker_earnings(worker_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
