"""
Service catalog endpoints for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from cleanslate_api.app.core.errors import NotFoundError, error_status
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.catalog import QuoteRead, QuoteRequest, ServiceCategoryRead
from cleanslate_api.app.services.catalog_service import CatalogService


router = APIRouter()


@router.get("/categories", response_model=List[ServiceCategoryRead])
async def list_categories() -> List[ServiceCategoryRead]:
    return [ServiceCategoryRead.model_validate(c) for c in CatalogService.list_categories()]


@router.post("/quote", response_model=QuoteRead)
async def quote(request: QuoteRequest, store: MarketplaceStore = Depends(get_store)) -> QuoteRead:
    """Price the selected items at the worker's hourly rate."""
    try:
        worker = store.workers.get(request.worker_id)
        if worker is None:
            raise NotFoundError(f"Worker {request.worker_id} not found")
        return CatalogService.quote(worker, request.service_item_ids)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
