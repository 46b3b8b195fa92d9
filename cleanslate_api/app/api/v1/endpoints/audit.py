"""
Change log endpoints for API v1.

Every accepted mutation is recorded by ``AuditService``; administrators
can read the log newest first with optional filters.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from cleanslate_api.app.core.security import require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.services.audit_service import AuditService
from cleanslate_api.app.services.availability_service import as_utc


router = APIRouter()


@router.get("")
async def list_changes(
    actor: Optional[str] = Query(None, description="Filter by actor, e.g. worker:<id>"),
    object_type: Optional[str] = Query(None, description="Filter by object type (booking, worker, payment, ...)"),
    object_id: Optional[str] = Query(None),
    action: Optional[str] = Query(None, description="Filter by action (create, status, review, ...)"),
    since: Optional[datetime] = Query(None, description="Only changes at or after this instant"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> List[dict]:
    return AuditService(store).list_logs(
        actor=actor,
        object_type=object_type,
        object_id=object_id,
        action=action,
        since=as_utc(since) if since else None,
        limit=limit,
        offset=offset,
    )
