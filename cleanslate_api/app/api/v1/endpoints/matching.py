"""
Matching endpoint for API v1.

Finds a worker for a prospective booking and confirms the quote.
Returns 409 when nobody suitable is available and 502 when the
matching endpoint fails.
"""

from fastapi import APIRouter, Depends, HTTPException

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.matching import MatchingRequest, MatchingResult
from cleanslate_api.app.services.matching_service import MatchingService


router = APIRouter()


@router.post("", response_model=MatchingResult)
def match_worker(
    request: MatchingRequest,
    current_user: dict = Depends(require_roles("customer", "admin")),
    store: MarketplaceStore = Depends(get_store),
) -> MatchingResult:
    try:
        return MatchingService(store).match(request)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
