"""
Token endpoint for API v1.

Issues development bearer tokens for a role.  Customer and worker
tokens are bound to an existing customer or worker record.  Admin
tokens need no record but require ``ADMIN_SECRET``; when no secret is
configured they are only handed out in debug mode.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from cleanslate_api.app.core.config import settings
from cleanslate_api.app.core.security import create_access_token
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.auth import Token, TokenRequest


router = APIRouter()


def _admin_allowed(supplied: Optional[str]) -> bool:
    if settings.admin_secret:
        return bool(supplied) and hmac.compare_digest(supplied.encode("utf-8"), settings.admin_secret.encode("utf-8"))
    return settings.debug


@router.post("/token", response_model=Token)
async def issue_token(payload: TokenRequest, store: MarketplaceStore = Depends(get_store)) -> Token:
    """Return a signed token for ``role`` acting as ``user_id``."""
    if payload.role == "admin":
        if not _admin_allowed(payload.admin_secret):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin tokens require the admin secret")
        claims = {"sub": "admin", "role": "admin", "user_id": None}
    else:
        records = store.customers if payload.role == "customer" else store.workers
        record = records.get(payload.user_id) if payload.user_id else None
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No {payload.role} with id {payload.user_id}",
            )
        claims = {"sub": record.email, "role": payload.role, "user_id": record.id}
    return Token(access_token=create_access_token(claims))
