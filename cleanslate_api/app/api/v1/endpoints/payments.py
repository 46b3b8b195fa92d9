"""
Payment endpoints for API v1.

Customers and administrators initiate payments; only administrators
list them.  Provider failures surface as HTTP 502.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import actor_of, require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.payment import PaymentCreate, PaymentRead, PaymentResult
from cleanslate_api.app.services.payment_service import PaymentService


router = APIRouter()


@router.post("", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
def initiate_payment(
    payment: PaymentCreate,
    current_user: dict = Depends(require_roles("customer", "admin")),
    store: MarketplaceStore = Depends(get_store),
) -> PaymentResult:
    if payment.booking_id and current_user.get("role") == "customer":
        booking = store.bookings.get(payment.booking_id)
        if booking is not None and booking.customer_id != current_user.get("user_id"):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions for this booking")
    try:
        return PaymentService(store).initiate_payment(
            payment.amount_cents,
            payment.email,
            booking_id=payment.booking_id,
            actor=actor_of(current_user),
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.get("", response_model=List[PaymentRead])
async def list_payments(
    booking_id: Optional[str] = Query(None),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> List[PaymentRead]:
    return PaymentService(store).list_payments(booking_id=booking_id)
