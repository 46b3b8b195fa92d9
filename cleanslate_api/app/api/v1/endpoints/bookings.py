"""
Booking endpoints for API v1.

Customers create and cancel their own bookings and rate them once the
work is done; workers confirm, decline, start and complete the bookings
assigned to them; administrators see and change everything.  Business
rules live in ``BookingService``; these handlers only enforce ownership
and translate service errors into HTTP responses.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import actor_of, get_current_user, require_roles
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStatus,
    BookingStatusUpdate,
    ReviewCreate,
)
from cleanslate_api.app.services.booking_service import BookingService


router = APIRouter()


def _ensure_access(booking: BookingRead, current_user: dict) -> None:
    role = current_user.get("role")
    user_id = current_user.get("user_id")
    if role == "admin":
        return
    if role == "customer" and booking.customer_id == user_id:
        return
    if role == "worker" and booking.worker_id == user_id:
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions for this booking")


def _load(service: BookingService, booking_id: str, current_user: dict) -> BookingRead:
    try:
        booking = service.get_booking(booking_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    _ensure_access(booking, current_user)
    return booking


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    current_user: dict = Depends(require_roles("customer", "admin")),
    store: MarketplaceStore = Depends(get_store),
) -> BookingRead:
    """Create a booking awaiting the worker's confirmation.

    Customers always book for themselves and always pay the catalog
    quote; only admins may override price or duration, and must name the
    customer.  Returns 409 when the worker is not active or not available.
    """
    if current_user.get("role") == "customer":
        if booking.customer_id and booking.customer_id != current_user.get("user_id"):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Customers can only book for themselves")
        if booking.total_price_cents is not None or booking.estimated_duration_minutes is not None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Price and duration are set from the catalog quote",
            )
        booking = booking.model_copy(update={"customer_id": current_user.get("user_id")})
    elif not booking.customer_id:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="customer_id is required")
    try:
        return BookingService(store).create_booking(booking, actor=actor_of(current_user))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.get("", response_model=List[BookingRead])
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(require_roles("admin")),
    store: MarketplaceStore = Depends(get_store),
) -> List[BookingRead]:
    """All bookings, newest first (admin only)."""
    return BookingService(store).list_all(status=status_filter, limit=limit, offset=offset)


@router.get("/me", response_model=List[BookingRead])
async def list_my_bookings(
    current_user: dict = Depends(require_roles("customer", "worker")),
    store: MarketplaceStore = Depends(get_store),
) -> List[BookingRead]:
    """Bookings of the calling customer or worker, latest booking date first."""
    service = BookingService(store)
    if current_user.get("role") == "customer":
        return service.list_for_customer(current_user.get("user_id"))
    return service.list_for_worker(current_user.get("user_id"))


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: str = Path(..., description="ID of the booking"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> BookingRead:
    return _load(BookingService(store), booking_id, current_user)


@router.post("/{booking_id}/status", response_model=BookingRead)
async def update_booking_status(
    update: BookingStatusUpdate,
    booking_id: str = Path(..., description="ID of the booking"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> BookingRead:
    """Move a booking to a new status.

    Returns 403 when the caller's role may not set the status, 409 when
    the change is not a legal transition or ``version`` is stale.
    """
    service = BookingService(store)
    _load(service, booking_id, current_user)
    try:
        return service.update_status(
            booking_id,
            update.status,
            role=current_user.get("role"),
            actor=actor_of(current_user),
            expected_version=update.version,
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.post("/{booking_id}/review", response_model=BookingRead)
async def review_booking(
    review: ReviewCreate,
    booking_id: str = Path(..., description="ID of the booking"),
    current_user: dict = Depends(require_roles("customer", "admin")),
    store: MarketplaceStore = Depends(get_store),
) -> BookingRead:
    """Rate a booking; marks it ``CustomerConfirmedAndRated``."""
    service = BookingService(store)
    _load(service, booking_id, current_user)
    try:
        return service.attach_review(
            booking_id,
            review.rating,
            review.review,
            actor=actor_of(current_user),
            expected_version=review.version,
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
