"""
Customer endpoints for API v1.

Registration is open; reading and updating a profile is limited to the
customer themselves and administrators.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, status

from cleanslate_api.app.core.errors import error_status
from cleanslate_api.app.core.security import actor_of, get_current_user
from cleanslate_api.app.core.store import MarketplaceStore, get_store
from cleanslate_api.app.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from cleanslate_api.app.services.customer_service import CustomerService


router = APIRouter()


def _ensure_self_or_admin(customer_id: str, current_user: dict) -> None:
    if current_user.get("role") == "admin":
        return
    if current_user.get("role") == "customer" and current_user.get("user_id") == customer_id:
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions for this customer")


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
async def register_customer(customer: CustomerCreate, store: MarketplaceStore = Depends(get_store)) -> CustomerRead:
    return CustomerService(store).register_customer(customer)


@router.get("/{customer_id}", response_model=CustomerRead)
async def get_customer(
    customer_id: str = Path(..., description="ID of the customer"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> CustomerRead:
    _ensure_self_or_admin(customer_id, current_user)
    try:
        return CustomerService(store).get_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.patch("/{customer_id}", response_model=CustomerRead)
async def update_customer(
    update: CustomerUpdate,
    customer_id: str = Path(..., description="ID of the customer"),
    current_user: dict = Depends(get_current_user),
    store: MarketplaceStore = Depends(get_store),
) -> CustomerRead:
    _ensure_self_or_admin(customer_id, current_user)
    try:
        return CustomerService(store).update_customer(customer_id, update, actor=actor_of(current_user))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
