"""
Business logic for customers.
"""

import logging
from typing import Optional

from ..core.errors import NotFoundError
from ..core.store import Customer, MarketplaceStore, new_id
from ..schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from .audit_service import AuditService


logger = logging.getLogger(__name__)


class CustomerService:
    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store
        self.audit = AuditService(store)

    def _get(self, customer_id: str) -> Customer:
        customer = self.store.customers.get(customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def get_customer(self, customer_id: str) -> CustomerRead:
        return CustomerRead.model_validate(self._get(customer_id))

    def register_customer(self, data: CustomerCreate) -> CustomerRead:
        customer = Customer(id=new_id(), **data.model_dump())
        self.store.customers[customer.id] = customer
        logger.info("Customer %s registered", customer.id)
        self.audit.log(actor=None, action="create", object_type="customer", object_id=customer.id)
        return CustomerRead.model_validate(customer)

    def update_customer(self, customer_id: str, data: CustomerUpdate, actor: Optional[str] = None) -> CustomerRead:
        changes = data.model_dump(exclude_none=True)
        with self.store.locked(customer_id):
            customer = self._get(customer_id)
            for key, value in changes.items():
                setattr(customer, key, value)
            snapshot = CustomerRead.model_validate(customer)
        self.audit.log(
            actor=actor,
            action="update",
            object_type="customer",
            object_id=customer_id,
            details={"fields": sorted(changes)},
        )
        return snapshot
