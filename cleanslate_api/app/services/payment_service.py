"""
Business logic for payments.

``initiate_payment`` starts a transaction with Paystack when a secret
key is configured and otherwise issues a test reference that always
succeeds, which is what development and the test-suite use.  Every
attempt that reaches a result is recorded in the store.
"""

import logging
import uuid
from typing import List, Optional

import httpx

from ..core.config import settings
from ..core.errors import NotFoundError, PaymentError
from ..core.store import MarketplaceStore, Payment, new_id
from ..schemas.payment import PaymentRead, PaymentResult
from .audit_service import AuditService


logger = logging.getLogger(__name__)


class PaymentService:
    """Initiate and record customer payments."""

    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store
        self.audit = AuditService(store)

    def initiate_payment(
        self,
        amount_cents: int,
        email: str,
        booking_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> PaymentResult:
        """Start a payment of ``amount_cents`` for ``email``.

        Raises ``PaymentError`` when the provider rejects the request or
        cannot be reached, and ``NotFoundError`` for an unknown booking.
        """
        if amount_cents <= 0:
            raise ValueError("Payment amount must be positive")
        if booking_id is not None and booking_id not in self.store.bookings:
            raise NotFoundError(f"Booking {booking_id} not found")

        authorization_url = None
        if settings.paystack_secret_key:
            provider = "paystack"
            reference, authorization_url = self._initialize_paystack_transaction(amount_cents, email)
        else:
            provider = "test"
            reference = f"test-reference-{uuid.uuid4().hex}"

        payment = Payment(
            id=new_id(),
            amount_cents=amount_cents,
            email=email,
            reference=reference,
            success=True,
            provider=provider,
            currency=settings.currency,
            booking_id=booking_id,
            authorization_url=authorization_url,
        )
        self.store.payments[payment.id] = payment
        logger.info("Payment %s initiated via %s (%d cents)", reference, provider, amount_cents)
        self.audit.log(
            actor=actor,
            action="create",
            object_type="payment",
            object_id=payment.id,
            details={"amount_cents": amount_cents, "provider": provider, "booking_id": booking_id},
        )
        return PaymentResult(success=payment.success, reference=payment.reference)

    @staticmethod
    def _initialize_paystack_transaction(amount_cents: int, email: str) -> tuple:
        """Call Paystack's transaction initialize endpoint.

        Returns ``(reference, authorization_url)``.
        """
        url = settings.paystack_base_url.rstrip("/") + "/transaction/initialize"
        headers = {
            "Authorization": f"Bearer {settings.paystack_secret_key}",
            "Content-Type": "application/json",
        }
        # Paystack amounts are in the currency's subunit, which matches cents.
        payload = {"amount": amount_cents, "email": email, "currency": settings.currency}
        try:
            response = httpx.post(url, headers=headers, json=payload, timeout=30)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to initiate Paystack payment: %s", exc)
            raise PaymentError(f"Payment provider error: {exc}") from exc
        if not body.get("status"):
            raise PaymentError(body.get("message") or "Payment provider rejected the transaction")
        data = body.get("data") or {}
        reference = data.get("reference")
        if not reference:
            raise PaymentError("Payment provider returned no reference")
        return reference, data.get("authorization_url")

    def list_payments(self, booking_id: Optional[str] = None) -> List[PaymentRead]:
        payments = [
            p for p in self.store.payments.values() if booking_id is None or p.booking_id == booking_id
        ]
        payments.sort(key=lambda p: p.created_at, reverse=True)
        return [PaymentRead.model_validate(p) for p in payments]
