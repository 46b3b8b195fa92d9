"""
Business logic for bookings.

The ``BookingService`` is the single path through which bookings are
created and changed.  It resolves the customer, worker and service
items of a new booking, checks the worker's availability, and then
drives the booking through an explicit status state machine:

    AwaitingWorkerConfirmation -> ConfirmedByWorker -> InProgress
        -> CompletedByWorker -> CustomerConfirmedAndRated

with cancellation branches for the customer, the worker and admins.
Cancelled and rated bookings are terminal.  A change that is not in
``BOOKING_TRANSITIONS`` is rejected with ``IllegalTransitionError``
instead of silently overwriting the status.
"""

import logging
from typing import Dict, FrozenSet, List, Optional

from ..core.errors import (
    ForbiddenTransitionError,
    IllegalTransitionError,
    NotFoundError,
    VersionConflictError,
    WorkerUnavailableError,
)
from ..core.store import Booking, LocationRecord, MarketplaceStore, new_id, utcnow
from ..schemas.booking import BookingCreate, BookingRead, BookingStatus
from ..schemas.worker import WorkerStatus
from .audit_service import AuditService
from .availability_service import CANCELLED_STATUSES, AvailabilityService, as_utc
from .catalog_service import CatalogService


logger = logging.getLogger(__name__)

S = BookingStatus

BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    S.REQUESTED: frozenset({S.AWAITING_WORKER_CONFIRMATION}),
    S.AWAITING_WORKER_CONFIRMATION: frozenset(
        {S.CONFIRMED_BY_WORKER, S.CANCELLED_BY_WORKER, S.CANCELLED_BY_CUSTOMER, S.CANCELLED_BY_ADMIN}
    ),
    S.CONFIRMED_BY_WORKER: frozenset({S.IN_PROGRESS, S.CANCELLED_BY_CUSTOMER, S.CANCELLED_BY_ADMIN}),
    S.IN_PROGRESS: frozenset({S.COMPLETED_BY_WORKER}),
    S.COMPLETED_BY_WORKER: frozenset({S.CUSTOMER_CONFIRMED_AND_RATED}),
    S.CUSTOMER_CONFIRMED_AND_RATED: frozenset(),
    S.CANCELLED_BY_CUSTOMER: frozenset(),
    S.CANCELLED_BY_WORKER: frozenset(),
    S.CANCELLED_BY_ADMIN: frozenset(),
}

# Target statuses each non-admin role may set.  Admins may apply any
# transition present in ``BOOKING_TRANSITIONS``.
ROLE_TARGETS: Dict[str, FrozenSet[BookingStatus]] = {
    "customer": frozenset({S.CANCELLED_BY_CUSTOMER}),
    "worker": frozenset({S.CONFIRMED_BY_WORKER, S.CANCELLED_BY_WORKER, S.IN_PROGRESS, S.COMPLETED_BY_WORKER}),
}

TERMINAL_STATUSES = frozenset(status for status, targets in BOOKING_TRANSITIONS.items() if not targets)


def assert_booking_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target not in BOOKING_TRANSITIONS.get(current, frozenset()):
        raise IllegalTransitionError(f"Invalid booking transition: {current.value} -> {target.value}")


def _check_version(booking: Booking, expected_version: Optional[int]) -> None:
    if expected_version is not None and booking.version != expected_version:
        raise VersionConflictError(
            f"Booking {booking.id} is at version {booking.version}, not {expected_version}"
        )


class BookingService:
    """Service for creating, transitioning and querying bookings."""

    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store
        self.availability = AvailabilityService(store)
        self.audit = AuditService(store)

    def _get(self, booking_id: str) -> Booking:
        booking = self.store.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def get_booking(self, booking_id: str) -> BookingRead:
        return BookingRead.model_validate(self._get(booking_id))

    def create_booking(self, data: BookingCreate, actor: Optional[str] = None) -> BookingRead:
        """Create a booking in status ``AwaitingWorkerConfirmation``.

        The customer and worker must exist and every service item must
        be in the catalog (``NotFoundError`` otherwise).  Duration and
        price come from the catalog quote unless the payload overrides
        them.  The worker must be active and available for the whole
        window, else ``WorkerUnavailableError`` is raised.
        """
        if not data.customer_id:
            raise NotFoundError("Customer id is required")
        customer = self.store.customers.get(data.customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {data.customer_id} not found")
        worker = self.store.workers.get(data.worker_id)
        if worker is None:
            raise NotFoundError(f"Worker {data.worker_id} not found")

        quote = CatalogService.quote(worker, data.service_item_ids)
        duration = data.estimated_duration_minutes or quote.estimated_duration_minutes
        price = data.total_price_cents if data.total_price_cents is not None else quote.total_price_cents

        with self.store.locked(worker.id):
            if worker.status != WorkerStatus.ACTIVE:
                raise WorkerUnavailableError(f"Worker {worker.id} is not active ({worker.status.value})")
            if not self.availability.is_available(worker.id, data.booking_date, duration):
                raise WorkerUnavailableError(
                    f"Worker {worker.id} is not available at {data.booking_date.isoformat()} for {duration} minutes"
                )
            booking = Booking(
                id=new_id(),
                customer_id=customer.id,
                customer_name=customer.full_name,
                worker_id=worker.id,
                worker_name=worker.full_name,
                service_item_ids=list(data.service_item_ids),
                service_names=quote.service_names,
                booking_date=as_utc(data.booking_date),
                estimated_duration_minutes=duration,
                total_price_cents=price,
                customer_notes=data.customer_notes,
                location=LocationRecord(**data.location.model_dump()),
                status=BookingStatus.AWAITING_WORKER_CONFIRMATION,
                created_at=utcnow(),
                sequence=self.store.next_sequence(),
            )
            self.store.bookings[booking.id] = booking

        logger.info(
            "Booking %s created for customer %s with worker %s at %s",
            booking.id, customer.id, worker.id, booking.booking_date.isoformat(),
        )
        self.audit.log(
            actor=actor,
            action="create",
            object_type="booking",
            object_id=booking.id,
            details={"worker_id": worker.id, "customer_id": customer.id, "total_price_cents": price},
        )
        return BookingRead.model_validate(booking)

    def update_status(
        self,
        booking_id: str,
        new_status: BookingStatus,
        role: Optional[str] = None,
        actor: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> BookingRead:
        """Move a booking to ``new_status``.

        ``role`` is the acting role (``customer``, ``worker`` or
        ``admin``); ``None`` means a trusted internal caller.  Raises
        ``NotFoundError``, ``ForbiddenTransitionError``,
        ``IllegalTransitionError`` or ``VersionConflictError``.
        """
        if role is not None and role != "admin" and new_status not in ROLE_TARGETS.get(role, frozenset()):
            raise ForbiddenTransitionError(f"Role {role} may not set status {new_status.value}")
        with self.store.locked(booking_id):
            booking = self._get(booking_id)
            _check_version(booking, expected_version)
            previous = booking.status
            try:
                assert_booking_transition(previous, new_status)
            except IllegalTransitionError:
                logger.warning("Rejected booking %s transition %s -> %s", booking_id, previous.value, new_status.value)
                raise
            booking.status = new_status
            self.store.touch(booking)
            snapshot = BookingRead.model_validate(booking)

        logger.info("Booking %s status %s -> %s", booking_id, previous.value, new_status.value)
        self.audit.log(
            actor=actor,
            action="status",
            object_type="booking",
            object_id=booking_id,
            details={"from": previous.value, "to": new_status.value},
        )
        return snapshot

    def attach_review(
        self,
        booking_id: str,
        rating: int,
        review: str,
        actor: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> BookingRead:
        """Rate a booking and mark it ``CustomerConfirmedAndRated``.

        Repeating the call overwrites the rating and review.  Cancelled
        bookings are terminal and cannot be rated.
        """
        if not 1 <= rating <= 5:
            raise ValueError("Rating must be between 1 and 5")
        with self.store.locked(booking_id):
            booking = self._get(booking_id)
            _check_version(booking, expected_version)
            if booking.status in CANCELLED_STATUSES:
                raise IllegalTransitionError(
                    f"Invalid booking transition: {booking.status.value} -> "
                    f"{BookingStatus.CUSTOMER_CONFIRMED_AND_RATED.value}"
                )
            previous = booking.status
            booking.rating = rating
            booking.review = review
            booking.status = BookingStatus.CUSTOMER_CONFIRMED_AND_RATED
            self.store.touch(booking)
            snapshot = BookingRead.model_validate(booking)

        logger.info("Booking %s rated %d (was %s)", booking_id, rating, previous.value)
        self.audit.log(
            actor=actor,
            action="review",
            object_type="booking",
            object_id=booking_id,
            details={"rating": rating, "from": previous.value},
        )
        return snapshot

    # -- queries -------------------------------------------------------------

    def list_for_customer(self, customer_id: str) -> List[BookingRead]:
        """Bookings of a customer, latest booking date first."""
        return self._by_booking_date(b for b in self.store.bookings.values() if b.customer_id == customer_id)

    def list_for_worker(self, worker_id: str) -> List[BookingRead]:
        """Bookings of a worker, latest booking date first."""
        return self._by_booking_date(b for b in self.store.bookings.values() if b.worker_id == worker_id)

    def list_all(
        self,
        status: Optional[BookingStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[BookingRead]:
        """All bookings, newest first, optionally filtered by status."""
        bookings = [b for b in self.store.bookings.values() if status is None or b.status == status]
        bookings.sort(key=lambda b: (b.created_at, b.sequence), reverse=True)
        end = None if limit is None else offset + limit
        return [BookingRead.model_validate(b) for b in bookings[offset:end]]

    @staticmethod
    def _by_booking_date(bookings) -> List[BookingRead]:
        ordered = sorted(bookings, key=lambda b: (b.booking_date, b.sequence), reverse=True)
        return [BookingRead.model_validate(b) for b in ordered]
