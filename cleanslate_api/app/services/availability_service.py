"""
Worker availability checks.

A worker can be booked for ``[start, start + duration)`` when the
requested calendar day is not one of their unavailable dates and no
non-cancelled booking of theirs overlaps the window.  Overlap uses
half-open intervals, so a booking ending at 10:00 does not conflict
with one starting at 10:00.

The check never raises for expected conditions: an unknown worker is
simply unavailable.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..core.store import Booking, MarketplaceStore
from ..schemas.booking import BookingStatus


logger = logging.getLogger(__name__)

CANCELLED_STATUSES = frozenset(
    {
        BookingStatus.CANCELLED_BY_CUSTOMER,
        BookingStatus.CANCELLED_BY_WORKER,
        BookingStatus.CANCELLED_BY_ADMIN,
    }
)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and end_a > start_b


class AvailabilityService:
    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store

    def conflicting_bookings(
        self,
        worker_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Non-cancelled bookings of ``worker_id`` overlapping the window."""
        requested_start = as_utc(start)
        requested_end = requested_start + timedelta(minutes=duration_minutes)
        return [
            booking
            for booking in self.store.bookings.values()
            if booking.worker_id == worker_id
            and booking.id != exclude_booking_id
            and booking.status not in CANCELLED_STATUSES
            and intervals_overlap(
                requested_start,
                requested_end,
                as_utc(booking.booking_date),
                as_utc(booking.end_time),
            )
        ]

    def is_available(
        self,
        worker_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        worker = self.store.workers.get(worker_id)
        if worker is None:
            return False
        # The calendar day is taken as written by the caller, before any
        # timezone normalisation.
        if start.date() in worker.unavailable_dates:
            logger.debug("Worker %s is marked unavailable on %s", worker_id, start.date())
            return False
        conflicts = self.conflicting_bookings(worker_id, start, duration_minutes, exclude_booking_id)
        if conflicts:
            logger.debug(
                "Worker %s has %d overlapping booking(s) for %s (+%d min)",
                worker_id, len(conflicts), start.isoformat(), duration_minutes,
            )
            return False
        return True
