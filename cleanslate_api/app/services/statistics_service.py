"""
Service layer for statistics and reporting.

Provides the administrator dashboard overview, the payroll summary and
per-worker earnings.  All figures are computed from the store on
request; nothing is cached.  Money is reported in integer cents.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..core.errors import NotFoundError
from ..core.store import MarketplaceStore, utcnow
from ..schemas.booking import BookingStatus
from ..schemas.worker import WorkerStatus
from .availability_service import as_utc


logger = logging.getLogger(__name__)

# Bookings whose work has been done and is therefore payable.
COMPLETED_STATUSES = frozenset(
    {BookingStatus.COMPLETED_BY_WORKER, BookingStatus.CUSTOMER_CONFIRMED_AND_RATED}
)

PENDING_APPLICATION_STATUSES = frozenset(
    {WorkerStatus.PENDING_APPLICATION, WorkerStatus.PENDING_APPROVAL}
)


class StatisticsService:
    """Aggregated metrics for administrators and workers."""

    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store

    def overview(self) -> Dict[str, Any]:
        """Return high level marketplace metrics.

        Includes active workers, pending applications, customers, total
        bookings, a per-status booking count and the revenue of
        completed bookings.
        """
        workers = list(self.store.workers.values())
        bookings = list(self.store.bookings.values())
        per_status = {status.value: 0 for status in BookingStatus}
        for booking in bookings:
            per_status[booking.status.value] += 1
        return {
            "active_workers": sum(1 for w in workers if w.status == WorkerStatus.ACTIVE),
            "pending_applications": sum(1 for w in workers if w.status in PENDING_APPLICATION_STATUSES),
            "customers_count": len(self.store.customers),
            "bookings_count": len(bookings),
            "bookings_by_status": per_status,
            "completed_revenue_cents": sum(
                b.total_price_cents for b in bookings if b.status in COMPLETED_STATUSES
            ),
        }

    def payroll(self, payout_share: Optional[float] = None) -> Dict[str, Any]:
        """Estimate what every active worker is owed.

        For each ``Active`` worker the completed bookings are counted and
        their prices summed; the estimated payout is that sum times
        ``payout_share`` (``settings.worker_payout_share`` by default),
        rounded to whole cents.
        """
        share = settings.worker_payout_share if payout_share is None else payout_share
        rows: List[Dict[str, Any]] = []
        for worker in self.store.workers.values():
            if worker.status != WorkerStatus.ACTIVE:
                continue
            completed = [
                b for b in self.store.bookings.values()
                if b.worker_id == worker.id and b.status in COMPLETED_STATUSES
            ]
            earned = sum(b.total_price_cents for b in completed)
            rows.append(
                {
                    "worker_id": worker.id,
                    "worker_name": worker.full_name,
                    "completed_jobs": len(completed),
                    "total_billed_cents": earned,
                    "estimated_payout_cents": int(round(earned * share)),
                }
            )
        rows.sort(key=lambda r: r["worker_name"].lower())
        total = sum(r["estimated_payout_cents"] for r in rows)
        logger.debug("Payroll computed for %d workers, total %d cents", len(rows), total)
        return {
            "currency": settings.currency,
            "payout_share": share,
            "workers": rows,
            "total_payout_cents": total,
        }

    def worker_earnings(
        self, worker_id: str, now: Optional[datetime] = None, payout_share: Optional[float] = None
    ) -> Dict[str, Any]:
        """Earnings summary for one worker.

        Month and year totals are the worker's share of the booking
        prices, using the same ``payout_share`` as :meth:`payroll`.
        ``now`` fixes the reference instant for the month and year
        windows; it defaults to the current UTC time.
        """
        share = settings.worker_payout_share if payout_share is None else payout_share
        worker = self.store.workers.get(worker_id)
        if worker is None:
            raise NotFoundError(f"Worker {worker_id} not found")
        reference = as_utc(now or utcnow())
        completed = [
            b for b in self.store.bookings.values()
            if b.worker_id == worker_id and b.status in COMPLETED_STATUSES
        ]
        this_month = 0
        year_to_date = 0
        for booking in completed:
            when = as_utc(booking.booking_date)
            if when.year != reference.year:
                continue
            year_to_date += booking.total_price_cents
            if when.month == reference.month:
                this_month += booking.total_price_cents
        ratings = [b.rating for b in completed if b.rating is not None]
        average = round(sum(ratings) / len(ratings), 2) if ratings else None
        return {
            "worker_id": worker_id,
            "currency": settings.currency,
            "payout_share": share,
            "this_month_cents": int(round(this_month * share)),
            "year_to_date_cents": int(round(year_to_date * share)),
            "average_rating": average,
            "completed_jobs": len(completed),
        }
