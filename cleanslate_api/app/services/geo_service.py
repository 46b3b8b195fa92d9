"""
Proximity search for workers.

Workers carry a street address but no coordinates, so the search
returns every active worker and only records the requested radius.
"""

import logging
from typing import List

from ..core.store import MarketplaceStore
from ..schemas.worker import WorkerStatus


logger = logging.getLogger(__name__)


class GeoService:
    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store

    def find_workers_near(self, lat: float, lng: float, radius_km: float) -> List[str]:
        worker_ids = sorted(
            w.id for w in self.store.workers.values() if w.status == WorkerStatus.ACTIVE
        )
        logger.info(
            "Proximity search at (%.5f, %.5f) within %.1f km: %d worker(s)",
            lat, lng, radius_km, len(worker_ids),
        )
        return worker_ids
