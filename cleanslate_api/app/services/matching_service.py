"""
Worker matching and quote confirmation.

``MatchingService.match`` collects the active workers near the
customer, prices the selected service items and then either

* posts the rendered ``PROMPT_TEMPLATE`` to the configured matching
  endpoint and validates its JSON answer, or
* when no endpoint is configured, picks the cheapest available worker
  whose specializations cover every requested category and returns
  the system quote for them.

Either way an unmatched request raises ``NoWorkerAvailableError``.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..core.errors import MatchingError, NoWorkerAvailableError
from ..core.store import MarketplaceStore, Worker
from ..schemas.matching import MatchingRequest, MatchingResult
from .availability_service import AvailabilityService
from .catalog_service import CatalogService
from .geo_service import GeoService


logger = logging.getLogger(__name__)

NO_WORKER_AVAILABLE = "NO_WORKER_AVAILABLE"

PROMPT_TEMPLATE = """You are an expert scheduling and quoting assistant for Clean Slate, a domestic services company.
Find the best available worker for the customer's request, confirm the service details and give a final quote.

Customer request:
- Service type: {service_type}
- Location: latitude {lat}, longitude {lng}
- Preferred start: {date_time}
- Requested service categories: {categories}
- Service items: {item_ids}
- System estimated duration: {duration_minutes} minutes
- System estimated total cost: {total_price_cents} cents ({currency})
- Customer notes: {customer_notes}

Candidate workers:
{workers}

Selected service items:
{items}

Pick the most suitable worker from the candidates. You may adjust the duration and price slightly
when the notes or the combination of services call for it; explain any adjustment in confirmation_notes.
Answer with JSON only:
{{"worker_id": "...", "estimated_price_cents": 0, "estimated_duration_minutes": 0, "confirmation_notes": "..."}}
If no candidate is suitable use "{no_worker}" as worker_id and explain why in confirmation_notes.
"""


class MatchingService:
    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store
        self.geo = GeoService(store)
        self.availability = AvailabilityService(store)

    def match(self, request: MatchingRequest) -> MatchingResult:
        radius = request.radius_km or settings.proximity_radius_km
        nearby_ids = self.geo.find_workers_near(request.location.lat, request.location.lng, radius)
        items = CatalogService.get_items(request.selected_service_items)
        categories = CatalogService.required_categories(request.selected_service_items)
        candidates = [self.store.workers[wid] for wid in nearby_ids if wid in self.store.workers]
        if not candidates:
            raise NoWorkerAvailableError("No workers found near the requested location")

        if settings.matching_api_url:
            result = self._remote_match(request, candidates, items, categories)
        else:
            result = self._local_match(request, candidates, categories)
        logger.info(
            "Matched worker %s for %d item(s): %d cents, %d min",
            result.worker_id, len(items), result.estimated_price_cents, result.estimated_duration_minutes,
        )
        return result

    def _local_match(self, request: MatchingRequest, candidates: List[Worker], categories: List[str]) -> MatchingResult:
        duration = sum(item.estimated_time_minutes for item in CatalogService.get_items(request.selected_service_items))
        suitable = [
            w for w in candidates
            if set(categories) <= set(w.services_offered)
            and self.availability.is_available(w.id, request.date_time, duration)
        ]
        if not suitable:
            raise NoWorkerAvailableError("No available worker covers the requested services")
        best = min(suitable, key=lambda w: (w.hourly_rate_cents, w.full_name.lower()))
        quote = CatalogService.quote(best, request.selected_service_items)
        return MatchingResult(
            worker_id=best.id,
            estimated_price_cents=quote.total_price_cents,
            estimated_duration_minutes=quote.estimated_duration_minutes,
            confirmation_notes=f"{best.full_name} covers all requested services at the system quote.",
        )

    def render_prompt(self, request: MatchingRequest, candidates: List[Worker], items, categories: List[str]) -> str:
        # Quoted at the default rate; the endpoint picks the worker.
        duration = sum(item.estimated_time_minutes for item in items)
        labour = (duration * settings.default_hourly_rate_cents + 30) // 60
        total = labour + sum(item.material_fee_cents for item in items)
        workers = "\n".join(
            f"- {w.id}: {w.full_name}, rate {w.hourly_rate_cents} cents/h, services {', '.join(w.services_offered)}"
            for w in candidates
        )
        item_lines = "\n".join(
            f"- {item.name} (ID: {item.id}): {item.estimated_time_minutes} mins, {item.material_fee_cents} cents material fee"
            for item in items
        )
        return PROMPT_TEMPLATE.format(
            service_type=request.service_type,
            lat=request.location.lat,
            lng=request.location.lng,
            date_time=request.date_time.isoformat(),
            categories=", ".join(CatalogService.category_name(c) or c for c in categories),
            item_ids=", ".join(request.selected_service_items),
            duration_minutes=duration,
            total_price_cents=total,
            currency=settings.currency,
            customer_notes=request.customer_notes or "None",
            workers=workers,
            items=item_lines,
            no_worker=NO_WORKER_AVAILABLE,
        )

    def _remote_match(self, request: MatchingRequest, candidates: List[Worker], items, categories: List[str]) -> MatchingResult:
        prompt = self.render_prompt(request, candidates, items, categories)
        headers = {"Content-Type": "application/json"}
        if settings.matching_api_key:
            headers["Authorization"] = f"Bearer {settings.matching_api_key}"
        try:
            response = httpx.post(
                settings.matching_api_url,
                headers=headers,
                json={"prompt": prompt},
                timeout=settings.matching_timeout,
            )
            response.raise_for_status()
            payload = self._extract_answer(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Matching endpoint call failed: %s", exc)
            raise MatchingError(f"Matching service error: {exc}") from exc

        if payload.get("worker_id") == NO_WORKER_AVAILABLE:
            raise NoWorkerAvailableError(payload.get("confirmation_notes") or "No suitable worker available")
        try:
            result = MatchingResult.model_validate(payload)
        except ValidationError as exc:
            raise MatchingError(f"Matching service returned an invalid answer: {exc}") from exc
        if result.worker_id not in {w.id for w in candidates}:
            raise MatchingError(f"Matching service chose unknown worker {result.worker_id}")
        return result

    @staticmethod
    def _extract_answer(body: Any) -> Dict[str, Any]:
        """Accept either the answer object itself or ``{"output": ...}`` wrapping it.

        A string output is parsed as JSON.
        """
        answer: Optional[Any] = body.get("output", body) if isinstance(body, dict) else body
        if isinstance(answer, str):
            answer = json.loads(answer)
        if not isinstance(answer, dict):
            raise ValueError("matching answer is not a JSON object")
        return answer
