"""
Static service catalog and price quoting.

The catalog is a fixed list of categories, each with bookable items
carrying an estimated duration and a material fee.  Quotes combine
the selected items with a worker's hourly rate:

    duration = sum(item minutes)
    price    = round(duration * hourly_rate / 60) + sum(material fees)

All amounts are integer cents.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.errors import NotFoundError
from ..core.store import Worker
from ..schemas.catalog import QuoteRead


@dataclass(frozen=True)
class ServiceItem:
    id: str
    name: str
    category_id: str
    estimated_time_minutes: int
    material_fee_cents: int


@dataclass(frozen=True)
class ServiceCategory:
    id: str
    name: str
    description: str
    items: tuple


def _items(category_id: str, *rows: tuple) -> tuple:
    return tuple(ServiceItem(item_id, name, category_id, minutes, fee) for item_id, name, minutes, fee in rows)


SERVICE_CATEGORIES: List[ServiceCategory] = [
    ServiceCategory(
        id="essential-tidying",
        name="Essential Tidying",
        description="Covers the basics to keep your home neat and clean throughout.",
        items=_items(
            "essential-tidying",
            ("et-sweep-mop", "Sweep & Mop All Floors", 60, 1500),
            ("et-dusting", "Dust Furniture & Surfaces", 45, 500),
            ("et-dishwashing", "Wash Dishes", 30, 500),
            ("et-bathrooms", "Bathroom Tidy-up (Toilets, Sinks, Mirrors)", 60, 2000),
            ("et-trash", "Empty Trash Bins", 15, 200),
        ),
    ),
    ServiceCategory(
        id="laundry-linen",
        name="Laundry & Linen Care",
        description="Complete laundry service from washing to fresh linens on your bed.",
        items=_items(
            "laundry-linen",
            ("ll-wash-dry-fold", "Wash, Dry & Fold Laundry (1 load)", 90, 2500),
            ("ll-ironing", "Ironing (approx. 10 items)", 60, 1000),
            ("ll-change-linens", "Change Bed Linens (per bed)", 15, 500),
        ),
    ),
    ServiceCategory(
        id="kitchen-detail",
        name="Kitchen Detail Clean",
        description="A focused clean for the heart of your home, tackling grime and organization.",
        items=_items(
            "kitchen-detail",
            ("kd-oven-clean", "Oven Interior Clean", 60, 3000),
            ("kd-fridge-clean", "Refrigerator Interior Clean", 45, 2000),
            ("kd-cupboard-fronts", "Wipe Cupboard Exteriors", 30, 1000),
            ("kd-microwave", "Microwave Interior/Exterior", 20, 500),
        ),
    ),
    ServiceCategory(
        id="deluxe-deep-clean",
        name="Deluxe Deep Clean Extras",
        description="For those times your home needs extra attention to detail for a thorough refresh.",
        items=_items(
            "deluxe-deep-clean",
            ("ddc-windows-inside", "Interior Window Cleaning (reachable)", 90, 2500),
            ("ddc-baseboards", "Wipe Down Baseboards", 60, 1000),
            ("ddc-wall-spots", "Spot Clean Walls (minor marks)", 30, 1000),
            ("ddc-upholstery-vacuum", "Vacuum Upholstery (e.g., sofas)", 45, 500),
        ),
    ),
]

_ITEMS_BY_ID: Dict[str, ServiceItem] = {
    item.id: item for category in SERVICE_CATEGORIES for item in category.items
}
_CATEGORIES_BY_ID: Dict[str, ServiceCategory] = {c.id: c for c in SERVICE_CATEGORIES}


class CatalogService:
    """Read-only access to the service catalog."""

    @staticmethod
    def list_categories() -> List[ServiceCategory]:
        return list(SERVICE_CATEGORIES)

    @staticmethod
    def category_name(category_id: str) -> Optional[str]:
        category = _CATEGORIES_BY_ID.get(category_id)
        return category.name if category else None

    @staticmethod
    def get_items(item_ids: List[str]) -> List[ServiceItem]:
        """Resolve item ids in order.  Raises ``NotFoundError`` on the first unknown id."""
        items = []
        for item_id in item_ids:
            item = _ITEMS_BY_ID.get(item_id)
            if item is None:
                raise NotFoundError(f"Service item {item_id} not found")
            items.append(item)
        return items

    @classmethod
    def required_categories(cls, item_ids: List[str]) -> List[str]:
        """Category ids covered by ``item_ids``, first occurrence order."""
        seen: List[str] = []
        for item in cls.get_items(item_ids):
            if item.category_id not in seen:
                seen.append(item.category_id)
        return seen

    @classmethod
    def quote(cls, worker: Worker, item_ids: List[str]) -> QuoteRead:
        items = cls.get_items(item_ids)
        duration = sum(item.estimated_time_minutes for item in items)
        # Round half up on the labour component only.
        labour = (duration * worker.hourly_rate_cents + 30) // 60
        materials = sum(item.material_fee_cents for item in items)
        return QuoteRead(
            worker_id=worker.id,
            hourly_rate_cents=worker.hourly_rate_cents,
            estimated_duration_minutes=duration,
            labour_cents=labour,
            material_fee_cents=materials,
            total_price_cents=labour + materials,
            service_names=[item.name for item in items],
        )
