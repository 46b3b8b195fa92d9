import pytest

from cleanslate_api.app.core.errors import NotFoundError
from cleanslate_api.app.services.catalog_service import CatalogService

from conftest import make_worker


def test_catalog_has_four_categories():
    names = [c.name for c in CatalogService.list_categories()]
    assert names == ["Essential Tidying", "Laundry & Linen Care", "Kitchen Detail Clean", "Deluxe Deep Clean Extras"]


def test_quote_sums_minutes_labour_and_materials(store):
    worker = make_worker(store, rate=11000)

    quote = CatalogService.quote(worker, ["et-sweep-mop", "ll-wash-dry-fold"])

    assert quote.estimated_duration_minutes == 150
    assert quote.labour_cents == 27500
    assert quote.material_fee_cents == 4000
    assert quote.total_price_cents == 31500


def test_quote_rounds_labour_half_up(store):
    worker = make_worker(store, rate=10002)

    # 15 minutes at 10002/h is 2500.5 cents.
    assert CatalogService.quote(worker, ["et-trash"]).labour_cents == 2501


def test_quote_with_unknown_item_raises(store, worker):
    with pytest.raises(NotFoundError):
        CatalogService.quote(worker, ["et-sweep-mop", "bogus"])


def test_required_categories_keep_first_seen_order():
    assert CatalogService.required_categories(["ll-ironing", "et-trash", "ll-change-linens"]) == [
        "laundry-linen",
        "essential-tidying",
    ]
