from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from cleanslate_api.app.core.security import create_access_token
from cleanslate_api.app.core.store import (
    Booking,
    Customer,
    LocationRecord,
    MarketplaceStore,
    Worker,
    default_onboarding_steps,
    new_id,
    seed_training_modules,
)
from cleanslate_api.app.main import create_app
from cleanslate_api.app.schemas.booking import BookingCreate, BookingStatus
from cleanslate_api.app.schemas.worker import WorkerStatus
from cleanslate_api.app.services.booking_service import BookingService


# Monday morning, far enough ahead that "now" never interferes.
MONDAY_9AM = datetime(2030, 3, 4, 9, 0, tzinfo=timezone.utc)


def make_worker(store, full_name="Thandi Mokoena", rate=12000, services=("essential-tidying", "laundry-linen"),
                status=WorkerStatus.ACTIVE):
    steps = default_onboarding_steps()
    if status == WorkerStatus.ACTIVE:
        for step in steps:
            step.completed = True
    worker = Worker(
        id=new_id(),
        full_name=full_name,
        email=f"{full_name.split()[0].lower()}@example.com",
        phone="0821234567",
        address="1 Test Road, Cape Town",
        id_number="9001015000080",
        services_offered=list(services),
        experience="",
        bank_account_number="123456",
        bank_name="FNB",
        branch_code="250655",
        hourly_rate_cents=rate,
        status=status,
        training_verified=status == WorkerStatus.ACTIVE,
        onboarding_steps=steps,
    )
    store.workers[worker.id] = worker
    return worker


def make_customer(store, full_name="Sipho Dlamini"):
    customer = Customer(id=new_id(), full_name=full_name, email=f"{full_name.split()[0].lower()}@example.com")
    store.customers[customer.id] = customer
    return customer


def add_booking(store, worker, customer, when, price=10000, status=BookingStatus.COMPLETED_BY_WORKER,
                rating=None, duration=60):
    """Insert a booking record directly, bypassing the service rules."""
    booking = Booking(
        id=new_id(),
        customer_id=customer.id,
        customer_name=customer.full_name,
        worker_id=worker.id,
        worker_name=worker.full_name,
        service_item_ids=["et-sweep-mop"],
        service_names=["Sweep & Mop All Floors"],
        booking_date=when,
        estimated_duration_minutes=duration,
        total_price_cents=price,
        location=LocationRecord(address="1 Test Road"),
        status=status,
        rating=rating,
        sequence=store.next_sequence(),
    )
    store.bookings[booking.id] = booking
    return booking


def booking_payload(customer_id, worker_id, when=MONDAY_9AM, items=("et-sweep-mop",), **extra):
    data = {
        "customer_id": customer_id,
        "worker_id": worker_id,
        "service_item_ids": list(items),
        "booking_date": when,
        "location": {"address": "12 Long Street, Cape Town"},
    }
    data.update(extra)
    return BookingCreate(**data)


@pytest.fixture
def store():
    store = MarketplaceStore()
    seed_training_modules(store)
    return store


@pytest.fixture
def worker(store):
    return make_worker(store)


@pytest.fixture
def customer(store):
    return make_customer(store)


@pytest.fixture
def booking_service(store):
    return BookingService(store)


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


@pytest.fixture
def auth_headers():
    def _headers(role, user_id=None):
        token = create_access_token({"sub": user_id or role, "role": role, "user_id": user_id})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin")
