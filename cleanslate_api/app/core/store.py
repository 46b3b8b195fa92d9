"""
In-memory data store and its lifecycle.

The ``MarketplaceStore`` holds every customer, worker, booking,
training module and payment record of a running process.  It replaces
a database: an instance is created once by ``create_app`` (or once per
test) and handed to the service layer through the ``get_store``
dependency, so no module-level state is shared between tests.

Records are plain dataclasses.  Services must mutate an entity only
inside ``store.locked(entity_id)`` and call ``touch`` afterwards so its
``version`` stamp moves forward; readers receive pydantic snapshots,
never the records themselves.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from fastapi import Request

from ..schemas.booking import BookingStatus
from ..schemas.training import TrainingModuleType
from ..schemas.worker import TrainingProgress, WorkerStatus


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class LocationRecord:
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass
class OnboardingStep:
    id: str
    label: str
    completed: bool = False
    notes: Optional[str] = None


@dataclass
class AssignedTrainingModule:
    module_id: str
    title: str
    status: TrainingProgress = TrainingProgress.NOT_STARTED
    score: Optional[int] = None
    completion_date: Optional[datetime] = None


@dataclass
class TrainingModule:
    id: str
    title: str
    type: TrainingModuleType
    description: str
    estimated_duration_minutes: int
    content_url: Optional[str] = None
    quiz_id: Optional[str] = None


@dataclass
class Customer:
    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Worker:
    id: str
    full_name: str
    email: str
    phone: str
    address: str
    id_number: str
    services_offered: List[str]
    experience: str
    bank_account_number: str
    bank_name: str
    branch_code: str
    hourly_rate_cents: int
    status: WorkerStatus = WorkerStatus.PENDING_APPROVAL
    training_verified: bool = False
    profile_picture_url: Optional[str] = None
    unavailable_dates: List[date] = field(default_factory=list)
    onboarding_steps: List[OnboardingStep] = field(default_factory=list)
    assigned_training_modules: List[AssignedTrainingModule] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    version: int = 1


@dataclass
class Booking:
    id: str
    customer_id: str
    customer_name: str
    worker_id: str
    worker_name: str
    service_item_ids: List[str]
    service_names: List[str]
    booking_date: datetime
    estimated_duration_minutes: int
    total_price_cents: int
    location: LocationRecord
    status: BookingStatus = BookingStatus.AWAITING_WORKER_CONFIRMATION
    customer_notes: Optional[str] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    # Insertion order, used to break ties between equal timestamps.
    sequence: int = 0
    version: int = 1

    @property
    def end_time(self) -> datetime:
        return self.booking_date + timedelta(minutes=self.estimated_duration_minutes)


@dataclass
class Payment:
    id: str
    amount_cents: int
    email: str
    reference: str
    success: bool
    provider: str
    currency: str
    booking_id: Optional[str] = None
    authorization_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class ChangeRecord:
    actor: Optional[str]
    action: str
    object_type: str
    object_id: Optional[str]
    details: Dict[str, Any]
    timestamp: datetime = field(default_factory=utcnow)
    # Assigned by ``MarketplaceStore.publish``.
    id: int = 0


def default_onboarding_steps() -> List[OnboardingStep]:
    """The fixed onboarding checklist seeded for every new worker."""
    return [
        OnboardingStep(id="idVerification", label="ID Verification"),
        OnboardingStep(id="addressConfirmation", label="Address Confirmation"),
        OnboardingStep(id="contractSigning", label="Contract Signing"),
        OnboardingStep(id="initialTraining", label="Initial Training Program"),
    ]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

ChangeListener = Callable[[ChangeRecord], None]


class MarketplaceStore:
    """Process-local container for all marketplace records."""

    def __init__(self) -> None:
        self.customers: Dict[str, Customer] = {}
        self.workers: Dict[str, Worker] = {}
        self.bookings: Dict[str, Booking] = {}
        self.training_modules: Dict[str, TrainingModule] = {}
        self.payments: Dict[str, Payment] = {}
        self.changes: List[ChangeRecord] = []
        self._listeners: List[ChangeListener] = []
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._sequence = 0

    # -- locking -----------------------------------------------------------

    @contextmanager
    def locked(self, entity_id: str) -> Iterator[None]:
        """Hold the per-entity lock for ``entity_id``."""
        with self._registry_lock:
            lock = self._locks.setdefault(entity_id, threading.RLock())
        with lock:
            yield

    def next_sequence(self) -> int:
        with self._registry_lock:
            self._sequence += 1
            return self._sequence

    @staticmethod
    def touch(record: Any) -> None:
        record.version += 1

    # -- change notification ----------------------------------------------

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, record: ChangeRecord) -> None:
        with self._registry_lock:
            record.id = len(self.changes) + 1
            self.changes.append(record)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(record)
            except Exception:
                # A faulty subscriber must not undo a committed mutation.
                logger.exception("Change listener %r failed for %s", listener, record.action)


def get_store(request: Request) -> MarketplaceStore:
    """FastAPI dependency returning the store attached to the application."""
    return request.app.state.store


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

SEED_TRAINING_MODULES = [
    TrainingModule(
        id="train001",
        title="Clean Slate Welcome & Ethics",
        type=TrainingModuleType.DOCUMENT,
        description="Introduction to company values and code of conduct.",
        content_url="/docs/ethics_policy.pdf",
        estimated_duration_minutes=30,
    ),
    TrainingModule(
        id="train002",
        title="Basic Cleaning Techniques",
        type=TrainingModuleType.VIDEO,
        description="Demonstrations of standard cleaning procedures.",
        content_url="https://www.youtube.com/embed/examplevideo1",
        estimated_duration_minutes=60,
    ),
    TrainingModule(
        id="train003",
        title="Customer Service Excellence",
        type=TrainingModuleType.MIXED,
        description="Handling customer interactions and managing expectations, includes a quiz.",
        content_url="/training/customer-service",
        quiz_id="quiz001",
        estimated_duration_minutes=45,
    ),
    TrainingModule(
        id="train004",
        title="Health & Safety Protocols",
        type=TrainingModuleType.DOCUMENT,
        description="Understanding safety guidelines and use of materials.",
        content_url="/docs/safety_protocols.pdf",
        estimated_duration_minutes=45,
    ),
]


def seed_training_modules(store: MarketplaceStore) -> None:
    for module in SEED_TRAINING_MODULES:
        store.training_modules.setdefault(
            module.id,
            TrainingModule(**module.__dict__),
        )


def seed_demo_data(store: MarketplaceStore) -> None:
    """Populate ``store`` with a small, self-consistent demo data set."""
    seed_training_modules(store)
    now = utcnow()
    titles = {m.id: m.title for m in store.training_modules.values()}

    def completed(module_id: str, score: Optional[int] = None) -> AssignedTrainingModule:
        return AssignedTrainingModule(
            module_id=module_id,
            title=titles[module_id],
            status=TrainingProgress.COMPLETED,
            score=score,
            completion_date=now,
        )

    def all_steps_done() -> List[OnboardingStep]:
        steps = default_onboarding_steps()
        for step in steps:
            step.completed = True
        return steps

    jane = Worker(
        id=new_id(), full_name="Jane Doe", email="jane.doe@example.com", phone="0821234567",
        address="123 Main St, Anytown", id_number="9001015000080",
        services_offered=["essential-tidying", "laundry-linen"],
        experience="5 years experience in general home cleaning and laundry services.",
        bank_account_number="1234567890", bank_name="FNB", branch_code="250655",
        hourly_rate_cents=11000, status=WorkerStatus.ACTIVE, training_verified=True,
        onboarding_steps=all_steps_done(),
        assigned_training_modules=[completed("train001"), completed("train002")],
    )
    john = Worker(
        id=new_id(), full_name="John Smith", email="john.smith@example.com", phone="0731234567",
        address="456 Oak Ave, Anytown", id_number="8503156000085",
        services_offered=["essential-tidying", "kitchen-detail", "deluxe-deep-clean"],
        experience="10 years experience, specializing in deep cleaning and kitchen details.",
        bank_account_number="0987654321", bank_name="Capitec", branch_code="470010",
        hourly_rate_cents=12500, status=WorkerStatus.ACTIVE, training_verified=True,
        unavailable_dates=[(now + timedelta(days=10)).date()],
        onboarding_steps=all_steps_done(),
        assigned_training_modules=[completed("train001"), completed("train003", score=85)],
    )
    alice = Worker(
        id=new_id(), full_name="Alice Applicant", email="pending@example.com", phone="0810000000",
        address="789 Pine Rd, Anytown", id_number="9512107000081",
        services_offered=["essential-tidying"], experience="New applicant, eager to learn.",
        bank_account_number="111222333", bank_name="Nedbank", branch_code="198765",
        hourly_rate_cents=10000, status=WorkerStatus.PENDING_APPROVAL,
        onboarding_steps=default_onboarding_steps(),
    )
    trainee_steps = default_onboarding_steps()
    trainee_steps[0].completed = True
    bob = Worker(
        id=new_id(), full_name="Bob Trainee", email="trainee@example.com", phone="0810000001",
        address="10 Hillside Cres, Anytown", id_number="9207078000088",
        services_offered=["laundry-linen"],
        experience="Completed initial application, ready for training.",
        bank_account_number="444555666", bank_name="Absa", branch_code="632005",
        hourly_rate_cents=10000, status=WorkerStatus.TRAINING_PENDING,
        onboarding_steps=trainee_steps,
        assigned_training_modules=[
            AssignedTrainingModule("train001", titles["train001"], TrainingProgress.IN_PROGRESS),
            AssignedTrainingModule("train004", titles["train004"]),
        ],
    )
    for worker in (jane, john, alice, bob):
        store.workers[worker.id] = worker

    customer = Customer(
        id=new_id(), full_name="Valued Customer", email="customer@example.com",
        address="Customer Address 1, Suburbia",
    )
    store.customers[customer.id] = customer

    start = now.replace(minute=0, second=0, microsecond=0)
    demo_bookings = [
        Booking(
            id=new_id(), customer_id=customer.id, customer_name=customer.full_name,
            worker_id=jane.id, worker_name=jane.full_name,
            service_item_ids=["et-sweep-mop", "ll-wash-dry-fold"],
            service_names=["Sweep & Mop All Floors", "Wash, Dry & Fold Laundry (1 load)"],
            booking_date=start + timedelta(days=3), estimated_duration_minutes=150,
            total_price_cents=31500, status=BookingStatus.CONFIRMED_BY_WORKER,
            location=LocationRecord(address="Customer Address 1, Suburbia"),
        ),
        Booking(
            id=new_id(), customer_id=customer.id, customer_name=customer.full_name,
            worker_id=john.id, worker_name=john.full_name,
            service_item_ids=["kd-oven-clean", "ddc-windows-inside"],
            service_names=["Oven Interior Clean", "Interior Window Cleaning (reachable)"],
            booking_date=start + timedelta(days=5), estimated_duration_minutes=150,
            total_price_cents=36750, status=BookingStatus.COMPLETED_BY_WORKER,
            location=LocationRecord(address="Another Customer Address, Cityville"),
        ),
    ]
    for booking in demo_bookings:
        booking.sequence = store.next_sequence()
        store.bookings[booking.id] = booking
    logger.info(
        "Seeded demo data: %d workers, %d bookings, %d training modules",
        len(store.workers), len(store.bookings), len(store.training_modules),
    )


def init_store(seed: bool = True) -> MarketplaceStore:
    """Create a store, always with the training catalog and optionally demo data."""
    store = MarketplaceStore()
    if seed:
        seed_demo_data(store)
    else:
        seed_training_modules(store)
    return store
