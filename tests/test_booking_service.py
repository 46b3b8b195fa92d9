from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from cleanslate_api.app.core.errors import (
    ForbiddenTransitionError,
    IllegalTransitionError,
    NotFoundError,
    VersionConflictError,
    WorkerUnavailableError,
)
from cleanslate_api.app.schemas.booking import BookingStatus
from cleanslate_api.app.schemas.worker import WorkerStatus
from cleanslate_api.app.services.booking_service import BOOKING_TRANSITIONS, TERMINAL_STATUSES, BookingService

from conftest import MONDAY_9AM, booking_payload, make_customer, make_worker

S = BookingStatus


def test_create_booking_prices_from_the_catalog(booking_service, worker, customer):
    booking = booking_service.create_booking(
        booking_payload(customer.id, worker.id, items=("et-sweep-mop", "ll-wash-dry-fold"))
    )

    assert booking.status == S.AWAITING_WORKER_CONFIRMATION
    assert booking.estimated_duration_minutes == 150
    # 150 min at 12000/h plus 1500 + 2500 materials.
    assert booking.total_price_cents == 30000 + 4000
    assert booking.customer_name == customer.full_name
    assert booking.worker_name == worker.full_name
    assert booking.service_names == ["Sweep & Mop All Floors", "Wash, Dry & Fold Laundry (1 load)"]
    assert booking.version == 1


def test_create_booking_honours_explicit_duration_and_price(booking_service, worker, customer):
    booking = booking_service.create_booking(
        booking_payload(customer.id, worker.id, estimated_duration_minutes=90, total_price_cents=20000)
    )

    assert booking.estimated_duration_minutes == 90
    assert booking.total_price_cents == 20000


@pytest.mark.parametrize("field", ["customer", "worker", "item"])
def test_create_booking_with_unknown_reference_raises_not_found(booking_service, worker, customer, field):
    kwargs = {"customer_id": customer.id, "worker_id": worker.id, "items": ("et-sweep-mop",)}
    if field == "customer":
        kwargs["customer_id"] = "missing"
    elif field == "worker":
        kwargs["worker_id"] = "missing"
    else:
        kwargs["items"] = ("no-such-item",)

    with pytest.raises(NotFoundError):
        booking_service.create_booking(booking_payload(**kwargs))
    assert booking_service.store.bookings == {}


def test_create_booking_requires_an_active_worker(store, booking_service, customer):
    pending = make_worker(store, full_name="Pending Person", status=WorkerStatus.PENDING_APPROVAL)

    with pytest.raises(WorkerUnavailableError):
        booking_service.create_booking(booking_payload(customer.id, pending.id))


def test_overlapping_booking_is_rejected_until_cancelled(booking_service, worker, customer):
    first = booking_service.create_booking(booking_payload(customer.id, worker.id))

    with pytest.raises(WorkerUnavailableError):
        booking_service.create_booking(booking_payload(customer.id, worker.id, when=MONDAY_9AM + timedelta(minutes=30)))

    booking_service.update_status(first.id, S.CANCELLED_BY_CUSTOMER, role="customer")
    second = booking_service.create_booking(
        booking_payload(customer.id, worker.id, when=MONDAY_9AM + timedelta(minutes=30))
    )
    assert second.status == S.AWAITING_WORKER_CONFIRMATION


def test_booking_on_unavailable_date_is_rejected(booking_service, worker, customer):
    worker.unavailable_dates = [MONDAY_9AM.date()]

    with pytest.raises(WorkerUnavailableError):
        booking_service.create_booking(booking_payload(customer.id, worker.id))


def test_full_lifecycle_bumps_version_each_step(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))

    for expected_version, target in enumerate(
        [S.CONFIRMED_BY_WORKER, S.IN_PROGRESS, S.COMPLETED_BY_WORKER], start=2
    ):
        booking = booking_service.update_status(booking.id, target, role="worker")
        assert booking.status == target
        assert booking.version == expected_version

    rated = booking_service.attach_review(booking.id, 5, "Spotless!")
    assert rated.status == S.CUSTOMER_CONFIRMED_AND_RATED
    assert rated.rating == 5


def test_illegal_transition_leaves_booking_untouched(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))

    with pytest.raises(IllegalTransitionError):
        booking_service.update_status(booking.id, S.IN_PROGRESS, role="worker")

    current = booking_service.get_booking(booking.id)
    assert current.status == S.AWAITING_WORKER_CONFIRMATION
    assert current.version == 1


def test_terminal_statuses_have_no_exits():
    assert TERMINAL_STATUSES == {
        S.CUSTOMER_CONFIRMED_AND_RATED,
        S.CANCELLED_BY_CUSTOMER,
        S.CANCELLED_BY_WORKER,
        S.CANCELLED_BY_ADMIN,
    }
    assert set(BOOKING_TRANSITIONS) == set(BookingStatus)


def test_cancelled_booking_cannot_be_revived(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))
    booking_service.update_status(booking.id, S.CANCELLED_BY_WORKER, role="worker")

    with pytest.raises(IllegalTransitionError):
        booking_service.update_status(booking.id, S.CONFIRMED_BY_WORKER, role="admin")


@pytest.mark.parametrize(
    "role, target",
    [
        ("customer", S.CONFIRMED_BY_WORKER),
        ("customer", S.CANCELLED_BY_ADMIN),
        ("worker", S.CANCELLED_BY_CUSTOMER),
        ("worker", S.CANCELLED_BY_ADMIN),
        ("guest", S.CANCELLED_BY_CUSTOMER),
    ],
)
def test_roles_may_only_set_their_own_statuses(booking_service, worker, customer, role, target):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))

    with pytest.raises(ForbiddenTransitionError):
        booking_service.update_status(booking.id, target, role=role)


def test_admin_may_apply_any_legal_transition(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))

    booking = booking_service.update_status(booking.id, S.CONFIRMED_BY_WORKER, role="admin")
    booking = booking_service.update_status(booking.id, S.CANCELLED_BY_ADMIN, role="admin")
    assert booking.status == S.CANCELLED_BY_ADMIN


def test_stale_version_is_rejected(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))
    booking_service.update_status(booking.id, S.CONFIRMED_BY_WORKER, role="worker", expected_version=1)

    with pytest.raises(VersionConflictError):
        booking_service.update_status(booking.id, S.IN_PROGRESS, role="worker", expected_version=1)


def test_update_status_of_unknown_booking_raises_not_found(booking_service):
    with pytest.raises(NotFoundError):
        booking_service.update_status("missing", S.CONFIRMED_BY_WORKER)


def test_review_is_accepted_from_any_open_status_and_overwrites(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))
    booking_service.update_status(booking.id, S.CONFIRMED_BY_WORKER, role="worker")

    first = booking_service.attach_review(booking.id, 3, "Okay")
    second = booking_service.attach_review(booking.id, 5, "Came back and fixed it")

    assert first.status == S.CUSTOMER_CONFIRMED_AND_RATED
    assert (second.rating, second.review) == (5, "Came back and fixed it")


def test_review_of_cancelled_booking_is_rejected(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))
    booking_service.update_status(booking.id, S.CANCELLED_BY_CUSTOMER, role="customer")

    with pytest.raises(IllegalTransitionError):
        booking_service.attach_review(booking.id, 4, "Never happened")
    assert booking_service.get_booking(booking.id).rating is None


def test_review_rating_out_of_range_is_rejected(booking_service, worker, customer):
    booking = booking_service.create_booking(booking_payload(customer.id, worker.id))

    with pytest.raises(ValueError):
        booking_service.attach_review(booking.id, 6, "Too good")


def test_listings_are_ordered_and_scoped(store, booking_service, worker, customer):
    other_customer = make_customer(store, full_name="Nomsa Zulu")
    early = booking_service.create_booking(booking_payload(customer.id, worker.id))
    late = booking_service.create_booking(booking_payload(customer.id, worker.id, when=MONDAY_9AM + timedelta(days=1)))
    other = booking_service.create_booking(
        booking_payload(other_customer.id, worker.id, when=MONDAY_9AM + timedelta(days=2))
    )

    assert [b.id for b in booking_service.list_for_customer(customer.id)] == [late.id, early.id]
    assert [b.id for b in booking_service.list_for_worker(worker.id)] == [other.id, late.id, early.id]
    assert booking_service.list_for_customer("nobody") == []


def test_list_all_filters_by_status_and_paginates(booking_service, worker, customer):
    ids = [
        booking_service.create_booking(
            booking_payload(customer.id, worker.id, when=MONDAY_9AM + timedelta(days=day))
        ).id
        for day in range(3)
    ]
    booking_service.update_status(ids[0], S.CONFIRMED_BY_WORKER, role="worker")

    newest_first = [b.id for b in booking_service.list_all()]
    assert newest_first == list(reversed(ids))
    assert [b.id for b in booking_service.list_all(status=S.CONFIRMED_BY_WORKER)] == [ids[0]]
    assert [b.id for b in booking_service.list_all(limit=1, offset=1)] == [ids[1]]


def test_mutations_are_recorded_in_the_change_log(store, booking_service, worker, customer):
    seen = []
    store.subscribe(seen.append)

    booking = booking_service.create_booking(booking_payload(customer.id, worker.id), actor="customer:1")
    booking_service.update_status(booking.id, S.CONFIRMED_BY_WORKER, role="worker", actor="worker:2")

    assert [(c.action, c.object_id) for c in seen] == [("create", booking.id), ("status", booking.id)]
    assert seen[1].details == {"from": S.AWAITING_WORKER_CONFIRMATION.value, "to": S.CONFIRMED_BY_WORKER.value}
    assert store.changes == seen


def test_concurrent_bookings_for_one_slot_admit_exactly_one(store, worker):
    customers = [make_customer(store, full_name=f"Customer {i}") for i in range(8)]
    service = BookingService(store)

    def attempt(customer):
        try:
            return service.create_booking(booking_payload(customer.id, worker.id))
        except WorkerUnavailableError:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, customers))

    assert sum(1 for r in results if r is not None) == 1
    assert len(store.bookings) == 1
