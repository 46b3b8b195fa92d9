from datetime import datetime, timezone

from cleanslate_api.app.core.store import ChangeRecord, MarketplaceStore, init_store
from cleanslate_api.app.schemas.booking import BookingStatus
from cleanslate_api.app.schemas.worker import WorkerStatus
from cleanslate_api.app.services.audit_service import AuditService
from cleanslate_api.app.services.availability_service import AvailabilityService


def test_bare_store_has_only_training_catalog():
    store = init_store(seed=False)

    assert sorted(store.training_modules) == ["train001", "train002", "train003", "train004"]
    assert store.workers == {} and store.bookings == {} and store.customers == {}


def test_demo_seed_is_consistent():
    store = init_store(seed=True)

    statuses = sorted(w.status.value for w in store.workers.values())
    assert statuses == sorted(["Active", "Active", "PendingApproval", "TrainingPending"])
    assert len(store.customers) == 1
    assert {b.status for b in store.bookings.values()} == {
        BookingStatus.CONFIRMED_BY_WORKER,
        BookingStatus.COMPLETED_BY_WORKER,
    }
    for booking in store.bookings.values():
        assert booking.worker_id in store.workers
        assert booking.customer_id in store.customers
        assert store.workers[booking.worker_id].status == WorkerStatus.ACTIVE
    for worker in store.workers.values():
        assert worker.training_verified == (
            worker.status == WorkerStatus.ACTIVE or all(s.completed for s in worker.onboarding_steps)
        )


def test_seeded_unavailable_date_is_honoured():
    store = init_store(seed=True)
    john = next(w for w in store.workers.values() if w.unavailable_dates)
    day = john.unavailable_dates[0]

    start = datetime(day.year, day.month, day.day, 8, tzinfo=timezone.utc)
    assert AvailabilityService(store).is_available(john.id, start, 60) is False


def test_publish_numbers_records_and_survives_failing_listener():
    store = MarketplaceStore()
    received = []

    def broken(record):
        raise RuntimeError("listener down")

    store.subscribe(broken)
    store.subscribe(received.append)
    store.publish(ChangeRecord(actor=None, action="create", object_type="worker", object_id="w1", details={}))
    store.unsubscribe(broken)
    store.publish(ChangeRecord(actor=None, action="status", object_type="worker", object_id="w1", details={}))

    assert [r.id for r in store.changes] == [1, 2]
    assert received == store.changes


def test_audit_log_filters_and_orders_newest_first():
    store = MarketplaceStore()
    audit = AuditService(store)
    audit.log("admin:admin", "create", "worker", "w1")
    audit.log("worker:w1", "availability", "worker", "w1", details={"unavailable_dates": []})
    audit.log("admin:admin", "create", "booking", "b1")

    assert [r["object_id"] for r in audit.list_logs()] == ["b1", "w1", "w1"]
    assert [r["action"] for r in audit.list_logs(object_type="worker")] == ["availability", "create"]
    assert [r["object_id"] for r in audit.list_logs(actor="admin:admin", limit=1)] == ["b1"]
    assert [r["object_id"] for r in audit.list_logs(actor="admin:admin", offset=1)] == ["w1"]


def test_locked_is_reentrant():
    store = MarketplaceStore()

    with store.locked("w1"):
        with store.locked("w1"):
            pass
