from datetime import datetime, timedelta, timezone

from cleanslate_api.app.schemas.booking import BookingStatus
from cleanslate_api.app.services.availability_service import AvailabilityService, as_utc, intervals_overlap

from conftest import MONDAY_9AM, add_booking, make_worker


def test_intervals_overlap_is_half_open():
    nine, ten, eleven = (MONDAY_9AM + timedelta(hours=h) for h in range(3))
    assert intervals_overlap(nine, eleven, ten, eleven)
    assert not intervals_overlap(nine, ten, ten, eleven)
    assert not intervals_overlap(ten, eleven, nine, ten)


def test_worker_without_bookings_is_available(store, worker):
    assert AvailabilityService(store).is_available(worker.id, MONDAY_9AM, 120)


def test_unknown_worker_is_unavailable(store):
    assert AvailabilityService(store).is_available("nobody", MONDAY_9AM, 60) is False


def test_overlapping_booking_blocks_the_window(store, worker, customer):
    add_booking(store, worker, customer, MONDAY_9AM, status=BookingStatus.CONFIRMED_BY_WORKER, duration=120)
    service = AvailabilityService(store)

    # Booked 09:00-11:00.
    assert not service.is_available(worker.id, MONDAY_9AM + timedelta(hours=1), 30)
    assert not service.is_available(worker.id, MONDAY_9AM - timedelta(minutes=30), 60)
    assert not service.is_available(worker.id, MONDAY_9AM - timedelta(hours=1), 240)


def test_back_to_back_bookings_are_allowed(store, worker, customer):
    add_booking(store, worker, customer, MONDAY_9AM, status=BookingStatus.CONFIRMED_BY_WORKER, duration=120)
    service = AvailabilityService(store)

    assert service.is_available(worker.id, MONDAY_9AM + timedelta(hours=2), 60)
    assert service.is_available(worker.id, MONDAY_9AM - timedelta(hours=2), 120)


def test_cancelled_bookings_do_not_block(store, worker, customer):
    for status in (BookingStatus.CANCELLED_BY_CUSTOMER, BookingStatus.CANCELLED_BY_WORKER,
                   BookingStatus.CANCELLED_BY_ADMIN):
        add_booking(store, worker, customer, MONDAY_9AM, status=status, duration=120)

    assert AvailabilityService(store).is_available(worker.id, MONDAY_9AM, 60)


def test_completed_bookings_still_occupy_their_window(store, worker, customer):
    add_booking(store, worker, customer, MONDAY_9AM, status=BookingStatus.COMPLETED_BY_WORKER, duration=60)

    assert not AvailabilityService(store).is_available(worker.id, MONDAY_9AM, 60)


def test_bookings_of_other_workers_are_ignored(store, worker, customer):
    other = make_worker(store, full_name="Lerato Khumalo")
    add_booking(store, other, customer, MONDAY_9AM, status=BookingStatus.CONFIRMED_BY_WORKER, duration=120)

    assert AvailabilityService(store).is_available(worker.id, MONDAY_9AM, 120)


def test_unavailable_date_blocks_the_whole_day(store, worker):
    worker.unavailable_dates = [MONDAY_9AM.date()]
    service = AvailabilityService(store)

    assert not service.is_available(worker.id, MONDAY_9AM.replace(hour=15), 30)
    assert service.is_available(worker.id, MONDAY_9AM + timedelta(days=1), 30)


def test_naive_start_is_treated_as_utc(store, worker, customer):
    add_booking(store, worker, customer, MONDAY_9AM, status=BookingStatus.CONFIRMED_BY_WORKER, duration=60)

    naive = datetime(2030, 3, 4, 9, 30)
    assert not AvailabilityService(store).is_available(worker.id, naive, 30)
    assert as_utc(naive) == MONDAY_9AM + timedelta(minutes=30)


def test_other_timezones_are_compared_as_instants(store, worker, customer):
    add_booking(store, worker, customer, MONDAY_9AM, status=BookingStatus.CONFIRMED_BY_WORKER, duration=60)
    johannesburg = timezone(timedelta(hours=2))

    # 11:00 SAST is 09:00 UTC.
    assert not AvailabilityService(store).is_available(
        worker.id, datetime(2030, 3, 4, 11, 0, tzinfo=johannesburg), 30
    )


def test_exclude_booking_id_ignores_that_booking(store, worker, customer):
    booking = add_booking(store, worker, customer, MONDAY_9AM, status=BookingStatus.CONFIRMED_BY_WORKER)
    service = AvailabilityService(store)

    assert service.conflicting_bookings(worker.id, MONDAY_9AM, 60) == [booking]
    assert service.is_available(worker.id, MONDAY_9AM, 60, exclude_booking_id=booking.id)
