"""Tests for booking admission, admin status changes and time-off blocks."""

import json
import threading
from datetime import timedelta
from types import SimpleNamespace

import pytest

from bookbar.errors import ConflictError, NotFoundError, ValidationError
from bookbar.models import Bookings
from bookbar.services.admission import (
    admit_booking,
    delete_booking,
    list_bookings,
    set_booking_status,
)
from bookbar.services.business import BusinessConfig
from bookbar.services.time_off import create_block, delete_block, list_blocks

from tests.conftest import NOW, TOMORROW, booking_payload, make_block, make_booking, make_service


def _request(service_id, **overrides):
    return SimpleNamespace(**booking_payload(service_id, **overrides))


def _queued(events):
    return [json.loads(raw)["type"] for raw in events.redis.lrange(events.queue, 0, -1)]


class TestAdmitBooking:

    def test_creates_pending_booking_and_emits_event(self, db, events, business):
        service = make_service(db)
        booking = admit_booking(db, _request(service.id), business, events=events, now=NOW)

        assert booking.status == "pending_deposit"
        assert booking.service_price == 30.0
        assert booking.deposit_amount == 10.0
        assert booking.created_at == NOW
        assert _queued(events) == ["booking_created"]

    def test_price_snapshot_survives_price_change(self, db, business):
        service = make_service(db)
        booking = admit_booking(db, _request(service.id), business, now=NOW)

        service.price = 55.0
        db.commit()
        db.refresh(booking)
        assert booking.service_price == 30.0

    def test_today_is_rejected(self, db, business):
        service = make_service(db)
        with pytest.raises(ValidationError, match="tomorrow or later"):
            admit_booking(db, _request(service.id, date=NOW.date().isoformat()), business, now=NOW)

    def test_deposit_above_price_rejected(self, db, business):
        service = make_service(db, price=20.0)
        with pytest.raises(ValidationError, match="exceed"):
            admit_booking(db, _request(service.id, deposit_amount=25.0), business, now=NOW)

    def test_negative_deposit_rejected(self, db, business):
        service = make_service(db)
        with pytest.raises(ValidationError):
            admit_booking(db, _request(service.id, deposit_amount=-1), business, now=NOW)

    def test_unknown_service(self, db, business):
        with pytest.raises(NotFoundError):
            admit_booking(db, _request(999), business, now=NOW)

    def test_inactive_service(self, db, business):
        service = make_service(db, active=False)
        with pytest.raises(ValidationError):
            admit_booking(db, _request(service.id), business, now=NOW)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"customer_email": "", "customer_phone": ""},
            {"notify_by_email": False, "notify_by_sms": False},
            {"notify_by_sms": True, "customer_phone": ""},
            {"notify_by_email": True, "customer_email": "", "customer_phone": "07123456789"},
            {"start_time": "9:00"},
            {"start_time": "11:00", "end_time": "10:00"},
            {"date": "2025-02-30"},
            {"customer_name": "x" * 201},
            {"customer_name": "   "},
        ],
    )
    def test_invalid_requests(self, db, business, overrides):
        service = make_service(db)
        with pytest.raises(ValidationError):
            admit_booking(db, _request(service.id, **overrides), business, now=NOW)
        assert db.query(Bookings).count() == 0

    def test_overlapping_booking_conflicts(self, db, events, business):
        service = make_service(db)
        admit_booking(db, _request(service.id), business, now=NOW)

        with pytest.raises(ConflictError) as exc:
            admit_booking(
                db, _request(service.id, start_time="10:30", end_time="11:30"),
                business, events=events, now=NOW,
            )
        assert exc.value.status_code == 409
        assert db.query(Bookings).count() == 1
        assert _queued(events) == []

    def test_adjacent_booking_allowed(self, db, business):
        service = make_service(db)
        admit_booking(db, _request(service.id), business, now=NOW)
        admit_booking(db, _request(service.id, start_time="11:00", end_time="12:00"), business, now=NOW)
        assert db.query(Bookings).count() == 2

    def test_cancelled_booking_frees_the_slot(self, db, business):
        service = make_service(db)
        make_booking(db, service, status="cancelled")
        booking = admit_booking(db, _request(service.id), business, now=NOW)
        assert booking.status == "pending_deposit"

    def test_time_off_conflicts(self, db, business):
        service = make_service(db)
        make_block(db, TOMORROW, "10:30", TOMORROW, "12:00")
        with pytest.raises(ConflictError):
            admit_booking(db, _request(service.id), business, now=NOW)

    @pytest.mark.parametrize("second_start,second_end", [("10:00", "11:00"), ("10:30", "11:30")])
    def test_concurrent_requests_admit_exactly_one(
        self, session_factory, business, second_start, second_end,
    ):
        setup = session_factory()
        service_id = make_service(setup).id
        setup.close()

        requests = [
            _request(service_id),
            _request(service_id, start_time=second_start, end_time=second_end),
        ]
        barrier = threading.Barrier(len(requests))
        outcomes: list[str] = []
        lock = threading.Lock()

        def attempt(request):
            session = session_factory()
            try:
                barrier.wait()
                admit_booking(session, request, business, now=NOW)
                result = "ok"
            except ConflictError:
                result = "conflict"
            finally:
                session.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt, args=(r,)) for r in requests]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert sorted(outcomes) == ["conflict", "ok"]
        check = session_factory()
        assert check.query(Bookings).filter(Bookings.status != "cancelled").count() == 1
        check.close()


class TestBookingStatus:

    def test_admin_confirm_emits_event(self, db, events):
        service = make_service(db)
        booking = make_booking(db, service)

        updated = set_booking_status(db, booking.id, "confirmed", events=events, now=NOW)
        assert updated.status == "confirmed"
        assert _queued(events) == ["booking_confirmed"]

    def test_same_status_is_noop(self, db, events):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed")

        set_booking_status(db, booking.id, "confirmed", events=events, now=NOW)
        assert _queued(events) == []

    def test_cancelled_is_terminal(self, db):
        service = make_service(db)
        booking = make_booking(db, service, status="cancelled")
        with pytest.raises(ValidationError):
            set_booking_status(db, booking.id, "confirmed")

    def test_confirmed_cannot_go_back_to_pending(self, db):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed")
        with pytest.raises(ValidationError):
            set_booking_status(db, booking.id, "pending_deposit")

    def test_unknown_status(self, db):
        service = make_service(db)
        booking = make_booking(db, service)
        with pytest.raises(ValidationError):
            set_booking_status(db, booking.id, "done")

    def test_delete_only_cancelled(self, db):
        service = make_service(db)
        live = make_booking(db, service)
        with pytest.raises(ValidationError):
            delete_booking(db, live.id)

        cancelled = make_booking(db, service, start_time="12:00", end_time="13:00", status="cancelled")
        delete_booking(db, cancelled.id)
        assert db.get(Bookings, cancelled.id) is None

    def test_list_filters(self, db):
        service = make_service(db)
        make_booking(db, service)
        later = (NOW + timedelta(days=5)).date().isoformat()
        make_booking(db, service, date=later, status="confirmed")

        assert len(list_bookings(db)) == 2
        assert len(list_bookings(db, date_from=later)) == 1
        assert [b.status for b in list_bookings(db, status="confirmed")] == ["confirmed"]
        with pytest.raises(ValidationError):
            list_bookings(db, status="bogus")


class TestTimeOff:

    def test_create_and_list(self, db):
        block = create_block(db, TOMORROW, "09:00", TOMORROW, "12:00", now=NOW)
        assert block.id
        assert [b.id for b in list_blocks(db, date_from=TOMORROW, date_to=TOMORROW)] == [block.id]

    def test_block_over_live_booking_conflicts(self, db):
        service = make_service(db)
        make_booking(db, service)
        with pytest.raises(ConflictError) as exc:
            create_block(db, TOMORROW, "10:30", TOMORROW, "11:30", now=NOW)
        assert exc.value.code == "time_off_conflict"

    def test_multi_day_block_conflicts_with_middle_day_booking(self, db):
        service = make_service(db)
        middle = (NOW + timedelta(days=2)).date().isoformat()
        last = (NOW + timedelta(days=3)).date().isoformat()
        make_booking(db, service, date=middle, start_time="15:00", end_time="16:00")
        with pytest.raises(ConflictError):
            create_block(db, TOMORROW, "12:00", last, "09:00", now=NOW)

    def test_block_over_cancelled_booking_allowed(self, db):
        service = make_service(db)
        make_booking(db, service, status="cancelled")
        assert create_block(db, TOMORROW, "09:00", TOMORROW, "17:00", now=NOW).id

    def test_end_before_start_rejected(self, db):
        with pytest.raises(ValidationError):
            create_block(db, TOMORROW, "12:00", TOMORROW, "12:00", now=NOW)

    def test_delete(self, db):
        block = create_block(db, TOMORROW, "09:00", TOMORROW, "10:00", now=NOW)
        delete_block(db, block.id)
        assert list_blocks(db) == []
        with pytest.raises(NotFoundError):
            delete_block(db, block.id)

    def test_block_hides_slots_from_admission(self, db):
        service = make_service(db)
        create_block(db, TOMORROW, "09:00", TOMORROW, "17:00", now=NOW)
        with pytest.raises(ConflictError):
            admit_booking(db, _request(service.id), BusinessConfig(), now=NOW)
