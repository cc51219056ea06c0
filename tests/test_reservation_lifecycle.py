"""
Ciclo de reservas: cada transición mueve juntas a la transacción y su habitación
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from models import ActivityLog, Notification, Rate, Room, RoomCleaningLog, Transaction
from models.enums import (
    AcceptanceStatus,
    CleaningStatus,
    NotificationLinkStatus,
    PaymentState,
    RoomAvailability,
    TransactionStatus,
)
from schemas.reservations import BookingDetails
from services.activity_log_service import ActivityLogService
from services.catalog_service import RoomService
from services.reservation_service import (
    NOT_PENDING_MESSAGE,
    ReservationService,
    resolve_reservation_status,
)
from utils.timezone import hotel_now_naive


def booking(rate_id, **overrides):
    data = {"client_name": "Juan Dela Cruz", "selected_rate_id": rate_id}
    data.update(overrides)
    return BookingDetails(**data)


def assert_room_link_consistent(room):
    held = room.is_available in (RoomAvailability.OCCUPIED, RoomAvailability.RESERVED)
    assert (room.transaction_id is not None) == held


def walk_in(db, seed, **overrides):
    ok, msg, data = ReservationService.create_walk_in(
        db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id, **overrides)
    )
    assert ok, msg
    return data["transaction"].id


def admin_reservation(db, seed, **overrides):
    ok, msg, data = ReservationService.create_unassigned_reservation(
        db, seed.tenant_id, seed.branch_id, seed.admin_id, booking(seed.rate_id, **overrides), is_admin_created=True
    )
    assert ok, msg
    return data["transaction"].id


class TestStatusRule:

    def test_advance_flag_wins_over_payment(self):
        assert resolve_reservation_status(True, PaymentState.PAID) == TransactionStatus.ADVANCE_RESERVATION

    def test_paid_without_advance_is_advance_paid(self):
        assert resolve_reservation_status(False, PaymentState.PAID) == TransactionStatus.ADVANCE_PAID

    def test_unpaid_without_advance_is_advance_reservation(self):
        assert resolve_reservation_status(False, PaymentState.UNPAID) == TransactionStatus.ADVANCE_RESERVATION


class TestWalkIn:

    def test_paid_walk_in_occupies_room(self, db, seed):
        tx_id = walk_in(db, seed, is_paid=PaymentState.PAID, tender_amount=Decimal("500"))

        tx = db.get(Transaction, tx_id)
        room = db.get(Room, seed.room_id)
        assert tx.status == TransactionStatus.CHECKED_IN
        assert tx.is_accepted == AcceptanceStatus.ACCEPTED
        assert tx.check_in_time is not None
        assert tx.total_amount == Decimal("300.00")
        assert tx.tender_amount == Decimal("500.00")
        assert room.is_available == RoomAvailability.OCCUPIED
        assert room.transaction_id == tx.id
        assert_room_link_consistent(room)

        audit = db.query(ActivityLog).filter(ActivityLog.target_entity_id == str(tx_id)).all()
        assert [a.action_type for a in audit] == ["STAFF_WALK_IN_CHECK_IN"]
        assert audit[0].username == "frontdesk"

    def test_unpaid_walk_in_has_no_amounts(self, db, seed):
        tx_id = walk_in(db, seed, tender_amount=Decimal("100"))
        tx = db.get(Transaction, tx_id)
        assert tx.is_paid == PaymentState.UNPAID
        assert tx.total_amount is None
        assert tx.tender_amount is None

    def test_dirty_room_is_refused(self, db, seed):
        db.get(Room, seed.room_id).cleaning_status = CleaningStatus.DIRTY
        db.commit()

        ok, msg, data = ReservationService.create_walk_in(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        assert not ok
        assert data is None
        assert msg == "Selected room is not clean (Current status: Dirty). Cannot assign."
        assert db.query(Transaction).count() == 0

    def test_occupied_room_is_refused(self, db, seed):
        walk_in(db, seed)
        ok, msg, _ = ReservationService.create_walk_in(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        assert not ok
        assert msg == "Selected room is not available. Current status: Occupied"
        assert db.query(Transaction).count() == 1

    def test_archived_rate_is_refused(self, db, seed):
        from models.enums import EntityStatus
        db.get(Rate, seed.rate_id).status = EntityStatus.ARCHIVED
        db.commit()

        ok, msg, _ = ReservationService.create_walk_in(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        assert not ok
        assert "rate" in msg.lower()
        room = db.get(Room, seed.room_id)
        assert room.is_available == RoomAvailability.AVAILABLE
        assert room.transaction_id is None

    def test_other_branch_cannot_see_room(self, db, seed):
        ok, msg, _ = ReservationService.create_walk_in(
            db, seed.tenant_id, seed.other_branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        assert not ok
        assert msg == "Room not found or is not active."


class TestRoomReservation:

    def test_reservation_holds_room(self, db, seed):
        ok, msg, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        assert ok, msg
        tx, room = data["transaction"], data["room"]
        assert tx.status == TransactionStatus.RESERVATION_WITH_ROOM
        assert tx.check_in_time is None
        assert room.is_available == RoomAvailability.RESERVED
        assert room.transaction_id == tx.id

    def test_reserved_datetimes_only_kept_for_advance(self, db, seed):
        start = datetime(2030, 1, 10, 14, 0)
        details = booking(
            seed.rate_id,
            reserved_check_in_datetime=start,
            reserved_check_out_datetime=start + timedelta(hours=3),
        )
        ok, _, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, details
        )
        assert ok
        assert data["transaction"].reserved_check_in_datetime is None

    def test_cancel_restores_room(self, db, seed):
        _, _, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id

        ok, msg, data = ReservationService.cancel_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id)
        assert ok, msg
        tx = db.get(Transaction, tx_id)
        room = db.get(Room, seed.room_id)
        assert tx.status == TransactionStatus.VOIDED_CANCELLED
        assert room.is_available == RoomAvailability.AVAILABLE
        assert room.transaction_id is None

    def test_check_in_reserved_guest(self, db, seed):
        _, _, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id

        ok, msg, data = ReservationService.check_in_reserved_guest(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id
        )
        assert ok, msg
        assert data["transaction"].status == TransactionStatus.CHECKED_IN
        assert data["transaction"].check_in_time is not None
        assert data["room"].is_available == RoomAvailability.OCCUPIED
        assert data["room"].transaction_id == tx_id

    def test_check_in_reserved_guest_uses_reserved_time(self, db, seed):
        start = datetime(2030, 2, 14, 18, 30)
        details = booking(
            seed.rate_id,
            is_advance_reservation=True,
            reserved_check_in_datetime=start,
            reserved_check_out_datetime=start + timedelta(hours=3),
        )
        _, _, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, details
        )

        ok, msg, data = ReservationService.check_in_reserved_guest(
            db, seed.tenant_id, seed.branch_id, data["transaction"].id, seed.room_id, seed.staff_id
        )
        assert ok, msg
        assert data["transaction"].check_in_time == start

    def test_check_in_reserved_guest_wrong_room(self, db, seed):
        _, _, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        ok, msg, _ = ReservationService.check_in_reserved_guest(
            db, seed.tenant_id, seed.branch_id, data["transaction"].id, seed.room_b_id, seed.staff_id
        )
        assert not ok
        assert msg == "Reservation not found or not in a state that can be checked in."

    def test_update_reserved_details_keeps_status(self, db, seed):
        _, _, data = ReservationService.create_room_reservation(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id

        ok, msg, data = ReservationService.update_reserved_transaction_details(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id,
            booking(seed.hourly_rate_id, client_name="Maria Clara", is_paid=PaymentState.PAID),
        )
        assert ok, msg
        tx = data["transaction"]
        assert tx.status == TransactionStatus.RESERVATION_WITH_ROOM
        assert tx.client_name == "Maria Clara"
        assert tx.hotel_rate_id == seed.hourly_rate_id
        assert tx.is_paid == PaymentState.PAID


class TestBranchAcceptance:

    def test_admin_reservation_waits_for_branch(self, db, seed):
        tx_id = admin_reservation(db, seed)
        tx = db.get(Transaction, tx_id)
        assert tx.status == TransactionStatus.PENDING_BRANCH_ACCEPTANCE
        assert tx.is_accepted == AcceptanceStatus.PENDING
        assert tx.is_admin_created is True
        assert tx.hotel_room_id is None

        notification = db.query(Notification).filter(Notification.transaction_id == tx_id).one()
        assert notification.target_branch_id == seed.branch_id
        assert notification.transaction_link_status == NotificationLinkStatus.TRANSACTION_LINKED

    def test_accept_paid_reservation(self, db, seed):
        tx_id = admin_reservation(db, seed)
        ok, msg, data = ReservationService.accept_reservation(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id,
            booking(seed.rate_id, is_paid=PaymentState.PAID, tender_amount=Decimal("300")),
        )
        assert ok, msg
        tx = data["transaction"]
        assert tx.status == TransactionStatus.ADVANCE_PAID
        assert tx.is_accepted == AcceptanceStatus.ACCEPTED
        assert tx.accepted_by_user_id == seed.staff_id
        assert tx.tender_amount == Decimal("300.00")

    def test_accept_twice_fails(self, db, seed):
        tx_id = admin_reservation(db, seed)
        ReservationService.accept_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id, booking(seed.rate_id))
        ok, msg, _ = ReservationService.accept_reservation(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id, booking(seed.rate_id)
        )
        assert not ok
        assert msg == NOT_PENDING_MESSAGE

    def test_decline_voids_without_touching_rooms(self, db, seed):
        tx_id = admin_reservation(db, seed)
        ok, msg, data = ReservationService.decline_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id)
        assert ok, msg
        tx = data["transaction"]
        assert tx.status == TransactionStatus.VOIDED_CANCELLED
        assert tx.is_accepted == AcceptanceStatus.NOT_ACCEPTED
        assert tx.declined_by_user_id == seed.staff_id
        assert tx.hotel_room_id is None
        for room in db.query(Room).all():
            assert room.is_available == RoomAvailability.AVAILABLE
            assert room.transaction_id is None

    def test_decline_non_pending_fails(self, db, seed):
        tx_id = walk_in(db, seed)
        ok, msg, _ = ReservationService.decline_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id)
        assert not ok
        assert msg == NOT_PENDING_MESSAGE
        assert db.get(Transaction, tx_id).status == TransactionStatus.CHECKED_IN

    def test_pending_reservation_cannot_be_assigned_before_acceptance(self, db, seed):
        tx_id = admin_reservation(db, seed)
        ok, msg, _ = ReservationService.assign_room_and_check_in(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id
        )
        assert not ok
        assert "not in a valid state for assignment" in msg
        assert db.get(Room, seed.room_id).transaction_id is None


class TestUnassignedReservation:

    def test_staff_advance_reservation(self, db, seed):
        start = datetime(2030, 5, 1, 20, 0)
        details = booking(
            seed.rate_id,
            is_advance_reservation=True,
            is_paid=PaymentState.PAID,
            reserved_check_in_datetime=start,
            reserved_check_out_datetime=start + timedelta(hours=3),
        )
        ok, msg, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, details
        )
        assert ok, msg
        tx = data["transaction"]
        assert tx.status == TransactionStatus.ADVANCE_RESERVATION
        assert tx.is_accepted == AcceptanceStatus.ACCEPTED
        assert tx.reserved_check_in_datetime == start
        assert db.query(Notification).count() == 0

    def test_update_recomputes_status(self, db, seed):
        _, _, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id
        assert data["transaction"].status == TransactionStatus.ADVANCE_RESERVATION

        ok, msg, data = ReservationService.update_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id,
            booking(seed.rate_id, is_paid=PaymentState.PAID),
        )
        assert ok, msg
        assert data["transaction"].status == TransactionStatus.ADVANCE_PAID

    def test_listed_until_assigned(self, db, seed):
        _, _, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, booking(seed.rate_id, is_paid=PaymentState.PAID)
        )
        tx_id = data["transaction"].id
        listed = ReservationService.list_unassigned_reservations(db, seed.tenant_id, seed.branch_id)
        assert [t.id for t in listed] == [tx_id]

        ok, msg, data = ReservationService.assign_room_and_check_in(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id
        )
        assert ok, msg
        assert data["transaction"].status == TransactionStatus.CHECKED_IN
        assert data["transaction"].total_amount == Decimal("300.00")
        assert data["room"].is_available == RoomAvailability.OCCUPIED
        assert data["room"].transaction_id == tx_id
        assert ReservationService.list_unassigned_reservations(db, seed.tenant_id, seed.branch_id) == []

        active = ReservationService.get_active_transaction_for_room(db, seed.tenant_id, seed.branch_id, seed.room_id)
        assert active.id == tx_id

    def test_assign_refuses_dirty_room(self, db, seed):
        _, _, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id
        db.get(Room, seed.room_id).cleaning_status = CleaningStatus.DIRTY
        db.commit()

        ok, msg, data = ReservationService.assign_room_and_check_in(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id
        )
        assert not ok
        assert data is None
        assert msg == "Selected room is not clean (Current status: Dirty). Cannot assign."
        tx = db.get(Transaction, tx_id)
        assert tx.hotel_room_id is None
        assert tx.status == TransactionStatus.ADVANCE_RESERVATION
        assert db.get(Room, seed.room_id).transaction_id is None

    def test_assign_refuses_occupied_room(self, db, seed):
        occupant_id = walk_in(db, seed)
        _, _, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id

        ok, msg, _ = ReservationService.assign_room_and_check_in(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id
        )
        assert not ok
        assert msg == "Selected room is not available. Current status: Occupied"
        assert db.get(Transaction, tx_id).hotel_room_id is None
        assert db.get(Room, seed.room_id).transaction_id == occupant_id

    def test_assign_uses_reserved_check_in_time(self, db, seed):
        start = datetime(2030, 5, 1, 20, 0)
        details = booking(
            seed.rate_id,
            is_advance_reservation=True,
            reserved_check_in_datetime=start,
            reserved_check_out_datetime=start + timedelta(hours=3),
        )
        _, _, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, details
        )

        ok, msg, data = ReservationService.assign_room_and_check_in(
            db, seed.tenant_id, seed.branch_id, data["transaction"].id, seed.room_id, seed.staff_id
        )
        assert ok, msg
        assert data["transaction"].check_in_time == start

    def test_checked_in_reservation_cannot_be_cancelled(self, db, seed):
        _, _, data = ReservationService.create_unassigned_reservation(
            db, seed.tenant_id, seed.branch_id, seed.staff_id, booking(seed.rate_id)
        )
        tx_id = data["transaction"].id
        ReservationService.assign_room_and_check_in(db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id)

        ok, msg, _ = ReservationService.cancel_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id)
        assert not ok
        assert msg == "Cannot cancel transaction in status: Checked-In."
        tx = db.get(Transaction, tx_id)
        room = db.get(Room, seed.room_id)
        assert tx.status == TransactionStatus.CHECKED_IN
        assert room.is_available == RoomAvailability.OCCUPIED
        assert room.transaction_id == tx_id


class TestCheckout:

    @pytest.fixture
    def one_hour_rate_id(self, db, seed):
        rate = Rate(
            tenant_id=seed.tenant_id, branch_id=seed.branch_id, name="1 Hour",
            price=Decimal("500.00"), hours=1, excess_hour_price=Decimal("200.00"),
        )
        db.add(rate)
        db.commit()
        return rate.id

    def checked_in_for_90_minutes(self, db, seed, rate_id):
        ok, msg, data = ReservationService.create_walk_in(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(rate_id)
        )
        assert ok, msg
        tx = data["transaction"]
        tx.check_in_time = hotel_now_naive() - timedelta(minutes=90)
        db.commit()
        return tx.id

    def test_checkout_bills_and_frees_room(self, db, seed, one_hour_rate_id):
        tx_id = self.checked_in_for_90_minutes(db, seed, one_hour_rate_id)

        ok, msg, data = ReservationService.check_out(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("1000"), "cash"
        )
        assert ok, msg
        tx, room = data["transaction"], data["room"]
        assert tx.status == TransactionStatus.CHECKED_OUT
        assert tx.hours_used == 2
        assert tx.total_amount == Decimal("700.00")
        assert tx.tender_amount == Decimal("1000.00")
        assert tx.is_paid == PaymentState.PAID
        assert tx.client_payment_method == "cash"
        assert tx.check_out_by_user_id == seed.staff_id
        assert tx.check_out_time is not None

        assert room.is_available == RoomAvailability.AVAILABLE
        assert room.transaction_id is None
        assert room.cleaning_status == CleaningStatus.INSPECTION
        expected_note = f"Room set to 'Needs Inspection' after checkout by user ID {seed.staff_id}."
        assert room.cleaning_notes == expected_note

        log = db.query(RoomCleaningLog).filter(RoomCleaningLog.room_id == seed.room_id).one()
        assert log.status == CleaningStatus.INSPECTION
        assert log.notes == expected_note

    def test_second_checkout_fails_without_recharging(self, db, seed, one_hour_rate_id):
        tx_id = self.checked_in_for_90_minutes(db, seed, one_hour_rate_id)
        ReservationService.check_out(db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("700"))

        ok, msg, data = ReservationService.check_out(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("5000")
        )
        assert not ok
        assert data is None
        assert "Checked-Out" in msg
        tx = db.get(Transaction, tx_id)
        assert tx.total_amount == Decimal("700.00")
        assert tx.tender_amount == Decimal("700.00")
        assert db.query(RoomCleaningLog).count() == 1

    def test_checked_out_transaction_cannot_be_cancelled(self, db, seed, one_hour_rate_id):
        tx_id = self.checked_in_for_90_minutes(db, seed, one_hour_rate_id)
        ReservationService.check_out(db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("700"))

        ok, msg, _ = ReservationService.cancel_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id)
        assert not ok
        assert msg == "Cannot cancel transaction in status: Checked-Out."
        assert db.get(Transaction, tx_id).status == TransactionStatus.CHECKED_OUT

    def test_notes_stay_editable_after_checkout(self, db, seed, one_hour_rate_id):
        tx_id = self.checked_in_for_90_minutes(db, seed, one_hour_rate_id)
        ReservationService.check_out(db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("700"))

        ok, msg, data = ReservationService.update_transaction_notes(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id, "Left an umbrella"
        )
        assert ok, msg
        assert data["transaction"].notes == "Left an umbrella"
        assert data["transaction"].status == TransactionStatus.CHECKED_OUT

    def test_cancel_after_room_archived_reports_status(self, db, seed, one_hour_rate_id):
        tx_id = self.checked_in_for_90_minutes(db, seed, one_hour_rate_id)
        ReservationService.check_out(db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("700"))
        ok, msg, _ = RoomService.archive_room(db, seed.tenant_id, seed.branch_id, seed.room_id, seed.admin_id)
        assert ok, msg

        ok, msg, _ = ReservationService.cancel_reservation(db, seed.tenant_id, seed.branch_id, tx_id, seed.staff_id)
        assert not ok
        assert msg == "Cannot cancel transaction in status: Checked-Out."

    def test_checkout_ignores_rates_from_other_branches(self, db, seed):
        tx_id = walk_in(db, seed)
        foreign = Rate(
            tenant_id=seed.tenant_id, branch_id=seed.other_branch_id, name="Annex Special",
            price=Decimal("50.00"), hours=3, excess_hour_price=Decimal("10.00"),
        )
        db.add(foreign)
        db.flush()
        db.get(Transaction, tx_id).hotel_rate_id = foreign.id
        db.commit()

        ok, msg, _ = ReservationService.check_out(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("50")
        )
        assert not ok
        assert msg == "Rate for this transaction not found. Cannot compute the bill."
        assert db.get(Transaction, tx_id).status == TransactionStatus.CHECKED_IN
        assert db.get(Room, seed.room_id).is_available == RoomAvailability.OCCUPIED


def unavailable_activity_log(db, **kwargs):
    raise RuntimeError("activity log unavailable")


class TestAuditFailure:

    def test_walk_in_is_rolled_back(self, db, seed, monkeypatch):
        monkeypatch.setattr(ActivityLogService, "record", staticmethod(unavailable_activity_log))
        ok, msg, data = ReservationService.create_walk_in(
            db, seed.tenant_id, seed.branch_id, seed.room_id, seed.staff_id, booking(seed.rate_id)
        )
        assert not ok
        assert data is None
        assert msg.startswith("Database error during")
        assert "activity log unavailable" in msg
        assert db.query(Transaction).count() == 0
        room = db.get(Room, seed.room_id)
        assert room.is_available == RoomAvailability.AVAILABLE
        assert room.transaction_id is None

    def test_checkout_is_rolled_back(self, db, seed, monkeypatch):
        tx_id = walk_in(db, seed)
        monkeypatch.setattr(ActivityLogService, "record", staticmethod(unavailable_activity_log))

        ok, msg, _ = ReservationService.check_out(
            db, seed.tenant_id, seed.branch_id, tx_id, seed.room_id, seed.staff_id, Decimal("300")
        )
        assert not ok
        assert msg.startswith("Database error during")
        tx = db.get(Transaction, tx_id)
        assert tx.status == TransactionStatus.CHECKED_IN
        assert tx.check_out_time is None
        assert tx.tender_amount is None
        room = db.get(Room, seed.room_id)
        assert room.is_available == RoomAvailability.OCCUPIED
        assert room.transaction_id == tx_id
        assert room.cleaning_status == CleaningStatus.CLEAN
        assert db.query(RoomCleaningLog).count() == 0
