import pytest
from pydantic import ValidationError

from models import Ticket, User
from models.enums import LostAndFoundStatus, NotificationStatus, TicketPriority, TicketStatus
from schemas.support import (
    LostAndFoundCreate,
    LostAndFoundStatusUpdate,
    NotificationCreate,
    TicketCreate,
    TicketUpdate,
)
from services.notification_service import LostAndFoundService, NotificationService
from services.ticket_service import TicketService


class TestNotifications:

    def test_branch_sees_targeted_and_broadcast(self, db, seed):
        NotificationService.create_notification(db, seed.tenant_id, seed.admin_id, NotificationCreate(message="All hands"))
        NotificationService.create_notification(
            db, seed.tenant_id, seed.admin_id, NotificationCreate(message="Main only", target_branch_id=seed.branch_id)
        )
        NotificationService.create_notification(
            db, seed.tenant_id, seed.admin_id, NotificationCreate(message="Annex only", target_branch_id=seed.other_branch_id)
        )

        main = {n.message for n in NotificationService.list_for_branch(db, seed.tenant_id, seed.branch_id)}
        assert main == {"All hands", "Main only"}
        assert len(NotificationService.list_for_tenant(db, seed.tenant_id)) == 3

    def test_unknown_target_branch(self, db, seed):
        ok, msg, _ = NotificationService.create_notification(
            db, seed.tenant_id, seed.admin_id, NotificationCreate(message="Hi", target_branch_id=9999)
        )
        assert not ok
        assert msg == "Target branch not found or not active."

    def test_mark_as_read(self, db, seed):
        _, _, notification = NotificationService.create_notification(
            db, seed.tenant_id, seed.admin_id, NotificationCreate(message="Read me")
        )
        ok, msg, updated = NotificationService.mark_as_read(
            db, seed.tenant_id, seed.branch_id, notification.id, seed.staff_id
        )
        assert ok, msg
        assert updated.status == NotificationStatus.READ
        assert updated.read_at is not None
        assert NotificationService.list_for_branch(db, seed.tenant_id, seed.branch_id, unread_only=True) == []

    def test_other_branch_cannot_read_targeted_notification(self, db, seed):
        _, _, notification = NotificationService.create_notification(
            db, seed.tenant_id, seed.admin_id, NotificationCreate(message="Main only", target_branch_id=seed.branch_id)
        )
        ok, msg, _ = NotificationService.mark_as_read(
            db, seed.tenant_id, seed.other_branch_id, notification.id, seed.staff_id
        )
        assert not ok
        assert msg == "Notification not found."

    def test_delete(self, db, seed):
        _, _, notification = NotificationService.create_notification(
            db, seed.tenant_id, seed.admin_id, NotificationCreate(message="Oops")
        )
        ok, msg = NotificationService.delete_notification(db, seed.tenant_id, notification.id, seed.admin_id)
        assert ok, msg
        assert NotificationService.list_for_tenant(db, seed.tenant_id) == []


class TestLostAndFound:

    def test_item_lifecycle(self, db, seed):
        ok, msg, item = LostAndFoundService.add_item(
            db, seed.tenant_id, seed.branch_id, seed.housekeeper_id,
            LostAndFoundCreate(item_name="Wallet", found_location="Room 101"),
        )
        assert ok, msg
        assert item.status == LostAndFoundStatus.FOUND
        assert item.reported_by_user_id == seed.housekeeper_id

        ok, msg, item = LostAndFoundService.update_status(
            db, seed.tenant_id, seed.branch_id, item.id, seed.staff_id,
            LostAndFoundStatusUpdate(status=LostAndFoundStatus.CLAIMED, claimed_by_details="Guest, ID 1234"),
        )
        assert ok, msg
        assert item.status == LostAndFoundStatus.CLAIMED
        assert item.claimed_at is not None
        assert item.claimed_by_details == "Guest, ID 1234"

        assert LostAndFoundService.list_for_branch(db, seed.tenant_id, seed.branch_id, LostAndFoundStatus.FOUND) == []
        assert len(LostAndFoundService.list_for_tenant(db, seed.tenant_id)) == 1

    def test_claim_requires_claimant(self):
        with pytest.raises(ValidationError):
            LostAndFoundStatusUpdate(status=LostAndFoundStatus.CLAIMED)

    def test_dispose_records_details(self, db, seed):
        _, _, item = LostAndFoundService.add_item(
            db, seed.tenant_id, seed.branch_id, seed.housekeeper_id, LostAndFoundCreate(item_name="Old newspaper")
        )
        ok, _, item = LostAndFoundService.update_status(
            db, seed.tenant_id, seed.branch_id, item.id, seed.staff_id,
            LostAndFoundStatusUpdate(status=LostAndFoundStatus.DISPOSED, disposed_details="Recycled"),
        )
        assert ok
        assert item.disposed_details == "Recycled"
        assert item.claimed_at is None

    def test_other_branch_item_not_found(self, db, seed):
        _, _, item = LostAndFoundService.add_item(
            db, seed.tenant_id, seed.branch_id, seed.housekeeper_id, LostAndFoundCreate(item_name="Keys")
        )
        ok, msg, _ = LostAndFoundService.update_status(
            db, seed.tenant_id, seed.other_branch_id, item.id, seed.staff_id,
            LostAndFoundStatusUpdate(status=LostAndFoundStatus.DISPOSED, disposed_details="x"),
        )
        assert not ok
        assert msg == "Item not found."


class TestTickets:

    def test_codes_follow_sequence(self, db, seed):
        staff = db.get(User, seed.staff_id)
        _, _, first = TicketService.create_ticket(db, staff, TicketCreate(subject="Printer", description="Jammed"))
        _, _, second = TicketService.create_ticket(db, staff, TicketCreate(subject="WiFi", description="Down"))
        assert first.ticket_code == "TASK-AAA000000"
        assert second.ticket_code == "TASK-AAA000001"
        assert first.author == "Frontdesk Tester"
        assert first.tenant_id == seed.tenant_id

    def test_code_continues_after_highest(self, db, seed):
        db.add(Ticket(ticket_code="TASK-AAA999999", subject="old", description="old", comments=[]))
        db.commit()
        staff = db.get(User, seed.staff_id)
        _, _, ticket = TicketService.create_ticket(db, staff, TicketCreate(subject="New", description="New"))
        assert ticket.ticket_code == "TASK-AAB000000"

    def test_comments_and_update(self, db, seed):
        staff = db.get(User, seed.staff_id)
        sysad = db.get(User, seed.sysad_id)
        _, _, ticket = TicketService.create_ticket(
            db, staff, TicketCreate(subject="Billing", description="Wrong total", priority=TicketPriority.HIGH)
        )

        ok, msg, ticket = TicketService.add_ticket_comment(db, ticket.id, sysad, "Looking into it")
        assert ok, msg
        assert [c["body"] for c in ticket.comments] == ["Looking into it"]

        ok, msg, ticket = TicketService.update_ticket(
            db, ticket.id, sysad, TicketUpdate(status=TicketStatus.IN_PROGRESS, assigned_agent_id=seed.sysad_id)
        )
        assert ok, msg
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.assigned_agent_id == seed.sysad_id

    def test_agent_must_be_sysad(self, db, seed):
        staff = db.get(User, seed.staff_id)
        _, _, ticket = TicketService.create_ticket(db, staff, TicketCreate(subject="X", description="Y"))
        ok, msg, _ = TicketService.update_ticket(db, ticket.id, staff, TicketUpdate(assigned_agent_id=seed.staff_id))
        assert not ok
        assert msg == "Assigned agent must be a system administrator."

    def test_closed_ticket_rejects_comments(self, db, seed):
        staff = db.get(User, seed.staff_id)
        _, _, ticket = TicketService.create_ticket(db, staff, TicketCreate(subject="X", description="Y"))
        TicketService.update_ticket(db, ticket.id, staff, TicketUpdate(status=TicketStatus.CLOSED))
        ok, msg, _ = TicketService.add_ticket_comment(db, ticket.id, staff, "one more thing")
        assert not ok
        assert msg == "Cannot comment on a closed ticket."

    def test_tenant_scope(self, db, seed):
        staff = db.get(User, seed.staff_id)
        _, _, ticket = TicketService.create_ticket(db, staff, TicketCreate(subject="X", description="Y"))
        assert TicketService.get_ticket(db, ticket.id, tenant_id=seed.tenant_id + 100) is None
        assert [t.id for t in TicketService.list_tickets(db, tenant_id=seed.tenant_id)] == [ticket.id]
