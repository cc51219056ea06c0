"""
Conjuntos cerrados de estados compartidos por modelos, servicios y schemas.
Los textos de display son diccionarios simples junto a cada enum.
"""
import enum


def enum_values(enum_cls):
    """values_callable para sqlalchemy.Enum: persiste .value en lugar de .name"""
    return [e.value for e in enum_cls]


class EntityStatus(str, enum.Enum):
    """Estado genérico de tenants, sucursales, usuarios, tarifas y habitaciones"""
    ARCHIVED = "archived"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class UserRole(str, enum.Enum):
    SYSAD = "sysad"
    ADMIN = "admin"
    STAFF = "staff"
    HOUSEKEEPING = "housekeeping"


class RoomAvailability(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class CleaningStatus(str, enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    INSPECTION = "inspection"
    OUT_OF_ORDER = "out_of_order"


class TransactionStatus(str, enum.Enum):
    PENDING_BRANCH_ACCEPTANCE = "pending_branch_acceptance"
    ADVANCE_RESERVATION = "advance_reservation"
    ADVANCE_PAID = "advance_paid"
    RESERVATION_WITH_ROOM = "reservation_with_room"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    VOIDED_CANCELLED = "voided_cancelled"


class PaymentState(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    ADVANCE_PAID = "advance_paid"


class AcceptanceStatus(str, enum.Enum):
    NOT_APPLICABLE = "not_applicable"
    PENDING = "pending"
    ACCEPTED = "accepted"
    NOT_ACCEPTED = "not_accepted"


class NotificationStatus(str, enum.Enum):
    UNREAD = "unread"
    READ = "read"


class NotificationLinkStatus(str, enum.Enum):
    NO_TRANSACTION_LINK = "no_transaction_link"
    TRANSACTION_LINKED = "transaction_linked"


class LostAndFoundStatus(str, enum.Enum):
    FOUND = "found"
    CLAIMED = "claimed"
    DISPOSED = "disposed"


class LoginStatus(str, enum.Enum):
    FAILED = "failed"
    SUCCESS = "success"


class TicketStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


TERMINAL_TRANSACTION_STATUSES = (
    TransactionStatus.CHECKED_OUT,
    TransactionStatus.VOIDED_CANCELLED,
)

UNASSIGNED_RESERVATION_STATUSES = (
    TransactionStatus.PENDING_BRANCH_ACCEPTANCE,
    TransactionStatus.ADVANCE_RESERVATION,
    TransactionStatus.ADVANCE_PAID,
)

# Estados de limpieza que requieren una nota explicando el problema
CLEANING_PROBLEM_STATUSES = (
    CleaningStatus.DIRTY,
    CleaningStatus.OUT_OF_ORDER,
)


ENTITY_STATUS_TEXT = {
    EntityStatus.ARCHIVED: "Archived",
    EntityStatus.ACTIVE: "Active",
    EntityStatus.SUSPENDED: "Suspended",
}

ROOM_AVAILABILITY_TEXT = {
    RoomAvailability.AVAILABLE: "Available",
    RoomAvailability.OCCUPIED: "Occupied",
    RoomAvailability.RESERVED: "Reserved",
}

CLEANING_STATUS_TEXT = {
    CleaningStatus.CLEAN: "Clean",
    CleaningStatus.DIRTY: "Dirty",
    CleaningStatus.INSPECTION: "Needs Inspection",
    CleaningStatus.OUT_OF_ORDER: "Out of Order",
}

TRANSACTION_STATUS_TEXT = {
    TransactionStatus.PENDING_BRANCH_ACCEPTANCE: "Pending Branch Acceptance",
    TransactionStatus.ADVANCE_RESERVATION: "Advance Reservation",
    TransactionStatus.ADVANCE_PAID: "Advance Paid",
    TransactionStatus.RESERVATION_WITH_ROOM: "Reservation (Room Assigned)",
    TransactionStatus.CHECKED_IN: "Checked-In",
    TransactionStatus.CHECKED_OUT: "Checked-Out",
    TransactionStatus.VOIDED_CANCELLED: "Voided/Cancelled",
}

PAYMENT_STATE_TEXT = {
    PaymentState.UNPAID: "Unpaid",
    PaymentState.PAID: "Paid",
    PaymentState.ADVANCE_PAID: "Advance Paid",
}

ACCEPTANCE_STATUS_TEXT = {
    AcceptanceStatus.NOT_APPLICABLE: "N/A (Staff Created)",
    AcceptanceStatus.PENDING: "Pending Branch Action",
    AcceptanceStatus.ACCEPTED: "Accepted by Branch",
    AcceptanceStatus.NOT_ACCEPTED: "Declined by Branch",
}

LOST_AND_FOUND_STATUS_TEXT = {
    LostAndFoundStatus.FOUND: "Found",
    LostAndFoundStatus.CLAIMED: "Claimed",
    LostAndFoundStatus.DISPOSED: "Disposed",
}


def status_text(mapping: dict, value) -> str:
    """Texto de display para un valor del enum, 'Unknown' si no existe"""
    for key, text in mapping.items():
        if key == value:
            return text
    return "Unknown"
