"""
Servicios de negocio. Cada método trabaja sobre una Session inyectada y devuelve (success, message, data).
"""

from .activity_log_service import ActivityLogService
from .admin_service import TenantService, BranchService, UserService
from .auth_service import AuthService
from .catalog_service import RateService, RoomService
from .housekeeping_service import HousekeepingService
from .notification_service import NotificationService, LostAndFoundService
from .report_service import ReportService
from .reservation_service import ReservationService
from .ticket_service import TicketService

__all__ = [
    "ActivityLogService",
    "TenantService",
    "BranchService",
    "UserService",
    "AuthService",
    "RateService",
    "RoomService",
    "HousekeepingService",
    "NotificationService",
    "LostAndFoundService",
    "ReportService",
    "ReservationService",
    "TicketService",
]
