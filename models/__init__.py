"""
Importar este paquete registra todos los modelos en Base.metadata.
"""

# 1. Tenants y sucursales
from .tenant import Tenant, Branch

# 2. Usuarios e historial de login
from .user import User, LoginLog

# 3. Núcleo del hotel: tarifas, habitaciones, transacciones
from .hotel import Rate, Room, Transaction

# 4. Logs de solo inserción
from .logs import RoomCleaningLog, ActivityLog

# 5. Soporte al personal
from .support import Notification, LostAndFoundItem, Ticket

__all__ = [
    "Tenant", "Branch",
    "User", "LoginLog",
    "Rate", "Room", "Transaction",
    "RoomCleaningLog", "ActivityLog",
    "Notification", "LostAndFoundItem", "Ticket",
]
