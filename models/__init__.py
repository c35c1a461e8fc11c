"""
Archivo de inicialización del paquete models.
Expone todas las clases para que SQLAlchemy (Base.metadata) las detecte al importar 'models'.
"""

from .usuario import Role, User
from .housekeeping import TaskStatus, HousekeepingTask, HousekeepingNote
from .maintenance import TicketStatus, TicketPriority, MaintenanceTicket

__all__ = [
    "Role", "User",
    "TaskStatus", "HousekeepingTask", "HousekeepingNote",
    "TicketStatus", "TicketPriority", "MaintenanceTicket",
]
