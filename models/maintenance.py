from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from database.conexion import Base
from utils.timezone import get_hotel_now


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TicketPriority(str, Enum):
    NORMAL = "normal"
    RUSH = "rush"


class MaintenanceTicket(Base):
    __tablename__ = "maintenance_tickets"
    __table_args__ = (
        Index("idx_mt_status", "status"),
        Index("idx_mt_hk_task", "housekeeping_task_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(20), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(
        SQLEnum(TicketPriority, name="mt_priority", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=TicketPriority.NORMAL,
    )
    status = Column(
        SQLEnum(TicketStatus, name="mt_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=TicketStatus.OPEN,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_hotel_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_hotel_now)

    # Referencia débil a la tarea que originó el ticket: sin FK, puede quedar colgando
    housekeeping_task_id = Column(Integer, nullable=True)

    created_by = relationship("User")

    def __repr__(self):
        return f"<MaintenanceTicket(id={self.id}, room='{self.room_number}', status='{self.status}')>"
