from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.maintenance import TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    room_number: str
    description: str
    priority: Optional[str] = None


class TicketFromTaskCreate(BaseModel):
    task_id: int
    description: str
    priority: Optional[str] = None
    room_number: Optional[str] = None  # se ignora: se copia de la tarea


class TicketUpdate(BaseModel):
    """Actualización parcial: solo se aplican los campos enviados"""
    ticket_id: int
    status: Optional[str] = None
    priority: Optional[str] = None


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_number: str
    created_by_id: int
    description: str
    priority: TicketPriority
    status: TicketStatus
    created_at: datetime
    updated_at: datetime
    housekeeping_task_id: Optional[int] = None
