from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.housekeeping import TaskStatus


# ===== COMANDOS =====

class AssignRoomsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    housekeeper_id: int
    room_numbers: List[str]
    task_date: Optional[date] = Field(None, alias="date")  # por defecto, hoy


class TaskStatusUpdate(BaseModel):
    task_id: int
    status: str  # se valida en el servicio contra el conjunto de cada comando


class TaskRef(BaseModel):
    task_id: int


class RushUpdate(BaseModel):
    task_id: int
    is_rush: bool


class NoteCreate(BaseModel):
    task_id: int
    text: str = Field(..., max_length=2000)


class CheckoutTimeUpdate(BaseModel):
    task_id: int
    checkout_time: Optional[str] = None  # "HH:MM"; vacío limpia


# ===== RESPUESTAS =====

class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_number: str
    housekeeper_id: int
    date: date
    status: TaskStatus
    is_rush: bool
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    checkout_time: Optional[str] = None


class OwnTaskRead(TaskRead):
    has_maintenance: bool


class BoardTaskRead(OwnTaskRead):
    housekeeper_name: str
    has_note: bool


class NoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    author_id: int
    text: str
    created_at: datetime
    has_photo: bool


class NoteWithAuthorRead(NoteRead):
    author_name: str


class AssignRoomsResult(BaseModel):
    success: bool = True
    created: List[TaskRead]


class DeleteResult(BaseModel):
    success: bool = True
    deleted: int
