from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, ForeignKey, Text, Index, Boolean,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from database.conexion import Base
from utils.timezone import get_hotel_now


class TaskStatus(str, Enum):
    """Estados de limpieza de una habitación en el día"""
    DIRTY = "dirty"
    CLEANING = "cleaning"
    READY_FOR_INSPECTION = "ready_for_inspection"
    INSPECTED = "inspected"
    STAYOVER = "stayover"


class HousekeepingTask(Base):
    """
    Una habitación a limpiar por una mucama en un día calendario.
    room_number es texto libre: el mismo número puede repetirse en fechas distintas.
    """
    __tablename__ = "housekeeping_tasks"
    __table_args__ = (
        Index("idx_hk_task_date", "date"),
        Index("idx_hk_task_housekeeper_date", "housekeeper_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(20), nullable=False)
    housekeeper_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(
        SQLEnum(TaskStatus, name="hk_task_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=TaskStatus.DIRTY,
    )
    is_rush = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    checkout_time = Column(String(20), nullable=True)  # "HH:MM", sin validar

    housekeeper = relationship("User", back_populates="tasks")
    notes = relationship(
        "HousekeepingNote",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="HousekeepingNote.created_at",
    )

    def __repr__(self):
        return f"<HousekeepingTask(id={self.id}, room='{self.room_number}', status='{self.status}')>"


class HousekeepingNote(Base):
    __tablename__ = "housekeeping_notes"
    __table_args__ = (
        Index("idx_hk_note_task", "task_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("housekeeping_tasks.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_hotel_now)
    has_photo = Column(Boolean, nullable=False, default=False)  # reservado, no hay almacenamiento de fotos

    task = relationship("HousekeepingTask", back_populates="notes")
    author = relationship("User")
