"""
Modelo de Usuario del equipo de pisos y mantenimiento
"""
from enum import Enum

from sqlalchemy import Column, Integer, String, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from database.conexion import Base


class Role(str, Enum):
    """Roles fijos del sistema"""
    MANAGER = "manager"
    HEAD_HOUSEKEEPER = "headhousekeeper"
    HOUSEKEEPER = "housekeeper"
    MAINTENANCE = "maintenance"


class User(Base):
    """Tabla de usuarios. El core solo la lee; el alta se hace por provisioning."""
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_user_role", "role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(Role, name="user_role", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    default_language = Column(String(10), nullable=False, default="en")

    tasks = relationship("HousekeepingTask", back_populates="housekeeper")

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
