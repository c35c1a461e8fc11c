"""
Repositorios por entidad sobre la sesión de SQLAlchemy.
Contrato angosto: insert, get_by_id, update_fields, delete_by_id, list_where.
Cada escritura hace su propio commit (consistencia por fila).
"""
import logging
from contextlib import contextmanager
from typing import Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import User, HousekeepingTask, HousekeepingNote, MaintenanceTicket
from services.errors import StoreUnavailable
from utils.logging_utils import log_event

ModelT = TypeVar("ModelT")


@contextmanager
def store_guard(db: Session, accion: str):
    """Traduce fallas de la base a StoreUnavailable (sin reintentos)"""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        log_event("store", "system", f"Error de base de datos en {accion}", f"error={e}", level=logging.ERROR)
        raise StoreUnavailable("Error de base de datos") from e


class Repository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def insert(self, **fields) -> ModelT:
        with store_guard(self.db, f"insert {self.model.__tablename__}"):
            obj = self.model(**fields)
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj

    def get_by_id(self, obj_id: int) -> Optional[ModelT]:
        with store_guard(self.db, f"get {self.model.__tablename__}"):
            return self.db.get(self.model, obj_id)

    def update_fields(self, obj: ModelT, **fields) -> ModelT:
        with store_guard(self.db, f"update {self.model.__tablename__}"):
            for campo, valor in fields.items():
                setattr(obj, campo, valor)
            self.db.commit()
            self.db.refresh(obj)
            return obj

    def delete_by_id(self, obj_id: int) -> bool:
        with store_guard(self.db, f"delete {self.model.__tablename__}"):
            obj = self.db.get(self.model, obj_id)
            if obj is None:
                return False
            self.db.delete(obj)
            self.db.commit()
            return True

    def list_where(self, *criteria, order_by: Sequence = ()) -> List[ModelT]:
        with store_guard(self.db, f"list {self.model.__tablename__}"):
            query = self.db.query(self.model)
            if criteria:
                query = query.filter(*criteria)
            if order_by:
                query = query.order_by(*order_by)
            return query.all()


class UserRepository(Repository[User]):
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        rows = self.list_where(User.username == username)
        return rows[0] if rows else None


class TaskRepository(Repository[HousekeepingTask]):
    model = HousekeepingTask


class NoteRepository(Repository[HousekeepingNote]):
    model = HousekeepingNote


class TicketRepository(Repository[MaintenanceTicket]):
    model = MaintenanceTicket
