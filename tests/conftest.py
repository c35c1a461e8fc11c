import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

# Agregar directorio raíz al PYTHONPATH para imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Base SQLite en memoria para toda la suite (antes de importar database.conexion)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_LOGIN"] = "1000/minute"
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "housekeeping_test_logs.txt"))

import pytest

from database.conexion import Base, SessionLocal, engine
from database.repositories import UserRepository
import models  # registra los modelos
from models.usuario import Role
from services.context import Principal, RequestContext

NOW = datetime(2026, 10, 18, 9, 0, 0)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Crea usuarios sin hashear password (los tests de servicio no hacen login)"""
    counter = {"n": 0}

    def _make(role: Role, name: str = None, password_hash: str = "not-a-real-hash"):
        counter["n"] += 1
        username = f"{role.value}{counter['n']}"
        return UserRepository(db).insert(
            name=name or username.title(),
            username=username,
            password_hash=password_hash,
            role=role,
            default_language="en",
        )

    return _make


def ctx_for(user, now: datetime = NOW) -> RequestContext:
    return RequestContext(principal=Principal(user_id=user.id, role=user.role, username=user.username), now=now)


@pytest.fixture
def staff(make_user):
    """Un usuario por rol, más una segunda mucama"""
    return {
        "manager": make_user(Role.MANAGER, "Marta Manager"),
        "head": make_user(Role.HEAD_HOUSEKEEPER, "Hilda Head"),
        "hk": make_user(Role.HOUSEKEEPER, "Ana Mucama"),
        "hk2": make_user(Role.HOUSEKEEPER, "Berta Mucama"),
        "maint": make_user(Role.MAINTENANCE, "Mario Mantenimiento"),
    }
