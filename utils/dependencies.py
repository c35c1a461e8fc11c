"""
Dependencias de autenticación: resuelven el principal y el contexto de cada request
"""
from datetime import datetime
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from database import conexion
from database.repositories import UserRepository
from services.context import Principal, RequestContext
from services.errors import Unauthenticated
from utils.auth import verify_token
from utils.timezone import get_hotel_now


# Esquema OAuth2 para obtener el token del header; el 401 lo arma el handler de dominio
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def resolve_principal(db: Session, token: Optional[str]) -> Principal:
    """
    Convierte un bearer token en (user_id, rol).
    El rol se toma de la base, no del token.
    """
    if not token:
        raise Unauthenticated("No token")

    payload = verify_token(token, token_type="access")
    username = payload.get("sub")
    user_id = payload.get("user_id")
    if username is None or user_id is None:
        raise Unauthenticated("No se pudo validar las credenciales")

    user = UserRepository(db).get_by_id(user_id)
    if user is None or user.username != username:
        raise Unauthenticated("No se pudo validar las credenciales")

    return Principal(user_id=user.id, role=user.role, username=user.username)


def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(conexion.get_db),
) -> Principal:
    return resolve_principal(db, token)


def get_clock() -> datetime:
    return get_hotel_now()


def get_request_context(
    principal: Principal = Depends(get_current_principal),
    now: datetime = Depends(get_clock),
) -> RequestContext:
    """'Hoy' se calcula una sola vez por request"""
    return RequestContext(principal=principal, now=now)
