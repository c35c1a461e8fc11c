"""
Contexto explícito de cada comando: quién llama y a qué hora.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from models.usuario import Role
from services.errors import Forbidden
from utils.logging_utils import log_event
from utils.timezone import get_operational_date


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: Role
    username: str = ""

    def __str__(self):
        return self.username or f"user#{self.user_id}"


@dataclass(frozen=True)
class RequestContext:
    principal: Principal
    now: datetime

    @property
    def today(self) -> date:
        return get_operational_date(self.now)


def authorize(ctx: RequestContext, allowed_roles: Iterable[Role], accion: str) -> None:
    """Lanza Forbidden si el rol del principal no está entre los permitidos"""
    allowed = tuple(allowed_roles)
    if ctx.principal.role not in allowed:
        log_event(
            "auth",
            ctx.principal,
            "Intento de acceso no autorizado",
            f"accion={accion} rol={ctx.principal.role.value} roles_requeridos={[r.value for r in allowed]}",
        )
        raise Forbidden(f"Acceso denegado. Roles permitidos: {', '.join(r.value for r in allowed)}")
