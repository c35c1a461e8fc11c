"""
Services de tickets de mantenimiento
- Alta directa (manager) o derivada de una tarea de housekeeping
- Actualización parcial de estado / prioridad
- Baja por id
"""
from typing import Any, Optional

from sqlalchemy.orm import Session

from database.repositories import TaskRepository, TicketRepository
from models.maintenance import MaintenanceTicket, TicketPriority, TicketStatus
from models.usuario import Role
from services.context import RequestContext, authorize
from services.errors import InvalidArgument, NotFound
from utils.logging_utils import log_event

CREATE_ROLES = frozenset({Role.MANAGER})
CREATE_FROM_TASK_ROLES = frozenset({Role.MANAGER, Role.HEAD_HOUSEKEEPER})
UPDATE_ROLES = frozenset({Role.MANAGER, Role.MAINTENANCE, Role.HEAD_HOUSEKEEPER})
DELETE_ROLES = frozenset({Role.MANAGER})

_UNSET: Any = object()


def parse_priority(value: Any, default: Optional[TicketPriority] = None) -> TicketPriority:
    if value is None and default is not None:
        return default
    try:
        return TicketPriority(value)
    except ValueError:
        raise InvalidArgument(f"Prioridad inválida: {value!r}")


def parse_ticket_status(value: Any) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        raise InvalidArgument(f"Estado inválido: {value!r}")


def _required_text(value: Optional[str], campo: str) -> str:
    texto = (value or "").strip()
    if not texto:
        raise InvalidArgument(f"{campo} es obligatorio")
    return texto


class MaintenanceService:

    @staticmethod
    def create_ticket(
        db: Session,
        ctx: RequestContext,
        room_number: str,
        description: str,
        priority: Optional[str] = None,
    ) -> MaintenanceTicket:
        authorize(ctx, CREATE_ROLES, "create_ticket")
        room = _required_text(room_number, "room_number")
        descripcion = _required_text(description, "description")
        prio = parse_priority(priority, default=TicketPriority.NORMAL)

        ticket = TicketRepository(db).insert(
            room_number=room,
            created_by_id=ctx.principal.user_id,
            description=descripcion,
            priority=prio,
            status=TicketStatus.OPEN,
            created_at=ctx.now,
            updated_at=ctx.now,
            housekeeping_task_id=None,
        )
        log_event("maintenance", ctx.principal, "Crear ticket", f"ticket={ticket.id} habitacion={room} prioridad={prio.value}")
        return ticket

    @staticmethod
    def create_ticket_from_task(
        db: Session,
        ctx: RequestContext,
        task_id: int,
        description: str,
        priority: Optional[str] = None,
        room_number: Optional[str] = None,
    ) -> MaintenanceTicket:
        """
        Crea un ticket derivado de una tarea. La habitación se copia de la tarea
        (room_number recibido se ignora). No se evita crear varios tickets por tarea.
        """
        authorize(ctx, CREATE_FROM_TASK_ROLES, "create_ticket_from_task")
        if task_id is None:
            raise InvalidArgument("task_id es obligatorio")
        descripcion = _required_text(description, "description")
        prio = parse_priority(priority, default=TicketPriority.NORMAL)

        task = TaskRepository(db).get_by_id(task_id)
        if not task:
            raise NotFound("Tarea de housekeeping no encontrada")

        ticket = TicketRepository(db).insert(
            room_number=task.room_number,
            created_by_id=ctx.principal.user_id,
            description=descripcion,
            priority=prio,
            status=TicketStatus.OPEN,
            created_at=ctx.now,
            updated_at=ctx.now,
            housekeeping_task_id=task.id,
        )
        log_event(
            "maintenance", ctx.principal, "Crear ticket desde housekeeping",
            f"ticket={ticket.id} tarea={task.id} habitacion={task.room_number}",
        )
        return ticket

    @staticmethod
    def update_ticket(
        db: Session,
        ctx: RequestContext,
        ticket_id: int,
        status: Any = _UNSET,
        priority: Any = _UNSET,
    ) -> MaintenanceTicket:
        """
        Actualización parcial: los campos no enviados conservan su valor.
        Enviar un campo explícitamente en null es un error (no existe prioridad nula).
        updated_at se refresca siempre.
        """
        authorize(ctx, UPDATE_ROLES, "update_ticket")

        fields = {}
        if status is not _UNSET:
            fields["status"] = parse_ticket_status(status)
        if priority is not _UNSET:
            fields["priority"] = parse_priority(priority)

        repo = TicketRepository(db)
        ticket = repo.get_by_id(ticket_id)
        if not ticket:
            raise NotFound("Ticket no encontrado")

        fields["updated_at"] = ctx.now
        ticket = repo.update_fields(ticket, **fields)
        log_event(
            "maintenance", ctx.principal, "Actualizar ticket",
            f"ticket={ticket_id} estado={ticket.status.value} prioridad={ticket.priority.value}",
        )
        return ticket

    @staticmethod
    def delete_ticket(db: Session, ctx: RequestContext, ticket_id: int) -> None:
        """La tarea vinculada no se toca (referencia débil)."""
        authorize(ctx, DELETE_ROLES, "delete_ticket")
        if not TicketRepository(db).delete_by_id(ticket_id):
            raise NotFound("Ticket no encontrado")
        log_event("maintenance", ctx.principal, "Eliminar ticket", f"ticket={ticket_id}")
