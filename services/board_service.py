"""
Vistas de solo lectura: lista propia de la mucama, tablero del día,
tablero de tickets, tickets pendientes de mantenimiento y notas de una tarea.
"""
from typing import Any, Dict, List

from sqlalchemy import case, exists
from sqlalchemy.orm import Session

from database.repositories import TaskRepository, TicketRepository, store_guard
from models.housekeeping import HousekeepingNote, HousekeepingTask
from models.maintenance import MaintenanceTicket, TicketPriority, TicketStatus
from models.usuario import Role, User
from services.context import RequestContext, authorize
from services.errors import NotFound
from utils.housekeeping_engine import ALLOWED_ROLES, TaskCommand

TICKET_BOARD_ROLES = frozenset({Role.MANAGER, Role.HEAD_HOUSEKEEPER})
OWN_TICKETS_ROLES = frozenset({Role.MAINTENANCE})
PENDING_TICKET_STATUSES = (TicketStatus.OPEN, TicketStatus.IN_PROGRESS)

# rush primero, después por número de habitación como texto ("100" < "20")
TASK_ORDER = (HousekeepingTask.is_rush.desc(), HousekeepingTask.room_number.asc(), HousekeepingTask.id.asc())
TICKET_ORDER = (
    case((MaintenanceTicket.priority == TicketPriority.RUSH, 0), else_=1),
    MaintenanceTicket.created_at.asc(),
    MaintenanceTicket.id.asc(),
)


def _has_maintenance():
    return (
        exists()
        .where(MaintenanceTicket.housekeeping_task_id == HousekeepingTask.id)
        .label("has_maintenance")
    )


def _has_note():
    return exists().where(HousekeepingNote.task_id == HousekeepingTask.id).label("has_note")


def _task_row(task: HousekeepingTask, **extra) -> Dict[str, Any]:
    row = {
        "id": task.id,
        "room_number": task.room_number,
        "housekeeper_id": task.housekeeper_id,
        "date": task.date,
        "status": task.status,
        "is_rush": task.is_rush,
        "started_at": task.started_at,
        "finished_at": task.finished_at,
        "checkout_time": task.checkout_time,
    }
    row.update(extra)
    return row


class BoardService:

    @staticmethod
    def list_own_tasks(db: Session, ctx: RequestContext) -> List[Dict[str, Any]]:
        authorize(ctx, ALLOWED_ROLES[TaskCommand.LIST_OWN_TASKS], TaskCommand.LIST_OWN_TASKS.value)
        with store_guard(db, "list_own_tasks"):
            rows = (
                db.query(HousekeepingTask, _has_maintenance())
                .filter(
                    HousekeepingTask.housekeeper_id == ctx.principal.user_id,
                    HousekeepingTask.date == ctx.today,
                )
                .order_by(*TASK_ORDER)
                .all()
            )
        return [_task_row(task, has_maintenance=bool(has_mt)) for task, has_mt in rows]

    @staticmethod
    def list_board_tasks(db: Session, ctx: RequestContext) -> List[Dict[str, Any]]:
        authorize(ctx, ALLOWED_ROLES[TaskCommand.LIST_BOARD_TASKS], TaskCommand.LIST_BOARD_TASKS.value)
        with store_guard(db, "list_board_tasks"):
            rows = (
                db.query(HousekeepingTask, User.name, _has_note(), _has_maintenance())
                .join(User, User.id == HousekeepingTask.housekeeper_id)
                .filter(HousekeepingTask.date == ctx.today)
                .order_by(*TASK_ORDER)
                .all()
            )
        return [
            _task_row(task, housekeeper_name=name, has_note=bool(has_note), has_maintenance=bool(has_mt))
            for task, name, has_note, has_mt in rows
        ]

    @staticmethod
    def list_notes(db: Session, ctx: RequestContext, task_id: int) -> List[Dict[str, Any]]:
        authorize(ctx, ALLOWED_ROLES[TaskCommand.LIST_NOTES], TaskCommand.LIST_NOTES.value)
        if not TaskRepository(db).get_by_id(task_id):
            raise NotFound("Tarea no encontrada")
        with store_guard(db, "list_notes"):
            rows = (
                db.query(HousekeepingNote, User.name)
                .join(User, User.id == HousekeepingNote.author_id)
                .filter(HousekeepingNote.task_id == task_id)
                .order_by(HousekeepingNote.created_at.asc(), HousekeepingNote.id.asc())
                .all()
            )
        return [
            {
                "id": note.id,
                "task_id": note.task_id,
                "author_id": note.author_id,
                "author_name": author_name,
                "text": note.text,
                "created_at": note.created_at,
                "has_photo": note.has_photo,
            }
            for note, author_name in rows
        ]

    @staticmethod
    def list_ticket_board(db: Session, ctx: RequestContext) -> List[MaintenanceTicket]:
        authorize(ctx, TICKET_BOARD_ROLES, "list_ticket_board")
        return TicketRepository(db).list_where(order_by=TICKET_ORDER)

    @staticmethod
    def list_own_tickets(db: Session, ctx: RequestContext) -> List[MaintenanceTicket]:
        """Tickets abiertos o en curso para el equipo de mantenimiento"""
        authorize(ctx, OWN_TICKETS_ROLES, "list_own_tickets")
        return TicketRepository(db).list_where(
            MaintenanceTicket.status.in_(PENDING_TICKET_STATUSES),
            order_by=TICKET_ORDER,
        )
