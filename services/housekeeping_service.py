"""
Services del ciclo de vida de tareas de housekeeping
Contiene lógica de negocio para:
- Asignación de habitaciones por día
- Cambios de estado (propios, de cualquier tarea, stayover, inspección)
- Rush, horario de checkout y notas
- Borrado individual y reseteo del día
"""
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from database.repositories import NoteRepository, TaskRepository, UserRepository
from models.housekeeping import HousekeepingNote, HousekeepingTask, TaskStatus
from services.context import RequestContext, authorize
from services.errors import InvalidArgument, NotFound, StoreUnavailable
from utils.housekeeping_engine import (
    ALLOWED_ROLES,
    HOUSEKEEPING_ROLES,
    TaskCommand,
    check_task_guards,
    derive_transition_fields,
    ensure_not_inspected,
    normalize_checkout_time,
    validate_target,
)
from utils.logging_utils import log_event


def _get_task(db: Session, task_id: int) -> HousekeepingTask:
    task = TaskRepository(db).get_by_id(task_id)
    if not task:
        raise NotFound("Tarea no encontrada")
    return task


class HousekeepingService:
    """Motor del ciclo de vida de HousekeepingTask"""

    @staticmethod
    def assign_rooms(
        db: Session,
        ctx: RequestContext,
        housekeeper_id: int,
        room_numbers: Sequence[str],
        day: Optional[date] = None,
    ) -> List[HousekeepingTask]:
        """
        Crea una tarea 'dirty' por habitación para la mucama indicada.
        No es atómico: si la base falla a mitad de camino quedan las tareas ya creadas
        y se propaga el error original.
        """
        authorize(ctx, ALLOWED_ROLES[TaskCommand.ASSIGN_ROOMS], TaskCommand.ASSIGN_ROOMS.value)

        if housekeeper_id is None:
            raise InvalidArgument("housekeeper_id es obligatorio")
        rooms = [str(r).strip() for r in (room_numbers or [])]
        if not rooms:
            raise InvalidArgument("Se requiere al menos un número de habitación")
        if any(not r for r in rooms):
            raise InvalidArgument("Los números de habitación no pueden estar vacíos")

        housekeeper = UserRepository(db).get_by_id(housekeeper_id)
        if not housekeeper:
            raise NotFound("Mucama no encontrada")
        if housekeeper.role not in HOUSEKEEPING_ROLES:
            raise InvalidArgument(f"El usuario {housekeeper_id} no es housekeeper (rol: {housekeeper.role.value})")

        task_date = day or ctx.today
        repo = TaskRepository(db)
        created: List[HousekeepingTask] = []
        try:
            for room_number in rooms:
                created.append(
                    repo.insert(
                        room_number=room_number,
                        housekeeper_id=housekeeper_id,
                        date=task_date,
                        status=TaskStatus.DIRTY,
                        is_rush=False,
                    )
                )
        except StoreUnavailable:
            log_event(
                "housekeeping", ctx.principal, "Asignación parcial",
                f"creadas={len(created)}/{len(rooms)} housekeeper={housekeeper_id} fecha={task_date}",
            )
            raise

        log_event(
            "housekeeping", ctx.principal, "Asignar habitaciones",
            f"housekeeper={housekeeper_id} fecha={task_date} habitaciones={rooms}",
        )
        return created

    @staticmethod
    def _change_status(db: Session, ctx: RequestContext, command: TaskCommand, task_id: int, status) -> HousekeepingTask:
        authorize(ctx, ALLOWED_ROLES[command], command.value)
        target = validate_target(command, status)
        task = _get_task(db, task_id)
        check_task_guards(command, task, ctx.principal.user_id)

        anterior = task.status
        fields = derive_transition_fields(task, target, ctx.now)
        task = TaskRepository(db).update_fields(task, **fields)
        log_event(
            "housekeeping", ctx.principal, f"Cambio de estado ({command.value})",
            f"tarea={task_id} {anterior.value}->{target.value}",
        )
        return task

    @staticmethod
    def update_own_status(db: Session, ctx: RequestContext, task_id: int, status) -> HousekeepingTask:
        return HousekeepingService._change_status(db, ctx, TaskCommand.UPDATE_OWN_STATUS, task_id, status)

    @staticmethod
    def update_any_status(db: Session, ctx: RequestContext, task_id: int, status) -> HousekeepingTask:
        return HousekeepingService._change_status(db, ctx, TaskCommand.UPDATE_ANY_STATUS, task_id, status)

    @staticmethod
    def set_stayover(db: Session, ctx: RequestContext, task_id: int) -> HousekeepingTask:
        return HousekeepingService._change_status(db, ctx, TaskCommand.SET_STAYOVER, task_id, TaskStatus.STAYOVER)

    @staticmethod
    def mark_inspected(db: Session, ctx: RequestContext, task_id: int) -> HousekeepingTask:
        return HousekeepingService._change_status(db, ctx, TaskCommand.MARK_INSPECTED, task_id, TaskStatus.INSPECTED)

    @staticmethod
    def toggle_rush(db: Session, ctx: RequestContext, task_id: int, is_rush: bool) -> HousekeepingTask:
        authorize(ctx, ALLOWED_ROLES[TaskCommand.TOGGLE_RUSH], TaskCommand.TOGGLE_RUSH.value)
        if is_rush is None:
            raise InvalidArgument("is_rush es obligatorio")
        task = _get_task(db, task_id)
        ensure_not_inspected(task)

        task = TaskRepository(db).update_fields(task, is_rush=bool(is_rush))
        log_event("housekeeping", ctx.principal, "Rush", f"tarea={task_id} is_rush={task.is_rush}")
        return task

    @staticmethod
    def set_checkout_time(db: Session, ctx: RequestContext, task_id: int, checkout_time: Optional[str] = None) -> HousekeepingTask:
        authorize(ctx, ALLOWED_ROLES[TaskCommand.SET_CHECKOUT_TIME], TaskCommand.SET_CHECKOUT_TIME.value)
        task = _get_task(db, task_id)
        ensure_not_inspected(task)

        value = normalize_checkout_time(checkout_time)
        task = TaskRepository(db).update_fields(task, checkout_time=value)
        log_event("housekeeping", ctx.principal, "Horario de checkout", f"tarea={task_id} checkout_time={value}")
        return task

    @staticmethod
    def add_note(db: Session, ctx: RequestContext, task_id: int, text: str) -> HousekeepingNote:
        authorize(ctx, ALLOWED_ROLES[TaskCommand.ADD_NOTE], TaskCommand.ADD_NOTE.value)
        texto = (text or "").strip()
        if not texto:
            raise InvalidArgument("El texto de la nota es obligatorio")
        _get_task(db, task_id)

        note = NoteRepository(db).insert(
            task_id=task_id,
            author_id=ctx.principal.user_id,
            text=texto,
            created_at=ctx.now,
            has_photo=False,
        )
        log_event("housekeeping", ctx.principal, "Nota", f"tarea={task_id} nota={note.id}")
        return note

    @staticmethod
    def delete_task(db: Session, ctx: RequestContext, task_id: int) -> None:
        """Borra la tarea y sus notas. Los tickets que la referencian quedan intactos."""
        authorize(ctx, ALLOWED_ROLES[TaskCommand.DELETE_TASK], TaskCommand.DELETE_TASK.value)
        if not TaskRepository(db).delete_by_id(task_id):
            raise NotFound("Tarea no encontrada")
        log_event("housekeeping", ctx.principal, "Eliminar tarea", f"tarea={task_id}")

    @staticmethod
    def reset_today(db: Session, ctx: RequestContext) -> int:
        """Borra todas las tareas de hoy, fila por fila. Devuelve la cantidad borrada."""
        authorize(ctx, ALLOWED_ROLES[TaskCommand.RESET_TODAY], TaskCommand.RESET_TODAY.value)
        repo = TaskRepository(db)
        task_ids = [t.id for t in repo.list_where(HousekeepingTask.date == ctx.today)]

        deleted = 0
        try:
            for task_id in task_ids:
                if repo.delete_by_id(task_id):
                    deleted += 1
        except StoreUnavailable:
            log_event(
                "housekeeping", ctx.principal, "Reset parcial",
                f"fecha={ctx.today} borradas={deleted}/{len(task_ids)}",
            )
            raise

        log_event("housekeeping", ctx.principal, "Reset del día", f"fecha={ctx.today} borradas={deleted}")
        return deleted
