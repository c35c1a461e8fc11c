"""
Máquina de estados de HousekeepingTask y matriz de autorización por comando.

Estados: dirty (inicial) -> cleaning -> ready_for_inspection -> inspected (terminal).
Entre dirty / cleaning / ready_for_inspection se puede ir y volver libremente.
stayover es un estado lateral al que solo entra el manager y del que no se sale.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from models.housekeeping import HousekeepingTask, TaskStatus
from models.usuario import Role
from services.errors import Conflict, Forbidden, InvalidArgument

NORMAL_FLOW = frozenset({TaskStatus.DIRTY, TaskStatus.CLEANING, TaskStatus.READY_FOR_INSPECTION})

HOUSEKEEPING_ROLES = frozenset({Role.HOUSEKEEPER, Role.HEAD_HOUSEKEEPER})
SUPERVISOR_ROLES = frozenset({Role.MANAGER, Role.HEAD_HOUSEKEEPER})


class TaskCommand(str, Enum):
    ASSIGN_ROOMS = "assign_rooms"
    LIST_OWN_TASKS = "list_own_tasks"
    LIST_BOARD_TASKS = "list_board_tasks"
    UPDATE_OWN_STATUS = "update_own_status"
    UPDATE_ANY_STATUS = "update_any_status"
    SET_STAYOVER = "set_stayover"
    MARK_INSPECTED = "mark_inspected"
    TOGGLE_RUSH = "toggle_rush"
    ADD_NOTE = "add_note"
    SET_CHECKOUT_TIME = "set_checkout_time"
    LIST_NOTES = "list_notes"
    RESET_TODAY = "reset_today"
    DELETE_TASK = "delete_task"


ALLOWED_ROLES = {
    TaskCommand.ASSIGN_ROOMS: SUPERVISOR_ROLES,
    TaskCommand.LIST_OWN_TASKS: HOUSEKEEPING_ROLES,
    TaskCommand.LIST_BOARD_TASKS: SUPERVISOR_ROLES,
    TaskCommand.UPDATE_OWN_STATUS: HOUSEKEEPING_ROLES,
    TaskCommand.UPDATE_ANY_STATUS: frozenset({Role.HEAD_HOUSEKEEPER}),
    TaskCommand.SET_STAYOVER: frozenset({Role.MANAGER}),
    TaskCommand.MARK_INSPECTED: SUPERVISOR_ROLES,
    TaskCommand.TOGGLE_RUSH: SUPERVISOR_ROLES,
    TaskCommand.ADD_NOTE: HOUSEKEEPING_ROLES,
    TaskCommand.SET_CHECKOUT_TIME: frozenset(Role),
    TaskCommand.LIST_NOTES: SUPERVISOR_ROLES,
    TaskCommand.RESET_TODAY: SUPERVISOR_ROLES,
    TaskCommand.DELETE_TASK: SUPERVISOR_ROLES,
}

# Estados destino admitidos por cada comando que cambia el estado
ALLOWED_TARGETS = {
    TaskCommand.UPDATE_OWN_STATUS: NORMAL_FLOW,
    TaskCommand.UPDATE_ANY_STATUS: NORMAL_FLOW,
    TaskCommand.SET_STAYOVER: frozenset({TaskStatus.STAYOVER}),
    TaskCommand.MARK_INSPECTED: frozenset({TaskStatus.INSPECTED}),
}


def validate_target(command: TaskCommand, value: Any) -> TaskStatus:
    """El estado pedido debe pertenecer al conjunto admitido por el comando"""
    try:
        target = TaskStatus(value)
    except ValueError:
        raise InvalidArgument(f"Estado inválido: {value!r}")
    if target not in ALLOWED_TARGETS[command]:
        raise InvalidArgument(f"Estado inválido para {command.value}: {target.value}")
    return target


def ensure_not_inspected(task: HousekeepingTask) -> None:
    if task.status == TaskStatus.INSPECTED:
        raise Conflict("La tarea ya fue inspeccionada; el estado no puede cambiar")


def check_task_guards(command: TaskCommand, task: HousekeepingTask, user_id: int) -> None:
    """
    Guardas sobre una tarea ya cargada, en este orden:
    - inspected es terminal para cualquier comando
    - update_own_status exige que la tarea sea del que llama
    - stayover no vuelve al flujo normal ni se inspecciona
    - inspected solo se alcanza desde ready_for_inspection
    """
    ensure_not_inspected(task)

    if command == TaskCommand.UPDATE_OWN_STATUS and task.housekeeper_id != user_id:
        raise Forbidden("La tarea no está asignada a este usuario")

    if task.status == TaskStatus.STAYOVER and command != TaskCommand.SET_STAYOVER:
        raise Conflict("La habitación está en stayover; el estado no puede cambiar")

    if command == TaskCommand.MARK_INSPECTED and task.status != TaskStatus.READY_FOR_INSPECTION:
        raise Conflict(f"Solo se inspecciona desde ready_for_inspection (estado actual: {task.status.value})")


def derive_transition_fields(task: HousekeepingTask, target: TaskStatus, now: datetime) -> Dict[str, Any]:
    """
    Campos a escribir para una transición. En el flujo normal:
    - entrar a cleaning fija started_at solo si todavía es nulo
    - entrar a ready_for_inspection siempre refresca finished_at
    Los timestamps nunca se limpian.
    """
    fields: Dict[str, Any] = {"status": target}
    if target not in NORMAL_FLOW:
        return fields

    if target == TaskStatus.CLEANING and task.started_at is None:
        fields["started_at"] = now
    if target == TaskStatus.READY_FOR_INSPECTION:
        fields["finished_at"] = now
    return fields


def normalize_checkout_time(value: Any):
    """Texto libre "HH:MM"; vacío o solo espacios limpia el valor"""
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None
