from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from database import conexion
from schemas.housekeeping import (
    AssignRoomsRequest,
    AssignRoomsResult,
    BoardTaskRead,
    CheckoutTimeUpdate,
    DeleteResult,
    NoteCreate,
    NoteRead,
    NoteWithAuthorRead,
    OwnTaskRead,
    RushUpdate,
    TaskRead,
    TaskRef,
    TaskStatusUpdate,
)
from services.board_service import BoardService
from services.context import RequestContext
from services.housekeeping_service import HousekeepingService
from utils.dependencies import get_request_context

router = APIRouter(prefix="/api/housekeeping", tags=["Housekeeping"])


# ===== ASIGNACIÓN Y VISTAS =====

@router.post("/assign", response_model=AssignRoomsResult)
def asignar_habitaciones(
    payload: AssignRoomsRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Asigna habitaciones a una mucama para un día (manager / head housekeeper)"""
    created = HousekeepingService.assign_rooms(
        db, ctx, payload.housekeeper_id, payload.room_numbers, payload.task_date
    )
    return {"success": True, "created": created}


@router.get("/my-tasks", response_model=List[OwnTaskRead])
def mis_tareas(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Tareas de hoy del usuario actual"""
    return BoardService.list_own_tasks(db, ctx)


@router.get("/board", response_model=List[BoardTaskRead])
def tablero(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Tablero del día para manager / head housekeeper"""
    return BoardService.list_board_tasks(db, ctx)


# ===== ESTADOS =====

@router.post("/update-status", response_model=TaskRead)
def actualizar_estado_propio(
    payload: TaskStatusUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """La mucama cambia el estado de una tarea propia (sin stayover)"""
    return HousekeepingService.update_own_status(db, ctx, payload.task_id, payload.status)


@router.post("/update-status-any", response_model=TaskRead)
def actualizar_estado_cualquiera(
    payload: TaskStatusUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Head housekeeper cambia el estado de cualquier tarea (sin stayover)"""
    return HousekeepingService.update_any_status(db, ctx, payload.task_id, payload.status)


@router.post("/set-stayover", response_model=TaskRead)
def marcar_stayover(
    payload: TaskRef,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Solo manager"""
    return HousekeepingService.set_stayover(db, ctx, payload.task_id)


@router.post("/inspect", response_model=TaskRead)
def inspeccionar(
    payload: TaskRef,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    return HousekeepingService.mark_inspected(db, ctx, payload.task_id)


@router.post("/rush", response_model=TaskRead)
def marcar_rush(
    payload: RushUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    return HousekeepingService.toggle_rush(db, ctx, payload.task_id, payload.is_rush)


# ===== ANOTACIONES =====

@router.post("/note", response_model=NoteRead)
def agregar_nota(
    payload: NoteCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    return HousekeepingService.add_note(db, ctx, payload.task_id, payload.text)


@router.post("/checkout-time", response_model=TaskRead)
def horario_checkout(
    payload: CheckoutTimeUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Cualquier usuario logueado puede cargar el horario de checkout"""
    return HousekeepingService.set_checkout_time(db, ctx, payload.task_id, payload.checkout_time)


@router.get("/notes/{task_id}", response_model=List[NoteWithAuthorRead])
def notas_de_tarea(
    task_id: int = Path(..., gt=0),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    return BoardService.list_notes(db, ctx, task_id)


# ===== BORRADO =====

@router.post("/reset-today", response_model=DeleteResult)
def resetear_hoy(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Borra todas las tareas de hoy"""
    deleted = HousekeepingService.reset_today(db, ctx)
    return {"success": True, "deleted": deleted}


@router.delete("/{task_id}", response_model=DeleteResult)
def eliminar_tarea(
    task_id: int = Path(..., gt=0),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    HousekeepingService.delete_task(db, ctx, task_id)
    return {"success": True, "deleted": 1}
