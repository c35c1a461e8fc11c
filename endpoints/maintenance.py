from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from database import conexion
from schemas.maintenance import TicketCreate, TicketFromTaskCreate, TicketRead, TicketUpdate
from services.board_service import BoardService
from services.context import RequestContext
from services.maintenance_service import MaintenanceService
from utils.dependencies import get_request_context

router = APIRouter(prefix="/api/maintenance", tags=["Mantenimiento"])


@router.post("", response_model=TicketRead)
def crear_ticket(
    payload: TicketCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Alta directa de ticket (manager)"""
    return MaintenanceService.create_ticket(db, ctx, payload.room_number, payload.description, payload.priority)


@router.post("/from-housekeeping", response_model=TicketRead)
def crear_ticket_desde_housekeeping(
    payload: TicketFromTaskCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Ticket derivado de una tarea (head housekeeper / manager)"""
    return MaintenanceService.create_ticket_from_task(
        db, ctx, payload.task_id, payload.description, payload.priority, payload.room_number
    )


@router.get("/my", response_model=List[TicketRead])
def mis_tickets(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Tickets abiertos / en curso para mantenimiento"""
    return BoardService.list_own_tickets(db, ctx)


@router.get("/board", response_model=List[TicketRead])
def tablero_tickets(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    return BoardService.list_ticket_board(db, ctx)


@router.post("/update", response_model=TicketRead)
def actualizar_ticket(
    payload: TicketUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    """Cambia estado y/o prioridad; lo no enviado se conserva"""
    datos = payload.model_dump(exclude_unset=True, exclude={"ticket_id"})
    return MaintenanceService.update_ticket(db, ctx, payload.ticket_id, **datos)


@router.delete("/{ticket_id}")
def eliminar_ticket(
    ticket_id: int = Path(..., gt=0),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(conexion.get_db),
):
    MaintenanceService.delete_ticket(db, ctx, ticket_id)
    return {"success": True}
