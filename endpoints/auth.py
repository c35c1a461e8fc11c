"""
Endpoints de autenticación
"""
from datetime import timedelta

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from config import ACCESS_TOKEN_EXPIRE_MINUTES
from database import conexion
from database.repositories import UserRepository
from models.usuario import Role, User
from schemas.auth import InitManagerRequest, Token, UserRead
from services.context import Principal
from services.errors import Conflict, NotFound, Unauthenticated
from utils.auth import create_access_token, get_password_hash, verify_password
from utils.dependencies import get_current_principal
from utils.logging_utils import log_event
from utils.rate_limiter import LOGIN_LIMIT, limiter

router = APIRouter(prefix="/api/auth", tags=["Autenticación"])


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(conexion.get_db),
):
    """
    Inicia sesión y retorna el token de acceso con el perfil del usuario
    """
    usuario = UserRepository(db).get_by_username(form_data.username)
    if not usuario or not verify_password(form_data.password, usuario.password_hash):
        log_event("auth", form_data.username, "Intento de login fallido")
        raise Unauthenticated("Credenciales incorrectas")

    access_token = create_access_token(
        data={"sub": usuario.username, "user_id": usuario.id, "rol": usuario.role.value},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    log_event("auth", usuario.username, "Login exitoso", f"rol={usuario.role.value}")

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": usuario,
    }


@router.post("/init-manager", response_model=UserRead)
def init_manager(payload: InitManagerRequest, db: Session = Depends(conexion.get_db)):
    """
    Crea el primer manager. Solo funciona mientras no exista ninguno.
    """
    repo = UserRepository(db)
    if repo.list_where(User.role == Role.MANAGER):
        raise Conflict("Ya existe un manager")
    if repo.get_by_username(payload.username):
        raise Conflict("El nombre de usuario ya está en uso")

    manager = repo.insert(
        name=payload.name,
        username=payload.username,
        password_hash=get_password_hash(payload.password),
        role=Role.MANAGER,
        default_language="en",
    )
    log_event("auth", "system", "Manager inicial creado", f"username={manager.username}")
    return manager


@router.get("/me", response_model=UserRead)
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(conexion.get_db)):
    usuario = UserRepository(db).get_by_id(principal.user_id)
    if not usuario:
        raise NotFound("Usuario no encontrado")
    return usuario
