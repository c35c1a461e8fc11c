"""
Script de provisioning de usuarios (manager, head housekeeper, mucamas, mantenimiento)
Ejecutar: python create_admin.py --role housekeeper --username ana --name "Ana Pérez"
"""
import argparse
import getpass
import sys

from sqlalchemy.orm import Session

from database.conexion import SessionLocal, engine, Base
from database.repositories import UserRepository
import models  # Importar para registrar los modelos
from models.usuario import Role, User
from services.errors import Conflict, HousekeepingError
from utils.auth import get_password_hash


def crear_usuario(db: Session, name: str, username: str, password: str, role: Role, language: str = "en") -> User:
    """Crea un usuario; falla con Conflict si el username ya existe"""
    repo = UserRepository(db)
    if repo.get_by_username(username):
        raise Conflict(f"Ya existe el usuario '{username}'")
    return repo.insert(
        name=name,
        username=username,
        password_hash=get_password_hash(password),
        role=role,
        default_language=language,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Alta de usuarios del sistema de housekeeping")
    parser.add_argument("--username", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--role", choices=[r.value for r in Role], default=Role.MANAGER.value)
    parser.add_argument("--language", default="en")
    parser.add_argument("--password", help="Si se omite se pide por consola")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password (mínimo 8 caracteres): ")
    if len(password) < 8:
        print("❌ La contraseña debe tener al menos 8 caracteres")
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        usuario = crear_usuario(db, args.name, args.username, password, Role(args.role), args.language)
    except HousekeepingError as e:
        print(f"❌ {e.message}")
        return 1
    finally:
        db.close()

    print("✅ Usuario creado exitosamente!")
    print(f"   ID: {usuario.id}")
    print(f"   Username: {usuario.username}")
    print(f"   Rol: {usuario.role.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
