"""
Errores de dominio del core de housekeeping / mantenimiento.
Los servicios los lanzan; main.py los traduce a respuestas HTTP.
"""


class HousekeepingError(Exception):
    """Base de todos los errores tipados del core"""
    kind = "error"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.kind


class Unauthenticated(HousekeepingError):
    """No se pudo validar las credenciales"""
    kind = "unauthenticated"
    status_code = 401


class Forbidden(HousekeepingError):
    """Acceso denegado"""
    kind = "forbidden"
    status_code = 403


class NotFound(HousekeepingError):
    """Recurso no encontrado"""
    kind = "not_found"
    status_code = 404


class InvalidArgument(HousekeepingError):
    """Datos inválidos"""
    kind = "invalid_argument"
    status_code = 400


class Conflict(HousekeepingError):
    """La tarea ya fue inspeccionada; no se puede modificar"""
    kind = "conflict"
    status_code = 409


class StoreUnavailable(HousekeepingError):
    """Error de base de datos"""
    kind = "store_unavailable"
    status_code = 503
