"""
Servicios de negocio: ciclo de vida de tareas de housekeeping, tickets de mantenimiento
y tableros de solo lectura.
"""
