from dataclasses import dataclass
from enum import Enum

PASSING_GRADE = 51
MIN_GRADE = 0
MAX_GRADE = 100

class Rol(str, Enum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    ESTUDIANTE = "estudiante"

class EstadoInscripcion(str, Enum):
    PENDIENTE = "pendiente"
    ACTIVA = "activa"
    COMPLETADA = "completada"
    CANCELADA = "cancelada"

@dataclass(frozen=True)
class AuthUser:
    """Identidad mínima de un usuario autenticado."""
    id: int
    email: str
    rol: Rol


def is_passing(calificacion: float | None) -> bool:
    return calificacion is not None and calificacion >= PASSING_GRADE
