import math

import structlog

from ...domain.entities import MAX_GRADE, MIN_GRADE, is_passing
from ...domain.errors import ValidationError

logger = structlog.get_logger()


class IEnrollmentRepository:
    def set_grade(self, enrollment_id: int, calificacion: float, observaciones: str | None = None) -> None: ...
    def complete_if_active(self, enrollment_id: int) -> int: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class UpdateGrade:
    """Registra la calificación final de una inscripción.

    Una nota aprobatoria cierra la inscripción si sigue activa. Ambas
    escrituras se confirman juntas.
    """

    def __init__(self, repo: IEnrollmentRepository):
        self.repo = repo

    def execute(self, enrollment_id: int, calificacion: float, observaciones: str | None = None) -> bool:
        # NaN no cumple ninguna comparación
        if not math.isfinite(calificacion) or calificacion < MIN_GRADE or calificacion > MAX_GRADE:
            raise ValidationError("La calificación debe estar entre 0 y 100")
        try:
            self.repo.set_grade(enrollment_id, calificacion, observaciones)
            completed = bool(is_passing(calificacion) and self.repo.complete_if_active(enrollment_id))
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        logger.info("grade_updated", inscripcion_id=enrollment_id, calificacion=calificacion, completed=completed)
        return completed
