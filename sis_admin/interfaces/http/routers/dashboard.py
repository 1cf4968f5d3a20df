# Rutas del panel sin control de acceso, igual que en el sistema de origen.
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....infrastructure.db import get_db
from ....infrastructure.reports import ReportRepository
from ..errors import handler_boundary

router = APIRouter(prefix="/api/admin/dashboard", tags=["dashboard"])


@router.get("/cursos")
def upcoming_courses(db: Session = Depends(get_db)):
    with handler_boundary("dashboard_courses_failed", "Error al obtener próximos cursos"):
        return ReportRepository(db).upcoming_sections()


@router.get("/inscripciones")
def recent_enrollments(db: Session = Depends(get_db)):
    with handler_boundary("dashboard_enrollments_failed", "Error al obtener inscripciones recientes"):
        return ReportRepository(db).recent_enrollments()


@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_db)):
    with handler_boundary("dashboard_stats_failed", "Error al obtener estadísticas del dashboard"):
        return ReportRepository(db).dashboard_counters()
