from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ....application.use_cases.update_grade import UpdateGrade
from ....domain.entities import AuthUser
from ....infrastructure.db import get_db
from ....infrastructure.reports import ReportRepository
from ....infrastructure.repositories import EnrollmentRepository
from ..authz import require_admin
from ..errors import handler_boundary
from ..schemas import GradeUpdate, SuccessResp

router = APIRouter(prefix="/api/admin/calificaciones", tags=["calificaciones"])


@router.get("")
def list_grades(
    curso_id: int | None = Query(None),
    estudiante_id: int | None = Query(None),
    estado: str | None = Query(None),
    fecha_inicio: date | None = Query(None),
    fecha_fin: date | None = Query(None),
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_admin),
):
    with handler_boundary("grades_list_failed"):
        rows = EnrollmentRepository(db).list_grades(
            estado=estado,
            curso_id=curso_id,
            estudiante_id=estudiante_id,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
        )
    return {"success": True, "data": rows}


@router.get("/estadisticas")
def grade_statistics(db: Session = Depends(get_db), _: AuthUser = Depends(require_admin)):
    with handler_boundary("grade_statistics_failed"):
        data = ReportRepository(db).grade_statistics()
    return {"success": True, "data": data}


@router.put("/{enrollment_id}", response_model=SuccessResp)
def update_grade(
    enrollment_id: int,
    payload: GradeUpdate,
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_admin),
):
    with handler_boundary("grade_update_failed"):
        UpdateGrade(repo=EnrollmentRepository(db)).execute(
            enrollment_id, payload.calificacion_final, payload.observaciones
        )
    return SuccessResp(message="Calificación actualizada correctamente")
