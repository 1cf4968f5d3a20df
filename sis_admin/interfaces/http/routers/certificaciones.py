from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ....application.use_cases.issue_certificate import IssueCertificate
from ....config import settings
from ....domain.entities import AuthUser
from ....infrastructure.db import get_db
from ....infrastructure.reports import ReportRepository
from ....infrastructure.repositories import CertificateRepository, EnrollmentRepository
from ..authz import require_admin
from ..errors import handler_boundary

router = APIRouter(prefix="/api/admin/certificaciones", tags=["certificaciones"])


@router.get("")
def list_certifications(
    curso_id: int | None = Query(None),
    estudiante_id: int | None = Query(None),
    estado: str | None = Query(None, pattern="^(emitido|pendiente)$"),
    fecha_inicio: date | None = Query(None),
    fecha_fin: date | None = Query(None),
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_admin),
):
    with handler_boundary("certifications_list_failed"):
        rows = EnrollmentRepository(db).list_certifications(
            estado=estado,
            curso_id=curso_id,
            estudiante_id=estudiante_id,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
        )
    return {"success": True, "data": rows}


@router.get("/estadisticas")
def certificate_statistics(db: Session = Depends(get_db), _: AuthUser = Depends(require_admin)):
    with handler_boundary("certificate_statistics_failed"):
        data = ReportRepository(db).certificate_statistics()
    return {"success": True, "data": data}


@router.post("/generar/{enrollment_id}")
def issue_certificate(enrollment_id: int, db: Session = Depends(get_db), _: AuthUser = Depends(require_admin)):
    uc = IssueCertificate(
        enrollments=EnrollmentRepository(db),
        certificates=CertificateRepository(db),
        app_url=settings.APP_URL,
    )
    with handler_boundary("certificate_issue_failed"):
        data = uc.execute(enrollment_id)
    return {"success": True, "message": "Certificado generado correctamente", "data": data}
