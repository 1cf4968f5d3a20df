"""Consultas agregadas para estadísticas y el panel de administración."""
from datetime import date, datetime, timedelta

from sqlalchemy import and_, case, distinct, func, select
from sqlalchemy.orm import Session

from .metrics import db_queries_total
from .models import Certificado, Curso, Estudiante, Inscripcion, Instructor, Paralelo
from ..domain.entities import EstadoInscripcion, PASSING_GRADE

EN_CURSO = (EstadoInscripcion.ACTIVA.value, EstadoInscripcion.COMPLETADA.value)


def _percentage(part: int, total: int, digits: int = 1) -> float:
    return round(part * 100.0 / total, digits) if total else 0


class ReportRepository:
    def __init__(self, db: Session): self.db = db

    def grade_statistics(self) -> dict:
        graded = Inscripcion.calificacion_final.is_not(None)
        passed = Inscripcion.calificacion_final >= PASSING_GRADE
        stmt = (
            select(
                func.count(distinct(Inscripcion.estudiante_id)).label("total_estudiantes"),
                func.avg(Inscripcion.calificacion_final).label("promedio_general"),
                func.count(case((passed, 1))).label("aprobados"),
                func.count(case((graded, 1))).label("total_calificados"),
                func.count(distinct(Paralelo.curso_id)).label("cursos_activos"),
            )
            .select_from(Inscripcion)
            .join(Paralelo, Inscripcion.paralelo_id == Paralelo.id)
            .where(Inscripcion.estado.in_(EN_CURSO))
        )
        db_queries_total.inc()
        row = dict(self.db.execute(stmt).mappings().one())
        promedio = row["promedio_general"]
        row["promedio_general"] = round(float(promedio), 2) if promedio is not None else None
        row["tasa_aprobacion"] = (
            _percentage(row["aprobados"], row["total_calificados"], 2) if row["total_calificados"] else None
        )
        return row

    def certificate_statistics(self) -> dict:
        issued = Certificado.id.is_not(None)
        passed = Inscripcion.calificacion_final >= PASSING_GRADE
        stmt = (
            select(
                func.count(case((issued, 1))).label("certificados_emitidos"),
                func.count(case((and_(passed, Certificado.id.is_(None)), 1))).label("certificados_pendientes"),
                func.count(distinct(case((issued, Inscripcion.estudiante_id)))).label("estudiantes_certificados"),
                func.count(distinct(case((passed, Paralelo.curso_id)))).label("cursos_certificables"),
            )
            .select_from(Inscripcion)
            .join(Paralelo, Inscripcion.paralelo_id == Paralelo.id)
            .outerjoin(Certificado, Certificado.inscripcion_id == Inscripcion.id)
            .where(Inscripcion.estado.in_(EN_CURSO))
        )
        db_queries_total.inc()
        return dict(self.db.execute(stmt).mappings().one())

    def upcoming_sections(self, limit: int = 3, today: date | None = None) -> list[dict]:
        enrolled = (
            select(func.count(Inscripcion.id))
            .where(Inscripcion.paralelo_id == Paralelo.id)
            .correlate(Paralelo)
            .scalar_subquery()
        )
        stmt = (
            select(
                Paralelo.id,
                Curso.nombre.label("name"),
                Paralelo.fecha_inicio.label("start"),
                (Instructor.nombre + " " + Instructor.apellido).label("instructor"),
                enrolled.label("enrolled"),
                Paralelo.max_estudiantes.label("capacity"),
            )
            .join(Curso, Paralelo.curso_id == Curso.id)
            .join(Instructor, Paralelo.instructor_id == Instructor.id)
            .where(Paralelo.fecha_inicio > (today or date.today()), Paralelo.estado == "planificado")
            .order_by(Paralelo.fecha_inicio.asc())
            .limit(limit)
        )
        db_queries_total.inc()
        return [dict(r) for r in self.db.execute(stmt).mappings().all()]

    def recent_enrollments(self, limit: int = 5) -> list[dict]:
        stmt = (
            select(
                Inscripcion.id,
                (Estudiante.nombre + " " + Estudiante.apellido).label("student"),
                Curso.nombre.label("course"),
                Inscripcion.fecha_inscripcion.label("date"),
                Inscripcion.estado.label("status"),
            )
            .join(Estudiante, Inscripcion.estudiante_id == Estudiante.id)
            .join(Paralelo, Inscripcion.paralelo_id == Paralelo.id)
            .join(Curso, Paralelo.curso_id == Curso.id)
            .order_by(Inscripcion.fecha_inscripcion.desc(), Inscripcion.id.desc())
            .limit(limit)
        )
        db_queries_total.inc()
        return [dict(r) for r in self.db.execute(stmt).mappings().all()]

    def dashboard_counters(self, now: datetime | None = None) -> dict:
        since = (now or datetime.now()) - timedelta(days=30)

        estudiantes = self.db.execute(
            select(
                func.count(Estudiante.id).label("total"),
                func.count(case((Estudiante.fecha_registro >= since, 1))).label("nuevos"),
            ).where(Estudiante.estado == "activo")
        ).mappings().one()

        cursos = self.db.execute(
            select(
                func.count(Curso.id).label("total"),
                func.count(case((Curso.estado == "disponible", 1))).label("activos"),
            )
        ).mappings().one()

        inscripciones = self.db.execute(
            select(
                func.count(Inscripcion.id).label("total"),
                func.count(case((Inscripcion.estado == EstadoInscripcion.ACTIVA.value, 1))).label("activas"),
                func.count(case((Inscripcion.estado == EstadoInscripcion.PENDIENTE.value, 1))).label("pendientes"),
            )
        ).mappings().one()
        db_queries_total.inc(3)

        return {
            "estudiantes": {
                "total": estudiantes["total"],
                "nuevos": estudiantes["nuevos"],
                "porcentaje": _percentage(estudiantes["nuevos"], estudiantes["total"]),
            },
            "cursos": {
                "total": cursos["total"],
                "activos": cursos["activos"],
                "porcentaje": _percentage(cursos["activos"], cursos["total"]),
            },
            "inscripciones": {
                "total": inscripciones["total"],
                "activas": inscripciones["activas"],
                "pendientes": inscripciones["pendientes"],
                "porcentaje": _percentage(inscripciones["pendientes"], inscripciones["total"]),
            },
        }
