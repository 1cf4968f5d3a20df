from datetime import date, datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from .metrics import db_queries_total
from .models import (
    Certificado,
    Curso,
    Estudiante,
    Inscripcion,
    Instructor,
    Notificacion,
    Paralelo,
    Usuario,
)
from ..domain.entities import AuthUser, EstadoInscripcion, PASSING_GRADE, Rol


def to_auth_user(u: Usuario) -> AuthUser:
    return AuthUser(id=u.id, email=u.email, rol=Rol(u.rol))


class UserRepository:
    def __init__(self, db: Session): self.db = db

    def get_by_email(self, email: str) -> Usuario | None:
        db_queries_total.inc()
        return self.db.query(Usuario).filter(Usuario.email == email.strip().lower()).first()

    def get_authorized(self, user_id: int, roles: frozenset[Rol]) -> AuthUser | None:
        """Usuario activo con uno de los roles dados, o None."""
        db_queries_total.inc()
        row = (
            self.db.query(Usuario)
            .filter(
                Usuario.id == user_id,
                Usuario.rol.in_([r.value for r in roles]),
                Usuario.activo.is_(True),
            )
            .first()
        )
        return to_auth_user(row) if row else None

    def get_profile(self, user_id: int) -> dict | None:
        """Datos de sesión de un usuario activo, con nombre tomado de su perfil."""
        db_queries_total.inc()
        stmt = (
            select(
                Usuario.id,
                Usuario.email,
                Usuario.rol,
                func.coalesce(Estudiante.nombre, Instructor.nombre).label("nombre"),
                func.coalesce(Estudiante.apellido, Instructor.apellido).label("apellido"),
                func.coalesce(Estudiante.foto_perfil, Instructor.foto_perfil).label("foto_perfil"),
            )
            .outerjoin(Estudiante, Estudiante.usuario_id == Usuario.id)
            .outerjoin(Instructor, Instructor.usuario_id == Usuario.id)
            .where(Usuario.id == user_id, Usuario.activo.is_(True))
        )
        row = self.db.execute(stmt).mappings().first()
        return dict(row) if row else None

    def touch_last_access(self, user: Usuario) -> None:
        user.ultimo_acceso = datetime.now()
        self.db.commit()


class EnrollmentRepository:
    """Consultas sobre inscripcion. Las escrituras no confirman; llamar a commit()."""

    def __init__(self, db: Session): self.db = db

    def commit(self) -> None: self.db.commit()
    def rollback(self) -> None: self.db.rollback()

    def set_grade(self, enrollment_id: int, calificacion: float, observaciones: str | None = None) -> None:
        values = {"calificacion_final": calificacion}
        if observaciones is not None:
            values["observaciones"] = observaciones
        db_queries_total.inc()
        self.db.execute(update(Inscripcion).where(Inscripcion.id == enrollment_id).values(**values))

    def complete_if_active(self, enrollment_id: int) -> int:
        db_queries_total.inc()
        result = self.db.execute(
            update(Inscripcion)
            .where(
                Inscripcion.id == enrollment_id,
                Inscripcion.estado == EstadoInscripcion.ACTIVA.value,
            )
            .values(estado=EstadoInscripcion.COMPLETADA.value)
        )
        return result.rowcount

    def get_passing(self, enrollment_id: int) -> dict | None:
        db_queries_total.inc()
        stmt = (
            select(
                Inscripcion.id,
                Inscripcion.calificacion_final,
                Inscripcion.estudiante_id,
                Estudiante.nombre.label("estudiante_nombre"),
                Estudiante.apellido.label("estudiante_apellido"),
                Curso.nombre.label("curso_nombre"),
                Curso.codigo.label("curso_codigo"),
            )
            .join(Estudiante, Inscripcion.estudiante_id == Estudiante.id)
            .join(Paralelo, Inscripcion.paralelo_id == Paralelo.id)
            .join(Curso, Paralelo.curso_id == Curso.id)
            .where(Inscripcion.id == enrollment_id, Inscripcion.calificacion_final >= PASSING_GRADE)
        )
        row = self.db.execute(stmt).mappings().first()
        return dict(row) if row else None

    def _listing(self):
        return (
            select(
                Inscripcion.id.label("inscripcion_id"),
                Inscripcion.calificacion_final,
                Inscripcion.estado,
                Inscripcion.fecha_inscripcion,
                Inscripcion.observaciones,
                Estudiante.id.label("estudiante_id"),
                Estudiante.nombre.label("estudiante_nombre"),
                Estudiante.apellido.label("estudiante_apellido"),
                Estudiante.email.label("estudiante_email"),
                Curso.id.label("curso_id"),
                Curso.nombre.label("curso_nombre"),
                Curso.codigo.label("curso_codigo"),
                Paralelo.nombre_paralelo.label("paralelo_nombre"),
                (Instructor.nombre + " " + Instructor.apellido).label("instructor_nombre"),
                Certificado.id.label("certificado_id"),
                Certificado.url_verificacion,
                Certificado.fecha_emision,
                Certificado.firmado_admin,
            )
            .join(Estudiante, Inscripcion.estudiante_id == Estudiante.id)
            .join(Paralelo, Inscripcion.paralelo_id == Paralelo.id)
            .join(Curso, Paralelo.curso_id == Curso.id)
            .outerjoin(Instructor, Paralelo.instructor_id == Instructor.id)
            .outerjoin(Certificado, Certificado.inscripcion_id == Inscripcion.id)
        )

    def _filtered(
        self,
        stmt,
        curso_id: int | None = None,
        estudiante_id: int | None = None,
        fecha_inicio: date | None = None,
        fecha_fin: date | None = None,
    ):
        if curso_id:
            stmt = stmt.where(Curso.id == curso_id)
        if estudiante_id:
            stmt = stmt.where(Estudiante.id == estudiante_id)
        if fecha_inicio:
            stmt = stmt.where(Inscripcion.fecha_inscripcion >= fecha_inicio)
        if fecha_fin:
            stmt = stmt.where(Inscripcion.fecha_inscripcion <= fecha_fin)
        return stmt.order_by(Inscripcion.fecha_inscripcion.desc(), Inscripcion.id.desc())

    def list_grades(self, estado: str | None = None, **filters) -> list[dict]:
        stmt = self._listing()
        if estado:
            stmt = stmt.where(Inscripcion.estado == estado)
        db_queries_total.inc()
        rows = self.db.execute(self._filtered(stmt, **filters)).mappings().all()
        return [
            {**row, "certificado_generado": row["certificado_id"] is not None, "certificado_fecha": row["fecha_emision"]}
            for row in rows
        ]

    def list_certifications(self, estado: str | None = None, **filters) -> list[dict]:
        stmt = self._listing().where(Inscripcion.calificacion_final >= PASSING_GRADE)
        if estado == "pendiente":
            stmt = stmt.where(Certificado.id.is_(None))
        elif estado == "emitido":
            stmt = stmt.where(Certificado.id.is_not(None))
        db_queries_total.inc()
        rows = self.db.execute(self._filtered(stmt, **filters)).mappings().all()
        return [
            {**row, "estado_certificacion": "emitido" if row["certificado_id"] is not None else "pendiente"}
            for row in rows
        ]


class CertificateRepository:
    def __init__(self, db: Session): self.db = db

    def commit(self) -> None: self.db.commit()

    def exists_for(self, enrollment_id: int) -> bool:
        db_queries_total.inc()
        return self.db.query(Certificado.id).filter(Certificado.inscripcion_id == enrollment_id).first() is not None

    def create(self, enrollment_id: int, url_verificacion: str, codigo: str) -> Certificado:
        row = Certificado(
            inscripcion_id=enrollment_id,
            fecha_emision=datetime.now(),
            url_verificacion=url_verificacion,
            codigo_verificacion=codigo,
            firmado_admin=True,
        )
        db_queries_total.inc()
        self.db.add(row); self.db.flush()
        return row


class NotificationRepository:
    def __init__(self, db: Session): self.db = db

    def _scope(self, user_id: int, only_unread: bool = False):
        q = self.db.query(Notificacion).filter(Notificacion.usuario_id == user_id)
        if only_unread:
            q = q.filter(Notificacion.leida.is_(False))
        return q

    def page_for_user(self, user_id: int, page: int, limit: int, only_unread: bool = False) -> tuple[list[Notificacion], int]:
        db_queries_total.inc(2)
        q = self._scope(user_id, only_unread)
        total = q.count()
        rows = (
            q.order_by(Notificacion.fecha_creacion.desc(), Notificacion.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
            .all()
        )
        return rows, total

    def count_unread(self, user_id: int) -> int:
        db_queries_total.inc()
        return self._scope(user_id, only_unread=True).count()

    def create(self, usuario_id: int, titulo: str, mensaje: str, tipo: str, url_destino: str | None = None) -> Notificacion:
        row = Notificacion(usuario_id=usuario_id, titulo=titulo, mensaje=mensaje, tipo=tipo, url_destino=url_destino)
        db_queries_total.inc()
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return row

    def get_owned(self, notification_id: int, user_id: int) -> Notificacion | None:
        db_queries_total.inc()
        return (
            self.db.query(Notificacion)
            .filter(Notificacion.id == notification_id, Notificacion.usuario_id == user_id)
            .first()
        )

    def mark_read(self, row: Notificacion) -> None:
        db_queries_total.inc()
        row.leida = True
        self.db.commit()

    def delete(self, row: Notificacion) -> None:
        db_queries_total.inc()
        self.db.delete(row); self.db.commit()

    def mark_all_read(self, user_id: int) -> int:
        db_queries_total.inc()
        result = self.db.execute(
            update(Notificacion)
            .where(Notificacion.usuario_id == user_id, Notificacion.leida.is_(False))
            .values(leida=True)
        )
        self.db.commit()
        return result.rowcount
