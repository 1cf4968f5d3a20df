# sis_admin/infrastructure/models.py
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

class UsuarioORM(Base):
    __tablename__ = "usuario"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    contrasena_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    rol: Mapped[str] = mapped_column(String(32), nullable=False, default="estudiante")
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    ultimo_acceso: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"UsuarioORM(id={self.id!r}, email={self.email!r}, rol={self.rol!r})"

class EstudianteORM(Base):
    __tablename__ = "estudiante"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    usuario_id: Mapped[int | None] = mapped_column(ForeignKey("usuario.id"), nullable=True, index=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    apellido: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    foto_perfil: Mapped[str | None] = mapped_column(String(500), nullable=True)
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="activo")
    fecha_registro: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"EstudianteORM(id={self.id!r}, nombre={self.nombre!r}, apellido={self.apellido!r})"

class InstructorORM(Base):
    __tablename__ = "instructor"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    usuario_id: Mapped[int | None] = mapped_column(ForeignKey("usuario.id"), nullable=True, index=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    apellido: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    foto_perfil: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"InstructorORM(id={self.id!r}, nombre={self.nombre!r}, apellido={self.apellido!r})"

class CursoORM(Base):
    __tablename__ = "curso"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    codigo: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    nombre: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="disponible")

    def __repr__(self) -> str:
        return f"CursoORM(id={self.id!r}, codigo={self.codigo!r})"

class ParaleloORM(Base):
    __tablename__ = "paralelo"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    curso_id: Mapped[int] = mapped_column(ForeignKey("curso.id"), nullable=False, index=True)
    instructor_id: Mapped[int | None] = mapped_column(ForeignKey("instructor.id"), nullable=True, index=True)
    nombre_paralelo: Mapped[str] = mapped_column(String(50), nullable=False)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    max_estudiantes: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="planificado")

    def __repr__(self) -> str:
        return f"ParaleloORM(id={self.id!r}, curso_id={self.curso_id!r}, nombre={self.nombre_paralelo!r})"

class InscripcionORM(Base):
    __tablename__ = "inscripcion"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    estudiante_id: Mapped[int] = mapped_column(ForeignKey("estudiante.id"), nullable=False, index=True)
    paralelo_id: Mapped[int] = mapped_column(ForeignKey("paralelo.id"), nullable=False, index=True)
    fecha_inscripcion: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="pendiente")
    calificacion_final: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    observaciones: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"InscripcionORM(id={self.id!r}, estado={self.estado!r}, calificacion={self.calificacion_final!r})"

class NotificacionORM(Base):
    __tablename__ = "notificacion"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    usuario_id: Mapped[int] = mapped_column(ForeignKey("usuario.id"), nullable=False, index=True)
    titulo: Mapped[str] = mapped_column(String(255), nullable=False)
    mensaje: Mapped[str] = mapped_column(Text, nullable=False)
    tipo: Mapped[str] = mapped_column(String(50), nullable=False)
    url_destino: Mapped[str | None] = mapped_column(String(500), nullable=True)
    leida: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    fecha_creacion: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"NotificacionORM(id={self.id!r}, usuario_id={self.usuario_id!r}, leida={self.leida!r})"

class CertificadoORM(Base):
    __tablename__ = "certificado"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    inscripcion_id: Mapped[int] = mapped_column(
        ForeignKey("inscripcion.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    fecha_emision: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())
    url_verificacion: Mapped[str] = mapped_column(String(500), nullable=False)
    codigo_verificacion: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    firmado_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"CertificadoORM(id={self.id!r}, inscripcion_id={self.inscripcion_id!r})"

Usuario = UsuarioORM
Estudiante = EstudianteORM
Instructor = InstructorORM
Curso = CursoORM
Paralelo = ParaleloORM
Inscripcion = InscripcionORM
Notificacion = NotificacionORM
Certificado = CertificadoORM

__all__ = [
    "Base",
    "Usuario",
    "Estudiante",
    "Instructor",
    "Curso",
    "Paralelo",
    "Inscripcion",
    "Notificacion",
    "Certificado",
]
