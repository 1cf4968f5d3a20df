import os
import sys
from datetime import date, datetime

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Antes de importar la app: la configuración se lee una sola vez
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sis_admin.config import settings
from sis_admin.infrastructure.db import get_db
from sis_admin.infrastructure.models import (
    Base,
    Curso,
    Estudiante,
    Inscripcion,
    Instructor,
    Notificacion,
    Paralelo,
    Usuario,
)
from sis_admin.infrastructure.rate_limit import limiter
from sis_admin.infrastructure.security import PasswordHasher, create_access_token
from sis_admin.main import app

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PASSWORD = "secret123"
PASSWORD_HASH = PasswordHasher().hash(PASSWORD)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db
limiter.enabled = False


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    test_client = TestClient(app)
    yield test_client
    test_client.cookies.clear()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory(client):
    """Sesiones nuevas sobre la base de pruebas (las tablas ya existen)."""
    return TestingSessionLocal


@pytest.fixture
def make_user(session_factory):
    def _make_user(email="admin@academia.test", rol="admin", activo=True, nombre=None, apellido=None):
        with session_factory() as s:
            user = Usuario(email=email, contrasena_hash=PASSWORD_HASH, rol=rol, activo=activo)
            s.add(user)
            s.flush()
            if nombre and rol == "estudiante":
                s.add(Estudiante(usuario_id=user.id, nombre=nombre, apellido=apellido or "", email=email))
            elif nombre and rol == "instructor":
                s.add(Instructor(usuario_id=user.id, nombre=nombre, apellido=apellido or "", email=email))
            s.commit()
            return user.id
    return _make_user


@pytest.fixture
def login_as(client):
    """Coloca en el cliente la cookie de sesión de un usuario."""
    def _login_as(user_id, email="admin@academia.test", rol="admin", **kwargs):
        token = create_access_token(user_id, email, rol, **kwargs)
        client.cookies.set(settings.SESSION_COOKIE_NAME, token)
        return token
    return _login_as


@pytest.fixture
def admin(make_user, login_as):
    user_id = make_user()
    login_as(user_id)
    return user_id


@pytest.fixture
def academy(session_factory):
    """Un curso con un paralelo, dos estudiantes y sus inscripciones."""
    with session_factory() as s:
        curso = Curso(codigo="CCNA1", nombre="CCNA 1", estado="disponible")
        instructor = Instructor(nombre="Ana", apellido="Torres", email="ana@academia.test")
        s.add_all([curso, instructor])
        s.flush()
        paralelo = Paralelo(
            curso_id=curso.id,
            instructor_id=instructor.id,
            nombre_paralelo="A",
            fecha_inicio=date(2025, 3, 1),
            max_estudiantes=25,
            estado="en_curso",
        )
        luis = Estudiante(nombre="Luis", apellido="Pérez", email="luis@academia.test")
        maria = Estudiante(nombre="María", apellido="Gómez", email="maria@academia.test")
        s.add_all([paralelo, luis, maria])
        s.flush()
        activa = Inscripcion(
            estudiante_id=luis.id,
            paralelo_id=paralelo.id,
            estado="activa",
            fecha_inscripcion=datetime(2025, 2, 10, 9, 0),
        )
        pendiente = Inscripcion(
            estudiante_id=maria.id,
            paralelo_id=paralelo.id,
            estado="pendiente",
            fecha_inscripcion=datetime(2025, 2, 12, 9, 0),
        )
        s.add_all([activa, pendiente])
        s.commit()
        return {
            "curso_id": curso.id,
            "instructor_id": instructor.id,
            "paralelo_id": paralelo.id,
            "luis_id": luis.id,
            "maria_id": maria.id,
            "activa_id": activa.id,
            "pendiente_id": pendiente.id,
        }


@pytest.fixture
def make_notification(session_factory):
    def _make_notification(usuario_id, titulo="Aviso", leida=False, fecha=None):
        with session_factory() as s:
            row = Notificacion(
                usuario_id=usuario_id,
                titulo=titulo,
                mensaje=f"Mensaje de {titulo}",
                tipo="sistema",
                leida=leida,
                fecha_creacion=fecha or datetime(2025, 1, 1, 12, 0),
            )
            s.add(row)
            s.commit()
            return row.id
    return _make_notification
