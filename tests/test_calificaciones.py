import pytest
from unittest.mock import Mock

from sis_admin.application.use_cases.update_grade import UpdateGrade
from sis_admin.domain.errors import ValidationError
from sis_admin.infrastructure.models import Certificado, Inscripcion


def _enrollment(session_factory, enrollment_id):
    with session_factory() as s:
        row = s.get(Inscripcion, enrollment_id)
        return row.estado, row.calificacion_final, row.observaciones


def test_passing_grade_completes_active_enrollment(client, admin, academy, session_factory):
    response = client.put(
        f"/api/admin/calificaciones/{academy['activa_id']}",
        json={"calificacion_final": 75},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Calificación actualizada correctamente"}
    assert _enrollment(session_factory, academy["activa_id"])[:2] == ("completada", 75)


@pytest.mark.parametrize("grade", [-1, 100.01, 150])
def test_out_of_range_grade_is_rejected(client, admin, academy, session_factory, grade):
    response = client.put(
        f"/api/admin/calificaciones/{academy['activa_id']}",
        json={"calificacion_final": grade},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "La calificación debe estar entre 0 y 100"}
    assert _enrollment(session_factory, academy["activa_id"]) == ("activa", None, None)


@pytest.mark.parametrize("raw", [b"NaN", b"Infinity", b"-Infinity"])
def test_non_finite_grade_is_rejected(client, admin, academy, session_factory, raw):
    url = f"/api/admin/calificaciones/{academy['activa_id']}"
    assert client.put(url, json={"calificacion_final": 40}).status_code == 200

    response = client.put(
        url,
        content=b'{"calificacion_final": ' + raw + b"}",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "La calificación debe estar entre 0 y 100"}
    assert _enrollment(session_factory, academy["activa_id"]) == ("activa", 40, None)


@pytest.mark.parametrize("grade,estado", [(0, "activa"), (50.99, "activa"), (51, "completada"), (100, "completada")])
def test_grade_boundaries(client, admin, academy, session_factory, grade, estado):
    response = client.put(
        f"/api/admin/calificaciones/{academy['activa_id']}",
        json={"calificacion_final": grade},
    )
    assert response.status_code == 200
    assert _enrollment(session_factory, academy["activa_id"])[:2] == (estado, grade)


def test_repeating_a_passing_grade_is_idempotent(client, admin, academy, session_factory):
    url = f"/api/admin/calificaciones/{academy['activa_id']}"
    assert client.put(url, json={"calificacion_final": 80}).status_code == 200
    assert client.put(url, json={"calificacion_final": 80}).status_code == 200
    assert _enrollment(session_factory, academy["activa_id"])[:2] == ("completada", 80)


def test_passing_grade_does_not_change_pending_enrollment(client, admin, academy, session_factory):
    response = client.put(
        f"/api/admin/calificaciones/{academy['pendiente_id']}",
        json={"calificacion_final": 90},
    )
    assert response.status_code == 200
    assert _enrollment(session_factory, academy["pendiente_id"])[:2] == ("pendiente", 90)


def test_observations_are_stored(client, admin, academy, session_factory):
    response = client.put(
        f"/api/admin/calificaciones/{academy['activa_id']}",
        json={"calificacion_final": 45, "observaciones": "Debe repetir el laboratorio"},
    )
    assert response.status_code == 200
    assert _enrollment(session_factory, academy["activa_id"]) == ("activa", 45, "Debe repetir el laboratorio")


def test_missing_or_malformed_grade_is_invalid_data(client, admin, academy):
    url = f"/api/admin/calificaciones/{academy['activa_id']}"
    for body in ({}, {"calificacion_final": "mucho"}):
        response = client.put(url, json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Datos inválidos"}


def test_unknown_enrollment_is_a_silent_success(client, admin, academy):
    response = client.put("/api/admin/calificaciones/9999", json={"calificacion_final": 70})
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_list_grades_with_joined_details(client, admin, academy):
    response = client.get("/api/admin/calificaciones")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    # más reciente primero
    assert [r["inscripcion_id"] for r in body["data"]] == [academy["pendiente_id"], academy["activa_id"]]
    luis = body["data"][1]
    assert luis["estudiante_nombre"] == "Luis"
    assert luis["estudiante_apellido"] == "Pérez"
    assert luis["curso_codigo"] == "CCNA1"
    assert luis["paralelo_nombre"] == "A"
    assert luis["instructor_nombre"] == "Ana Torres"
    assert luis["certificado_generado"] is False
    assert luis["certificado_fecha"] is None


def test_list_grades_filters(client, admin, academy):
    def ids(**params):
        response = client.get("/api/admin/calificaciones", params=params)
        assert response.status_code == 200
        return [r["inscripcion_id"] for r in response.json()["data"]]

    assert ids(estado="activa") == [academy["activa_id"]]
    assert ids(estudiante_id=academy["maria_id"]) == [academy["pendiente_id"]]
    assert ids(curso_id=academy["curso_id"]) == [academy["pendiente_id"], academy["activa_id"]]
    assert ids(curso_id=9999) == []
    assert ids(fecha_inicio="2025-02-11") == [academy["pendiente_id"]]
    assert ids(fecha_fin="2025-02-11") == [academy["activa_id"]]


def test_list_grades_marks_issued_certificates(client, admin, academy, session_factory):
    with session_factory() as s:
        s.get(Inscripcion, academy["activa_id"]).calificacion_final = 88
        s.add(Certificado(
            inscripcion_id=academy["activa_id"],
            url_verificacion="http://localhost:3000/verificar-certificado/abc",
            codigo_verificacion="abc",
        ))
        s.commit()

    rows = {r["inscripcion_id"]: r for r in client.get("/api/admin/calificaciones").json()["data"]}
    assert rows[academy["activa_id"]]["certificado_generado"] is True
    assert rows[academy["activa_id"]]["certificado_fecha"] is not None
    assert rows[academy["pendiente_id"]]["certificado_generado"] is False


def test_grade_statistics(client, admin, academy, session_factory):
    with session_factory() as s:
        s.get(Inscripcion, academy["activa_id"]).calificacion_final = 80
        s.get(Inscripcion, academy["pendiente_id"]).estado = "completada"
        s.get(Inscripcion, academy["pendiente_id"]).calificacion_final = 40
        s.commit()

    response = client.get("/api/admin/calificaciones/estadisticas")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "total_estudiantes": 2,
            "promedio_general": 60.0,
            "aprobados": 1,
            "total_calificados": 2,
            "cursos_activos": 1,
            "tasa_aprobacion": 50.0,
        },
    }


def test_grade_statistics_without_grades(client, admin, academy):
    data = client.get("/api/admin/calificaciones/estadisticas").json()["data"]
    assert data["total_estudiantes"] == 1
    assert data["promedio_general"] is None
    assert data["total_calificados"] == 0
    assert data["tasa_aprobacion"] is None


def test_update_grade_commits_once():
    repo = Mock()
    repo.complete_if_active.return_value = 1

    assert UpdateGrade(repo).execute(7, 90, "Excelente") is True

    repo.set_grade.assert_called_once_with(7, 90, "Excelente")
    repo.complete_if_active.assert_called_once_with(7)
    repo.commit.assert_called_once()
    repo.rollback.assert_not_called()


def test_update_grade_failing_grade_skips_transition():
    repo = Mock()
    assert UpdateGrade(repo).execute(7, 30) is False
    repo.complete_if_active.assert_not_called()
    repo.commit.assert_called_once()


def test_update_grade_rolls_back_on_failure():
    repo = Mock()
    repo.complete_if_active.side_effect = RuntimeError("lock timeout")

    with pytest.raises(RuntimeError):
        UpdateGrade(repo).execute(7, 90)

    repo.rollback.assert_called_once()
    repo.commit.assert_not_called()


def test_update_grade_validates_before_writing():
    repo = Mock()
    with pytest.raises(ValidationError):
        UpdateGrade(repo).execute(7, 101)
    with pytest.raises(ValidationError):
        UpdateGrade(repo).execute(7, float("nan"))
    repo.set_grade.assert_not_called()
