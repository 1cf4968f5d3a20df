import secrets

import structlog

from ...domain.errors import NotFoundError, ValidationError

logger = structlog.get_logger()


class IEnrollmentLookup:
    def get_passing(self, enrollment_id: int) -> dict | None: ...


class ICertificateRepository:
    def exists_for(self, enrollment_id: int) -> bool: ...
    def create(self, enrollment_id: int, url_verificacion: str, codigo: str): ...
    def commit(self) -> None: ...


class IssueCertificate:
    def __init__(self, enrollments: IEnrollmentLookup, certificates: ICertificateRepository, app_url: str):
        self.enrollments = enrollments
        self.certificates = certificates
        self.app_url = app_url.rstrip("/")

    def execute(self, enrollment_id: int) -> dict:
        if not self.enrollments.get_passing(enrollment_id):
            raise NotFoundError("Inscripción no encontrada o estudiante no aprobó el curso")
        if self.certificates.exists_for(enrollment_id):
            raise ValidationError("Ya existe un certificado para esta inscripción")

        codigo = secrets.token_hex(16)
        url = f"{self.app_url}/verificar-certificado/{codigo}"
        row = self.certificates.create(enrollment_id, url, codigo)
        self.certificates.commit()
        logger.info("certificate_issued", inscripcion_id=enrollment_id, certificado_id=row.id)
        return {
            "certificado_id": row.id,
            "url_verificacion": url,
            "codigo_verificacion": codigo,
        }
