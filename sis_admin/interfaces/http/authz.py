import structlog
from fastapi import Depends, Request
from jose import JWTError
from sqlalchemy.orm import Session

from ...config import settings
from ...domain.entities import AuthUser, Rol
from ...domain.errors import AuthenticationError, InternalError
from ...infrastructure.db import get_db
from ...infrastructure.metrics import auth_failures_total
from ...infrastructure.repositories import UserRepository
from ...infrastructure.security import decode_token

logger = structlog.get_logger()


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def verify_session_token(token: str | None, db: Session, roles: frozenset[Rol]) -> AuthUser:
    """Valida el token de la cookie y vuelve a comprobar al usuario en la base.

    Los fallos no distinguen entre token expirado, alterado o usuario inexistente.
    """
    if not token:
        auth_failures_total.labels(reason="missing").inc()
        raise AuthenticationError("Token no encontrado")
    try:
        user_id = decode_token(token)
    except JWTError:
        auth_failures_total.labels(reason="invalid").inc()
        raise AuthenticationError("Token inválido")
    try:
        user = UserRepository(db).get_authorized(user_id, roles)
    except Exception as exc:
        logger.error("auth_lookup_failed", user_id=user_id, error=str(exc), exc_info=True)
        raise InternalError("Error interno de autenticación") from exc
    if not user:
        auth_failures_total.labels(reason="unauthorized").inc()
        raise AuthenticationError("Usuario no autorizado")
    return user


def require_role(*roles: Rol):
    allowed = frozenset(roles)

    def dependency(token: str | None = Depends(get_session_token), db: Session = Depends(get_db)) -> AuthUser:
        return verify_session_token(token, db, allowed)

    return dependency


require_admin = require_role(Rol.ADMIN)
