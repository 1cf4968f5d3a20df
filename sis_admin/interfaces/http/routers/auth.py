import structlog
from fastapi import APIRouter, Depends, Request, Response
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from ....config import settings
from ....domain.errors import AuthenticationError, ValidationError
from ....infrastructure.db import get_db
from ....infrastructure.rate_limit import limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token, decode_token
from ..authz import get_session_token
from ..cookies import clear_session_cookie, set_session_cookie
from ..errors import handler_boundary
from ..schemas import LoginReq, LoginResp, MessageResp, SessionUser, VerifyResp

router = APIRouter(prefix="/api", tags=["auth"])
logger = structlog.get_logger()


@router.post("/login", response_model=LoginResp)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, response: Response, payload: LoginReq, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if not email or not payload.password:
        raise ValidationError("Email y contraseña son requeridos")

    with handler_boundary("login_failed", "Error en el servidor"):
        repo = UserRepository(db)
        row = repo.get_by_email(email)
        # usuario inexistente, contraseña errónea o cuenta inactiva: misma respuesta
        if not row or not row.activo or not PasswordHasher().verify(payload.password, row.contrasena_hash):
            logger.info("login_rejected", email=email)
            raise AuthenticationError("Credenciales inválidas")

        repo.touch_last_access(row)
        profile = repo.get_profile(row.id)
        token = create_access_token(row.id, row.email, row.rol)

    set_session_cookie(response, token)
    logger.info("login_succeeded", user_id=row.id, rol=row.rol)
    return LoginResp(user=SessionUser(**profile))


@router.post("/logout", response_model=MessageResp)
def logout(response: Response):
    clear_session_cookie(response)
    return MessageResp(message="Sesión cerrada correctamente")


@router.get("/verify", response_model=VerifyResp)
def verify(response: Response, token: str | None = Depends(get_session_token), db: Session = Depends(get_db)):
    if not token:
        return VerifyResp(message="No hay token de autenticación")

    try:
        user_id = decode_token(token)
    except ExpiredSignatureError:
        clear_session_cookie(response)
        return VerifyResp(message="Token expirado")
    except JWTError:
        clear_session_cookie(response)
        return VerifyResp(message="Token inválido")

    with handler_boundary("verify_failed", "Error de autenticación"):
        profile = UserRepository(db).get_profile(user_id)
    if not profile:
        clear_session_cookie(response)
        return VerifyResp(message="Usuario no encontrado o inactivo")
    return VerifyResp(user=SessionUser(**profile))
