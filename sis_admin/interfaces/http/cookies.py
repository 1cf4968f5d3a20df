"""Cookie de sesión: emisión en el login y borrado en el logout.

No existe lista de revocación en el servidor. Borrar la cookie solo la
invalida en el navegador; un token no expirado presentado por otra vía sigue
siendo válido hasta su expiración.
"""
from datetime import datetime, timezone

from fastapi import Response

from ...config import settings

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def cookie_opts() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict",
        "path": "/",
    }


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_HOURS * 60 * 60,
        **cookie_opts(),
    )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        expires=EPOCH,
        **cookie_opts(),
    )
