from contextlib import contextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from ...domain.errors import AppError, InternalError

logger = structlog.get_logger()


@contextmanager
def handler_boundary(event: str, message: str = "Error interno del servidor"):
    """Convierte cualquier fallo inesperado del cuerpo de un handler en InternalError."""
    try:
        yield
    except AppError:
        raise
    except Exception as exc:
        logger.error(event, error=str(exc), exc_info=True)
        raise InternalError(message) from exc


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse({"error": "Datos inválidos"}, status_code=400)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate_limited", path=request.url.path, limit=str(exc.detail))
    return JSONResponse({"error": "Demasiadas solicitudes, intente más tarde"}, status_code=429)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse({"error": "Error interno del servidor"}, status_code=500)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
