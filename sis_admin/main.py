import time
import logging
import structlog
from fastapi import FastAPI, Request
from sqlalchemy import text

from .infrastructure.db import engine
from .infrastructure.models import Base
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .infrastructure.rate_limit import limiter
from .interfaces.http.errors import register_error_handlers
from .interfaces.http.routers import (
    auth as auth_router,
    calificaciones as calificaciones_router,
    certificaciones as certificaciones_router,
    dashboard as dashboard_router,
    notificaciones as notificaciones_router,
)
from .config import settings

# Logging estructurado en JSON
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(title="SIS Admin API", version="0.1.0")
app.state.limiter = limiter
register_error_handlers(app)

# Codificación de respuestas JSON, métricas y log de cada petición
@app.middleware("http")
async def add_charset_header(request: Request, call_next):
    start_time = time.time()
    method = request.method
    path = request.url.path
    # una excepción sin manejar sale de call_next y termina en 500
    status_code = 500

    try:
        response = await call_next(request)
        status_code = response.status_code
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response
    finally:
        duration = time.time() - start_time
        # plantilla de la ruta, no la URL con ids
        route = request.scope.get("route")
        endpoint = getattr(route, "path", path)
        http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        logger.info(
            "http_request",
            method=method,
            path=path,
            endpoint=endpoint,
            status_code=status_code,
            duration_ms=round(duration * 1000, 2)
        )


@app.on_event("startup")
def on_startup():
    logger.info("Starting SIS admin service", version="0.1.0", environment=settings.ENVIRONMENT)
    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    """Métricas de Prometheus"""
    return metrics_endpoint()


app.include_router(auth_router.router)
app.include_router(calificaciones_router.router)
app.include_router(certificaciones_router.router)
app.include_router(dashboard_router.router)
app.include_router(notificaciones_router.router)
