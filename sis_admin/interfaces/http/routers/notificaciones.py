import math

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ....domain.entities import AuthUser
from ....domain.errors import NotFoundError, ValidationError
from ....infrastructure.db import get_db
from ....infrastructure.repositories import NotificationRepository
from ..authz import require_admin
from ..errors import handler_boundary
from ..schemas import (
    MessageResp,
    NotificacionCreate,
    NotificacionCreated,
    NotificacionOut,
    NotificacionesPage,
    Pagination,
)

router = APIRouter(prefix="/api/notificaciones", tags=["notificaciones"])
logger = structlog.get_logger()


@router.get("", response_model=NotificacionesPage)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    unread: bool = Query(False),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_admin),
):
    with handler_boundary("notifications_list_failed"):
        repo = NotificationRepository(db)
        rows, total = repo.page_for_user(user.id, page, limit, only_unread=unread)
        unread_count = repo.count_unread(user.id)
    return NotificacionesPage(
        notifications=[NotificacionOut.model_validate(r) for r in rows],
        unreadCount=unread_count,
        pagination=Pagination(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit)),
    )


@router.post("", response_model=NotificacionCreated)
def create_notification(
    payload: NotificacionCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_admin),
):
    if not payload.titulo or not payload.mensaje or not payload.tipo:
        raise ValidationError("Título, mensaje y tipo son requeridos")

    with handler_boundary("notification_create_failed"):
        row = NotificationRepository(db).create(
            usuario_id=payload.usuario_id or user.id,
            titulo=payload.titulo,
            mensaje=payload.mensaje,
            tipo=payload.tipo,
            url_destino=payload.url_destino,
        )
    return NotificacionCreated(message="Notificación creada exitosamente", id=row.id)


@router.put("/read-all", response_model=MessageResp)
def mark_all_read(db: Session = Depends(get_db), user: AuthUser = Depends(require_admin)):
    with handler_boundary("notifications_read_all_failed"):
        updated = NotificationRepository(db).mark_all_read(user.id)
    logger.info("notifications_read_all", user_id=user.id, updated=updated)
    return MessageResp(message="Todas las notificaciones han sido marcadas como leídas")


@router.put("/{notification_id}/read", response_model=MessageResp)
def mark_read(notification_id: int, db: Session = Depends(get_db), user: AuthUser = Depends(require_admin)):
    with handler_boundary("notification_read_failed"):
        repo = NotificationRepository(db)
        # la búsqueda incluye al dueño: una notificación ajena se trata como inexistente
        row = repo.get_owned(notification_id, user.id)
        if not row:
            raise NotFoundError("Notificación no encontrada")
        repo.mark_read(row)
    return MessageResp(message="Notificación marcada como leída")


@router.delete("/{notification_id}", response_model=MessageResp)
def delete_notification(notification_id: int, db: Session = Depends(get_db), user: AuthUser = Depends(require_admin)):
    with handler_boundary("notification_delete_failed"):
        repo = NotificationRepository(db)
        row = repo.get_owned(notification_id, user.id)
        if not row:
            raise NotFoundError("Notificación no encontrada")
        repo.delete(row)
    logger.info("notification_deleted", user_id=user.id, notificacion_id=notification_id)
    return MessageResp(message="Notificación eliminada exitosamente")
