from datetime import datetime
from pydantic import BaseModel

class LoginReq(BaseModel):
    email: str = ""
    password: str = ""

class SessionUser(BaseModel):
    id: int
    email: str
    rol: str
    nombre: str | None = None
    apellido: str | None = None
    foto_perfil: str | None = None

class LoginResp(BaseModel):
    success: bool = True
    user: SessionUser

class VerifyResp(BaseModel):
    user: SessionUser | None = None
    message: str | None = None

class MessageResp(BaseModel):
    message: str

class SuccessResp(BaseModel):
    success: bool = True
    message: str

class GradeUpdate(BaseModel):
    calificacion_final: float
    observaciones: str | None = None

class NotificacionCreate(BaseModel):
    titulo: str | None = None
    mensaje: str | None = None
    tipo: str | None = None
    url_destino: str | None = None
    usuario_id: int | None = None

class NotificacionOut(BaseModel):
    id: int
    usuario_id: int
    titulo: str
    mensaje: str
    tipo: str
    url_destino: str | None = None
    leida: bool
    fecha_creacion: datetime
    class Config: from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

class NotificacionesPage(BaseModel):
    notifications: list[NotificacionOut]
    unreadCount: int
    pagination: Pagination

class NotificacionCreated(BaseModel):
    message: str
    id: int
