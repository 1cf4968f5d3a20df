from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from ..config import settings

# bcrypt simple sigue aceptándose para verificar hashes heredados
pwd = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__truncate_error=False,
)

class PasswordHasher:
    def hash(self, plain: str) -> str: return pwd.hash(plain)
    def verify(self, plain: str, hashed: str) -> bool: return pwd.verify(plain, hashed)

def create_access_token(user_id: int, email: str, rol: str, hours: int | None = None) -> str:
    exp = datetime.now(timezone.utc) + timedelta(hours=hours or settings.SESSION_HOURS)
    payload = {"sub": str(user_id), "email": email, "rol": rol, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> int:
    """Devuelve el id de usuario (sub) del token o lanza JWTError."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    sub = payload.get("sub")
    if not sub:
        raise JWTError("No subject")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise JWTError("Malformed subject")
