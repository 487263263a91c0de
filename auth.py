import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi.security import OAuth2PasswordBearer
from fastapi import Depends

from core.exceptions import ForbiddenException, UnauthorizedException
from core.permissions import Permission, has_permissions
from database import UserORM
from database.db import get_db
from sqlalchemy.orm import Session
from config import settings

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Crea un JWT con los claims estándar (sub, iat, exp, iss, aud).

    `data` debe incluir el id del usuario en "sub".
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_minutes))
    if "sub" not in to_encode:
        raise ValueError("`data` must include `sub` (subject / user id)")
    to_encode.update({
        "exp": expire,
        "iat": now,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_user_token(user: UserORM) -> str:
    return create_access_token({"sub": user.id, "username": user.username, "role": user.role})


def decode_token(token: str) -> dict:
    """Decodifica y valida un JWT.

    Valida firma, expiración, issuer y audience. Cualquier token inválido
    termina en UnauthorizedException (401).
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )
    except ExpiredSignatureError:
        logger.info("Token expirado")
        raise UnauthorizedException("Token expirado")
    except JWTError as e:
        logger.info(f"Token inválido o claim mismatch: {e}")
        raise UnauthorizedException("Token inválido o expirado")


def get_current_user_dep(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> UserORM:
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedException("Token inválido: sub faltante")
    user = db.get(UserORM, str(user_id))
    if not user:
        raise UnauthorizedException("Usuario no encontrado")
    if user.is_deleted or not user.is_active:
        raise UnauthorizedException("Usuario desactivado")
    return user


def require_permissions(*required: Permission):
    """Dependency factory: el usuario autenticado debe tener todos los permisos.

    Sin argumentos sólo exige autenticación.

    Usage in route: current_user = Depends(require_permissions(Permission.MEDIA_READ))
    """

    def _dependency(current_user: UserORM = Depends(get_current_user_dep)) -> UserORM:
        if required and not has_permissions(current_user.role, *required):
            logger.info(
                f"Permisos insuficientes para {current_user.username} ({current_user.role}): "
                f"{[p.value for p in required]}"
            )
            raise ForbiddenException("Permisos insuficientes")
        return current_user

    return _dependency
