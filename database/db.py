"""módulo de base de datos: engine, sesiones y helpers de auditoría / soft delete."""
from typing import Optional, Generator
import hashlib
import hmac
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

# import ORM classes and Base from models.py
from .models import (
    Base,
    UserORM,
    PruebaORM,
    ProductORM,
    CategoryORM,
    TagORM,
    LibraryORM,
    MediaORM,
)

#import configuration
from config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """Opciones del engine según el motor configurado."""
    if settings.is_sqlite:
        # SQLite no acepta timeouts de conexión de red
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  #verifica conexiones antes de usarlas
        "pool_recycle": 3600,   #recicla conexiones cada hora
        "connect_args": {"connect_timeout": 30},
    }


#engine / session con configuración centralizada
engine = create_engine(
    settings.database_url,
    echo=settings.debug_mode,
    future=True,
    **_engine_options(),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """dependencia de FastAPI que provee una sesión por petición.

    Yields:
        Session: Sesión de SQLAlchemy

    Nota:
        - Hace rollback automático si hay excepciones SQLAlchemy
        - Cierra la sesión de forma segura
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de base de datos en sesión: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_tables() -> None:
    """Crear tablas ORM en la base de datos.

    Raises:
        SQLAlchemyError: Si hay error al crear las tablas
    """
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tablas de base de datos creadas/verificadas exitosamente")
    except SQLAlchemyError as e:
        logger.error(f"Error al crear tablas: {e}", exc_info=True)
        raise


def get_database_url() -> str:
    """Obtiene la URL de la base de datos sin credenciales."""
    return engine.url.render_as_string(hide_password=True)


def hash_password(password: str) -> tuple[str, str]:
    """Genera salt y hash (ambos hex) usando PBKDF2-HMAC-SHA256."""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return salt.hex(), dk.hex()


def verify_password(salt_hex: str, hash_hex: str, password: str) -> bool:
    """Verifica que password coincida con salt+hash almacenados."""
    salt = bytes.fromhex(salt_hex)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return hmac.compare_digest(dk.hex(), hash_hex)


def set_audit_fields(obj, user_id: Optional[str], creating: bool = True) -> None:
    """setea created_by/created_at al crear y updated_by/updated_at siempre.

    Args:
        obj: instancia ORM a modificar
        user_id: ID del usuario responsable (puede ser None)
        creating: Si True setea también los campos de creación
    """
    from utils.datetime_utils import local_naive_now
    now = local_naive_now()
    if creating:
        obj.created_by = user_id
        if obj.created_at is None:
            obj.created_at = now
    obj.updated_by = user_id
    obj.updated_at = now


def soft_delete(obj, user_id: Optional[str]) -> None:
    """
    marca un objeto como eliminado (soft delete)

    Args:
        obj: instancia ORM a marcar como eliminada
        user_id: ID del usuario que realiza la eliminación
    """
    from utils.datetime_utils import local_naive_now
    obj.is_deleted = True
    obj.deleted_at = local_naive_now()
    obj.deleted_by = user_id
    set_audit_fields(obj, user_id, creating=False)


def restore_deleted(obj, user_id: Optional[str]) -> None:
    """restaura un objeto previamente eliminado con soft delete"""
    obj.is_deleted = False
    obj.deleted_at = None
    obj.deleted_by = None
    set_audit_fields(obj, user_id, creating=False)
