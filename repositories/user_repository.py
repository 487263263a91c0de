"""
Repositorio de usuarios.

Reutiliza EntityRepository y añade la búsqueda por username que necesita
la autenticación.
"""

from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import DatabaseException
from core.request_context import RequestContext
from database.models import UserORM
from repositories.base_repository import EntityRepository
from repositories.entities import USER

logger = logging.getLogger(__name__)


class UserRepository(EntityRepository[UserORM]):
    """Repositorio para la gestión de usuarios."""

    def __init__(self, db: Session, context: Optional[RequestContext] = None):
        super().__init__(db, USER, context)

    def find_by_username(self, username: str) -> Optional[UserORM]:
        """
        Busca un usuario por username, incluidos los desactivados.

        Args:
            username: Nombre de usuario

        Returns:
            UserORM o None si no existe
        """
        try:
            return self.db.query(UserORM).filter(
                UserORM.username == username
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error buscando usuario por username {username}: {e}")
            raise DatabaseException("Error al buscar usuario por username")
