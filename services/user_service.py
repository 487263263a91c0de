"""
Servicio de usuarios: registro, autenticación y administración.
"""

from typing import Any
import logging

from core.exceptions import BusinessException, ForbiddenException
from core.permissions import Role
from core.utils import enum_to_value
from database.db import hash_password, verify_password
from database.models import UserORM
from repositories.user_repository import UserRepository
from services.base_service import EntityService

logger = logging.getLogger(__name__)


class UserService(EntityService[UserORM]):
    """Lógica de negocio de usuarios."""

    search_fields = ("username", "name", "email")

    def __init__(self, repository: UserRepository):
        super().__init__(repository)
        self.repository: UserRepository = repository

    def register(self, data: dict[str, Any]) -> UserORM:
        """
        Registro público: el rol siempre es `user`.

        Raises:
            DuplicateException: Si el username o el email ya existen
        """
        data = dict(data)
        data["role"] = Role.user.value
        data = self._with_password(data)
        self._check_duplicate(data)

        created = self.repository.create(data)
        self.repository.commit()
        logger.info(f"Usuario registrado: {created.username}")
        return created

    def authenticate(self, username: str, password: str) -> UserORM:
        """
        Raises:
            BusinessException: Credenciales incorrectas
            ForbiddenException: Cuenta eliminada o desactivada
        """
        user = self.repository.find_by_username(username)
        if user is None or not verify_password(user.password_salt, user.password_hash, password):
            logger.info(f"Intento de login fallido para {username}")
            raise BusinessException("Usuario o contraseña incorrectos")
        if user.is_deleted or not user.is_active:
            raise ForbiddenException(
                "Esta cuenta ha sido desactivada. Contacte al administrador para restaurarla."
            )
        return user

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        data["role"] = enum_to_value(data.get("role") or Role.user)
        return self._with_password(data)

    def prepare_update(self, entity: UserORM, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        if "role" in data:
            if entity.id == current_user.id and enum_to_value(data["role"]) != entity.role:
                raise BusinessException("No puede cambiar su propio rol")
            data["role"] = enum_to_value(data["role"])
        if data.get("password"):
            data = self._with_password(data)
        data.pop("password", None)
        return {key: value for key, value in data.items() if value is not None}

    @staticmethod
    def _with_password(data: dict[str, Any]) -> dict[str, Any]:
        salt, hashed = hash_password(data.pop("password"))
        data["password_salt"] = salt
        data["password_hash"] = hashed
        return data
