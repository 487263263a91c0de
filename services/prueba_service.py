"""
Servicio para Prueba.

Entidad mínima del scaffold: cada registro pertenece al usuario que lo crea.
"""

from typing import Any, Optional
import json

from database.models import PruebaORM, UserORM
from services.base_service import EntityService
from core.permissions import Permission, has_permissions


class PruebaService(EntityService[PruebaORM]):
    """Lógica de negocio de pruebas."""

    search_fields = ("name",)

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        data["user_id"] = current_user.id
        return data

    def owner_filter(self, current_user: UserORM) -> Optional[str]:
        """
        Filtro contextual del listado: quien no puede escribir pruebas sólo
        ve las suyas.
        """
        if has_permissions(current_user.role, Permission.PRUEBA_WRITE):
            return None
        return json.dumps({"user_id": current_user.id})
