"""
Servicio para productos.

El nombre es único (incluidos los eliminados); el duplicado se detecta
antes de escribir para devolver un mensaje con el campo en conflicto.
"""

from typing import Any

from database.models import ProductORM, UserORM
from services.base_service import EntityService


class ProductService(EntityService[ProductORM]):
    search_fields = ("name",)

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        data["name"] = data["name"].strip()
        return data

    def prepare_update(self, entity: ProductORM, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        if data.get("name"):
            data["name"] = data["name"].strip()
        return data
