"""
Servicio para librerías de medios.
"""

from typing import Any, Optional
import logging

from core.exceptions import BusinessException
from core.utils import enum_to_value, make_slug
from database.models import LibraryORM, UserORM
from services.base_service import EntityService

logger = logging.getLogger(__name__)


def with_folder_slugs(folders: Optional[list[dict[str, Any]]]) -> Optional[list[dict[str, Any]]]:
    if folders is None:
        return None
    result = []
    for folder in folders:
        folder = dict(folder)
        folder["slug"] = make_slug(folder.get("slug") or folder["name"])
        result.append(folder)
    return result


class LibraryService(EntityService[LibraryORM]):
    """
    Lógica de negocio de librerías.

    El slug se deriva del nombre cuando no se envía y debe ser único; el
    propietario es el usuario que crea la librería.
    """

    search_fields = ("name", "description")

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        data["slug"] = self._slug(data.get("slug") or data["name"])
        data["user_id"] = current_user.id
        data["default_storage_provider"] = enum_to_value(data.get("default_storage_provider"))
        data["folders"] = with_folder_slugs(data.get("folders")) or []
        return data

    def prepare_update(self, entity: LibraryORM, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        # renombrar no cambia el slug: las rutas de los archivos dependen de él
        if data.get("slug"):
            data["slug"] = self._slug(data["slug"])
        if "default_storage_provider" in data:
            data["default_storage_provider"] = enum_to_value(data["default_storage_provider"])
        if "folders" in data:
            data["folders"] = with_folder_slugs(data["folders"]) or []
        return {key: value for key, value in data.items() if value is not None or key == "description"}

    def get_active_by_id(self, library_id: str) -> LibraryORM:
        """
        Librería existente y no eliminada.

        Raises:
            BusinessException: Si no existe o está eliminada
        """
        library = self.repository.find_by_id(library_id)
        if library is None or library.is_deleted:
            raise BusinessException(
                "La librería no existe",
                details={"field": "library_id", "value": library_id},
            )
        return library

    @staticmethod
    def _slug(value: str) -> str:
        slug = make_slug(value)
        if not slug:
            raise BusinessException("No se pudo generar un slug válido para la librería")
        return slug
