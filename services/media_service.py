"""
Servicio para archivos multimedia.

Sólo gestiona metadatos. El archivo debe pertenecer a una librería activa,
de la que se copian nombre y slug para poder resolver URLs públicas sin
consultar la librería.
"""

from typing import Any, Optional
import logging

from core.utils import enum_to_value
from database.models import MediaORM, UserORM
from services.base_service import EntityService
from services.library_service import LibraryService

logger = logging.getLogger(__name__)

# Prefijos de las miniaturas generadas para una imagen
THUMBNAIL_PREFIXES = ("thumblg", "thumbmd", "thumbsm")


def strip_thumbnail_prefix(filename: str) -> str:
    """`thumbsm-foto.jpg` -> `foto.jpg`; otros nombres no cambian."""
    prefix, _, rest = filename.partition("-")
    if prefix in THUMBNAIL_PREFIXES and rest:
        return rest
    return filename


class MediaService(EntityService[MediaORM]):
    search_fields = ("filename", "original_filename", "mime_type")

    def __init__(self, repository, library_service: LibraryService):
        """
        Args:
            repository: Repositorio de media
            library_service: Servicio de librerías para validar library_id
        """
        super().__init__(repository)
        self.library_service = library_service

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        library = self.library_service.get_active_by_id(data["library_id"])
        data["library_name"] = library.name
        data["library_slug"] = library.slug
        data["user_id"] = current_user.id
        data["type"] = enum_to_value(data.get("type"))
        return data

    def prepare_update(self, entity: MediaORM, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        if "type" in data:
            data["type"] = enum_to_value(data["type"])
        return {key: value for key, value in data.items() if value is not None or key == "folder_id"}

    def get_by_filename_and_library_slug(self, filename: str, library_slug: str) -> Optional[MediaORM]:
        """
        Busca un archivo activo por nombre y slug de librería. Las miniaturas
        resuelven al archivo original.
        """
        return self.repository.find_one({
            "filename": strip_thumbnail_prefix(filename),
            "library_slug": library_slug,
        })
