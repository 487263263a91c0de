"""
Capa de servicio para la lógica de negocio.
Este paquete contiene clases de servicio que implementan la lógica de negocio
y orquestan las operaciones entre repositorios.
"""

from .base_service import EntityService
from .category_service import CategoryService, TagService
from .library_service import LibraryService
from .media_service import MediaService
from .product_service import ProductService
from .prueba_service import PruebaService
from .user_service import UserService

__all__ = [
    "EntityService",
    "CategoryService",
    "TagService",
    "LibraryService",
    "MediaService",
    "ProductService",
    "PruebaService",
    "UserService",
]
