"""
Configuración de cada entidad para el repositorio genérico.

Añadir una entidad nueva consiste en declarar aquí su EntityConfig; no
hace falta una clase de repositorio propia.
"""

from database.models import (
    CategoryORM,
    LibraryORM,
    MediaORM,
    ProductORM,
    PruebaORM,
    TagORM,
    UserORM,
)
from repositories.base_repository import EntityConfig

PRUEBA = EntityConfig(model=PruebaORM, name="Prueba")

PRODUCT = EntityConfig(
    model=ProductORM,
    name="Producto",
    unique_fields=("name",),
)

CATEGORY = EntityConfig(model=CategoryORM, name="Categoría")

TAG = EntityConfig(model=TagORM, name="Etiqueta")

LIBRARY = EntityConfig(
    model=LibraryORM,
    name="Librería",
    unique_fields=("slug",),
)

MEDIA = EntityConfig(
    model=MediaORM,
    name="Media",
    # la ubicación física del archivo no se expone en los filtros
    protected_fields=("storage",),
)

USER = EntityConfig(
    model=UserORM,
    name="Usuario",
    unique_fields=("username", "email"),
)
