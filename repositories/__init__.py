"""
Capa de repositorio para el acceso a datos.
Los repositorios proporcionan una abstracción sobre el ORM y no deben contener
lógica de negocio. Cada entidad se describe con un EntityConfig en
`repositories.entities`.
"""

from .base_repository import (
    EntityConfig,
    EntityRepository,
    QueryOptions,
    ChangeSet,
    UpdateResult,
    compare_data,
)
from .user_repository import UserRepository

__all__ = [
    "EntityConfig",
    "EntityRepository",
    "QueryOptions",
    "ChangeSet",
    "UpdateResult",
    "compare_data",
    "UserRepository",
]
