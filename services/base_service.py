"""
Servicio base con operaciones de lógica de negocio comunes.

`EntityService` coordina un `EntityRepository`: valida el estado del
registro, comprueba duplicados, confirma la transacción y deja en cada
subclase sólo las reglas propias de la entidad (`prepare_create`,
`prepare_update`).
"""

from typing import Any, Generic, Optional, TypeVar
import logging

from core.exceptions import BusinessException, DuplicateException
from core.pagination import PaginatedResult, PaginationParams
from core.query_params import ListQuery
from core.utils import validate_uuid
from database.models import UserORM
from repositories.base_repository import EntityRepository, QueryOptions, UpdateResult

logger = logging.getLogger(__name__)

T = TypeVar('T')  # ORM Model


class EntityService(Generic[T]):
    """
    Servicio base que proporciona operaciones lógicas de negocio comunes.
    Esta clase debe ser heredada por servicios de entidades específicas.
    """

    # Campos usados por el endpoint /search
    search_fields: tuple[str, ...] = ()

    def __init__(self, repository: EntityRepository[T]):
        """
        Inicializa el servicio.

        Args:
            repository: Repositorio de la entidad
        """
        self.repository = repository
        self.name = repository.config.name

    # ==================== Lecturas ====================

    def list(
        self,
        query: ListQuery,
        contextual_filters: Optional[str] = None,
    ) -> PaginatedResult:
        """
        Listado paginado a partir de los parámetros de la petición.

        Args:
            query: Parámetros ya interpretados (página, orden, filtros...)
            contextual_filters: Filtro JSON que añade el backend, no se sanea
        """
        return self.repository.find_paginated(
            base_filter=query.search_filter,
            pagination=PaginationParams(page=query.page, items_per_page=query.items_per_page),
            options=QueryOptions(
                projection=query.fields,
                sort_by=query.sort_by,
                sort_desc=query.sort_desc,
            ),
            advanced_filters=query.filters,
            contextual_filters=contextual_filters,
        )

    def search(
        self,
        term: str,
        query: ListQuery,
        contextual_filters: Optional[str] = None,
    ) -> PaginatedResult:
        """
        Coincidencia parcial de `term` en `search_fields`, combinada con los
        filtros del listado y con el filtro contextual del usuario.
        """
        term = (term or "").strip()
        if not term:
            raise BusinessException("El parámetro de búsqueda es obligatorio")
        if not self.search_fields:
            raise BusinessException(f"{self.name} no admite búsqueda")

        query.search_filter = {
            "$or": [{field_name: {"$contains": term}} for field_name in self.search_fields]
        }
        return self.list(query, contextual_filters)

    def get(self, id: str) -> T:
        """
        Obtiene una entidad por su ID, incluso si está eliminada temporalmente.

        Raises:
            ValidationException: Si el ID no es un UUID
            NotFoundException: Si no existe
        """
        validate_uuid(id)
        return self.repository.find_by_id_or_fail(id)

    # ==================== Escrituras ====================

    def create(self, data: dict[str, Any], current_user: UserORM) -> T:
        """
        Crea una entidad.

        Raises:
            DuplicateException: Si algún campo único ya existe
            BusinessException: Si alguna regla de la entidad no se cumple
        """
        data = self.prepare_create(dict(data), current_user)
        self._check_duplicate(data)

        created = self.repository.create(data, user_id=current_user.id)
        self.repository.commit()

        logger.info(f"{self.name} {created.id} creado por {current_user.username}")
        return created

    def update(self, id: str, data: dict[str, Any], current_user: UserORM) -> UpdateResult[T]:
        """
        Actualiza los campos enviados de una entidad no eliminada.

        Returns:
            UpdateResult con la entidad y los campos modificados
        """
        entity = self.get(id)
        self.validate_not_deleted(entity)

        data = self.prepare_update(entity, dict(data), current_user)
        self._check_duplicate(data, exclude_id=entity.id)

        result = self.repository.update(id, data, user_id=current_user.id)
        if result.changes.has_changes:
            self.repository.commit()
            logger.info(
                f"{self.name} {id} actualizado por {current_user.username}: "
                f"{result.changes.changed_fields}"
            )
        return result

    def delete(self, id: str, current_user: UserORM) -> T:
        """Eliminación física."""
        self.get(id)
        deleted = self.repository.delete(id)
        self.repository.commit()
        logger.info(f"{self.name} {id} eliminado permanentemente por {current_user.username}")
        return deleted

    def soft_delete(self, id: str, current_user: UserORM) -> T:
        """
        Raises:
            BusinessException: Si ya está eliminado
        """
        entity = self.get(id)
        if entity.is_deleted:
            raise BusinessException("El registro ya está eliminado")

        deleted = self.repository.soft_delete(id, user_id=current_user.id)
        self.repository.commit()
        logger.info(f"{self.name} {id} eliminado por {current_user.username}")
        return deleted

    def restore(self, id: str, current_user: UserORM) -> T:
        """
        Restaura una entidad eliminada temporalmente.

        Raises:
            BusinessException: Si no está eliminado
        """
        entity = self.get(id)
        if not entity.is_deleted:
            raise BusinessException("El registro no está eliminado")

        restored = self.repository.restore(id, user_id=current_user.id)
        self.repository.commit()
        logger.info(f"{self.name} {id} restaurado por {current_user.username}")
        return restored

    # ==================== Reglas ====================

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        return data

    def prepare_update(self, entity: T, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        return data

    def validate_not_deleted(self, entity: T) -> None:
        """
        Raises:
            BusinessException: Si la entidad está eliminada temporalmente
        """
        if getattr(entity, "is_deleted", False):
            raise BusinessException("El registro está eliminado y no puede ser utilizado")

    def _check_duplicate(self, data: dict[str, Any], exclude_id: Optional[str] = None) -> None:
        conflict = self.repository.find_duplicate(data, exclude_id=exclude_id)
        if conflict:
            field_name, value = conflict
            raise DuplicateException(resource=self.name, field=field_name, value=str(value))
