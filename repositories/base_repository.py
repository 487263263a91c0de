"""
Repositorio genérico por composición.

Cada entidad no hereda de una clase base: se describe con un `EntityConfig`
(modelo, filtro permanente, campos protegidos...) y se usa a través de
`EntityRepository`, que ofrece las operaciones comunes:
find_paginated, find_by_id, find_one, count, create, update, delete,
soft_delete y restore.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from core.exceptions import BusinessException, DatabaseException, DuplicateException, NotFoundException
from core.filter_sanitizer import SanitizerOptions
from core.filter_tree import build_filter_tree, referenced_fields
from core.filtering import build_total_rows_filter, merge_filters, parse_advanced_filters
from core.pagination import (
    PaginatedResult,
    PaginationParams,
    calculate_pagination_meta,
    calculate_skip,
    clamp_items_per_page,
    clamp_page,
)
from core.request_context import RequestContext
from core.sql_filters import apply_sort, compile_filter, projection_options
from database.db import restore_deleted, set_audit_fields, soft_delete

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Campos que nunca se escriben desde datos de entrada ni cuentan como cambios
SYSTEM_FIELDS = frozenset({
    "id",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
    "is_deleted",
    "deleted_at",
    "deleted_by",
})


@dataclass
class EntityConfig(Generic[T]):
    """Descripción de una entidad para el repositorio genérico."""
    model: Type[T]
    name: str
    permanent_filters: dict[str, Any] = field(default_factory=lambda: {"is_deleted": False})
    protected_fields: Sequence[str] = ()
    allowed_fields: Optional[set[str]] = None
    max_filter_depth: int = field(default_factory=lambda: settings.max_filter_depth)
    deleted_field: str = "is_deleted"
    unique_fields: Sequence[str] = ()

    def sanitizer_options(self) -> SanitizerOptions:
        return SanitizerOptions(
            allowed_fields=self.allowed_fields,
            custom_protected_fields=list(self.protected_fields),
            logger=logger,
            max_depth=self.max_filter_depth,
        )


@dataclass
class QueryOptions:
    """Proyección y ordenamiento para find_paginated."""
    projection: list[str] = field(default_factory=list)
    sort_by: list[str] = field(default_factory=list)
    sort_desc: list[bool] = field(default_factory=list)


@dataclass
class ChangeSet:
    changed_fields: list[str] = field(default_factory=list)
    old_values: dict[str, Any] = field(default_factory=dict)
    new_values: dict[str, Any] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_fields)


@dataclass
class UpdateResult(Generic[T]):
    entity: T
    changes: ChangeSet


def compare_data(entity: Any, data: Mapping[str, Any]) -> ChangeSet:
    """Diferencias entre los valores actuales de `entity` y `data`."""
    changes = ChangeSet()
    for key, new_value in data.items():
        if key in SYSTEM_FIELDS:
            continue
        old_value = getattr(entity, key, None)
        if old_value != new_value:
            changes.changed_fields.append(key)
            changes.old_values[key] = old_value
            changes.new_values[key] = new_value
    return changes


class EntityRepository(Generic[T]):
    """
    Acceso a datos genérico parametrizado por un EntityConfig.

    Las escrituras hacen flush pero no commit; el servicio decide cuándo
    confirmar la transacción.
    """

    def __init__(
        self,
        db: Session,
        config: EntityConfig[T],
        context: Optional[RequestContext] = None,
    ):
        """
        Inicializa el repositorio.

        Args:
            db: Sesión SQLAlchemy
            config: Descripción de la entidad
            context: Contexto de la petición donde se registra la actividad
        """
        self.db = db
        self.config = config
        self.model = config.model
        self.context = context

    # ==================== Lecturas ====================

    def find_paginated(
        self,
        base_filter: Optional[Mapping[str, Any]] = None,
        pagination: Optional[PaginationParams] = None,
        options: Optional[QueryOptions] = None,
        advanced_filters: Optional[str] = None,
        contextual_filters: Optional[str] = None,
    ) -> PaginatedResult:
        """
        Listado paginado con filtros.

        Args:
            base_filter: Filtro nativo construido por el backend (p. ej. simpleSearch)
            pagination: page / itemsPerPage; valores < 1 se ajustan a 1
            options: Proyección y ordenamiento
            advanced_filters: JSON del usuario; se sanea
            contextual_filters: JSON generado por el backend; no se sanea

        Returns:
            PaginatedResult con la página y la metadata. totalRows sólo tiene
            en cuenta el filtro permanente, el estado de borrado y el filtro
            contextual.

        Raises:
            SQLAlchemyError: Los errores del motor se propagan sin cambios
        """
        pagination = pagination or PaginationParams()
        options = options or QueryOptions()
        name = self.config.name

        advanced = parse_advanced_filters(
            advanced_filters,
            should_sanitize=True,
            options=self.config.sanitizer_options(),
            log=logger,
            entity_name=name,
        )
        contextual = parse_advanced_filters(
            contextual_filters,
            should_sanitize=False,
            log=logger,
            entity_name=name,
        )
        permanent = self.config.permanent_filters
        combined = merge_filters(permanent, base_filter, advanced, contextual)

        page = clamp_page(pagination.page)
        items_per_page = clamp_items_per_page(pagination.items_per_page)
        skip = calculate_skip(page, items_per_page)

        combined_tree = build_filter_tree(combined)
        where = compile_filter(combined_tree, self.model)
        total_rows_filter = build_total_rows_filter(
            permanent, combined, contextual, self.config.deleted_field
        )
        total_rows_where = compile_filter(build_filter_tree(total_rows_filter), self.model)

        logger.debug(
            f"find_paginated {name}: página {page}, {items_per_page} por página, "
            f"campos filtrados {sorted(referenced_fields(combined_tree))}"
        )

        try:
            query = self.db.query(self.model).filter(where)
            for option in projection_options(self.model, options.projection):
                query = query.options(option)
            query = apply_sort(query, self.model, options.sort_by, options.sort_desc)
            data = query.offset(skip).limit(items_per_page).all()

            total_filtered_rows = self.db.query(self.model).filter(where).count()
            total_rows = self.db.query(self.model).filter(total_rows_where).count()
        except SQLAlchemyError as e:
            logger.error(f"Error en find_paginated de {name}: {e}")
            raise

        pagination_meta = calculate_pagination_meta(
            page=page,
            items_per_page=items_per_page,
            total_filtered_rows=total_filtered_rows,
            total_rows=total_rows,
        )
        self._track("find_paginated", returned=len(data), total=total_filtered_rows)
        return PaginatedResult(data=data, pagination=pagination_meta)

    def find_by_id(self, id: str) -> Optional[T]:
        """Busca por clave primaria sin aplicar el filtro permanente."""
        try:
            entity = self.db.get(self.model, str(id))
        except SQLAlchemyError as e:
            logger.error(f"Error obteniendo {self.config.name} {id}: {e}")
            raise DatabaseException(f"Error al obtener {self.config.name}")
        self._track("find_by_id", str(id), found=entity is not None)
        return entity

    def find_by_id_or_fail(self, id: str) -> T:
        """
        Raises:
            NotFoundException: Si no existe
        """
        entity = self.find_by_id(id)
        if entity is None:
            raise NotFoundException(resource=self.config.name, identifier=str(id))
        return entity

    def find_one(self, filter: Optional[Mapping[str, Any]] = None) -> Optional[T]:
        """Primer registro que cumple el filtro nativo, respetando el filtro permanente."""
        where = self._compile(merge_filters(self.config.permanent_filters, filter))
        try:
            entity = self.db.query(self.model).filter(where).first()
        except SQLAlchemyError as e:
            logger.error(f"Error buscando {self.config.name}: {e}")
            raise DatabaseException(f"Error al buscar {self.config.name}")
        self._track("find_one", getattr(entity, "id", None))
        return entity

    def count(self, filter: Optional[Mapping[str, Any]] = None) -> int:
        where = self._compile(merge_filters(self.config.permanent_filters, filter))
        try:
            total = self.db.query(self.model).filter(where).count()
        except SQLAlchemyError as e:
            logger.error(f"Error contando {self.config.name}: {e}")
            raise DatabaseException(f"Error al contar {self.config.name}")
        self._track("count", total=total)
        return total

    def find_duplicate(
        self,
        data: Mapping[str, Any],
        exclude_id: Optional[str] = None,
    ) -> Optional[tuple[str, Any]]:
        """
        Busca otro registro (incluidos los eliminados) con el mismo valor en
        algún campo único. Devuelve (campo, valor) del primer conflicto.
        """
        for field_name in self.config.unique_fields:
            value = data.get(field_name)
            if value is None:
                continue
            query = self.db.query(self.model).filter(getattr(self.model, field_name) == value)
            if exclude_id is not None:
                query = query.filter(self.model.id != str(exclude_id))
            if query.first() is not None:
                return field_name, value
        return None

    # ==================== Escrituras ====================

    def create(self, data: Mapping[str, Any], user_id: Optional[str] = None) -> T:
        """
        Crea un registro a partir de un dict de atributos.

        Raises:
            DuplicateException: Violación de unicidad
            DatabaseException: Cualquier otro error del motor
        """
        entity = self.model(**self._writable(data))
        set_audit_fields(entity, user_id, creating=True)
        try:
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
        except IntegrityError as e:
            logger.warning(f"Violación de integridad creando {self.config.name}: {e.orig}")
            self.db.rollback()
            raise DuplicateException(resource=self.config.name)
        except SQLAlchemyError as e:
            logger.error(f"Error creando {self.config.name}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al crear {self.config.name}")
        self._track("create", entity.id)
        return entity

    def update(
        self,
        id: str,
        data: Mapping[str, Any],
        user_id: Optional[str] = None,
    ) -> UpdateResult[T]:
        """
        Actualiza los campos indicados y devuelve también qué cambió.

        Raises:
            NotFoundException: Si no existe
            DuplicateException: Violación de unicidad
            DatabaseException: Cualquier otro error del motor
        """
        entity = self.find_by_id_or_fail(id)
        values = self._writable(data)
        changes = compare_data(entity, values)
        if not changes.has_changes:
            return UpdateResult(entity=entity, changes=changes)

        for key in changes.changed_fields:
            setattr(entity, key, values[key])
        set_audit_fields(entity, user_id, creating=False)
        try:
            self.db.flush()
            self.db.refresh(entity)
        except IntegrityError as e:
            logger.warning(f"Violación de integridad actualizando {self.config.name} {id}: {e.orig}")
            self.db.rollback()
            raise DuplicateException(resource=self.config.name)
        except SQLAlchemyError as e:
            logger.error(f"Error actualizando {self.config.name} {id}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al actualizar {self.config.name}")
        self._track("update", str(id), changed_fields=changes.changed_fields)
        return UpdateResult(entity=entity, changes=changes)

    def delete(self, id: str) -> T:
        """Eliminación física."""
        entity = self.find_by_id_or_fail(id)
        try:
            self.db.delete(entity)
            self.db.flush()
        except IntegrityError as e:
            logger.warning(f"{self.config.name} {id} tiene registros relacionados: {e.orig}")
            self.db.rollback()
            raise BusinessException(
                f"No se puede eliminar {self.config.name}: tiene registros relacionados"
            )
        except SQLAlchemyError as e:
            logger.error(f"Error eliminando {self.config.name} {id}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al eliminar {self.config.name}")
        self._track("delete", str(id))
        return entity

    def soft_delete(self, id: str, user_id: Optional[str] = None) -> T:
        """Marca is_deleted, deleted_at y deleted_by."""
        entity = self.find_by_id_or_fail(id)
        soft_delete(entity, user_id)
        try:
            self.db.flush()
            self.db.refresh(entity)
        except SQLAlchemyError as e:
            logger.error(f"Error en soft delete de {self.config.name} {id}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al eliminar {self.config.name}")
        self._track("soft_delete", str(id))
        return entity

    def restore(self, id: str, user_id: Optional[str] = None) -> T:
        entity = self.find_by_id_or_fail(id)
        restore_deleted(entity, user_id)
        try:
            self.db.flush()
            self.db.refresh(entity)
        except SQLAlchemyError as e:
            logger.error(f"Error restaurando {self.config.name} {id}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al restaurar {self.config.name}")
        self._track("restore", str(id))
        return entity

    def commit(self) -> None:
        """Realiza el commit de la transacción actual."""
        try:
            self.db.commit()
        except IntegrityError as e:
            logger.warning(f"Violación de integridad al confirmar {self.config.name}: {e.orig}")
            self.db.rollback()
            raise DuplicateException(resource=self.config.name)
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self.db.rollback()
            raise DatabaseException("Error al guardar cambios en la base de datos")

    def rollback(self) -> None:
        self.db.rollback()

    # ==================== Internos ====================

    def _compile(self, query: Mapping[str, Any]):
        return compile_filter(build_filter_tree(query), self.model)

    def _writable(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Sólo columnas mapeadas que no sean campos de sistema."""
        columns = inspect(self.model).column_attrs
        values = {}
        for key, value in data.items():
            if key in SYSTEM_FIELDS:
                continue
            if key not in columns:
                logger.debug(f"Campo ignorado al escribir {self.config.name}: {key}")
                continue
            values[key] = value
        return values

    def _track(self, action: str, entity_id: Optional[str] = None, **details: Any) -> None:
        if self.context is not None:
            self.context.push(action, self.config.name, entity_id, **details)
