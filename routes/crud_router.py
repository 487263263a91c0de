"""
Fábrica de routers CRUD.

Cada entidad obtiene el mismo conjunto de endpoints:

    GET    /                    listado paginado y filtrado
    GET    /search?q=           búsqueda parcial en los campos del servicio
    GET    /{id}                detalle (incluye eliminados)
    POST   /                    creación
    PUT    /{id}                actualización parcial
    DELETE /{id}                eliminación física
    PATCH  /{id}/soft-delete    eliminación lógica
    PATCH  /{id}/restore        restauración

Los handlers sólo traducen HTTP: la lógica vive en el servicio y los
errores de la capa de servicio se convierten con `handle_service_exception`.
"""

from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Type
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel

from auth import require_permissions
from core.exceptions import AppException
from core.pagination import create_paginated_response
from core.permissions import Permission
from core.query_params import ListQuery, parse_list_query
from core.utils import orm_to_dict
from database.models import UserORM
from models.common import create_delete_response
from services.base_service import EntityService

logger = logging.getLogger(__name__)

ContextualFilter = Callable[[EntityService, UserORM], Optional[str]]


# ==================== Exception Handler ====================

def handle_service_exception(e: Exception) -> HTTPException:
    """Convert service layer exceptions to HTTP exceptions."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, AppException):
        detail: Any = e.message
        if e.details:
            detail = {"message": e.message, "details": e.details}
        if e.status_code >= 500:
            logger.error(f"Error de servicio: {e.message}")
        return HTTPException(status_code=e.status_code, detail=detail, headers=e.headers)
    logger.error(f"Unexpected error: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error interno del servidor"
    )


# ==================== Serialization ====================

def serialize_items(items: Sequence[Any], response_model: Type[BaseModel], fields: Sequence[str]) -> list[dict]:
    """
    Serializa una página de resultados. Sólo se exponen los campos del
    modelo de respuesta, y de ellos los pedidos en `fields` si hay proyección.
    """
    visible = set(response_model.model_fields)
    return [
        {key: value for key, value in orm_to_dict(item, fields).items() if key in visible}
        for item in items
    ]


def list_response(result, query: ListQuery, response_model: Type[BaseModel]) -> dict:
    data = serialize_items(result.data, response_model, query.fields)
    if not query.paged:
        return {
            "success": True,
            "data": data,
            "info": query.unpaged_info(result.pagination.total_rows),
            "timestamp": datetime.utcnow(),
        }
    return create_paginated_response(data, result.pagination)


# ==================== Factory ====================

def build_crud_router(
    *,
    prefix: str,
    tags: list[str],
    get_service: Callable[..., EntityService],
    response_model: Type[BaseModel],
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    read_permissions: Sequence[Permission] = (),
    write_permissions: Sequence[Permission] = (),
    delete_permissions: Sequence[Permission] = (),
    contextual_filter: Optional[ContextualFilter] = None,
) -> APIRouter:
    """
    Construye el router CRUD de una entidad.

    Args:
        prefix: Prefijo de las rutas ("/products")
        tags: Tags de OpenAPI
        get_service: Dependencia que devuelve el servicio de la entidad
        response_model: Modelo pydantic de salida (también limita los campos del listado)
        create_model: Cuerpo de POST
        update_model: Cuerpo de PUT; sólo se aplican los campos enviados
        read_permissions: Permisos de GET; vacío significa sólo autenticación
        write_permissions: Permisos de POST, PUT y restore
        delete_permissions: Permisos de DELETE y soft-delete
        contextual_filter: Filtro JSON que el backend añade a GET / y /search según el usuario
    """
    router = APIRouter(prefix=prefix, tags=tags)
    can_read = require_permissions(*read_permissions)
    can_write = require_permissions(*write_permissions)
    can_delete = require_permissions(*delete_permissions)

    @router.get("/")
    def list_items(
        request: Request,
        current_user: UserORM = Depends(can_read),
        service: EntityService = Depends(get_service),
    ):
        """
        Listado con paginación (`page`, `itemsPerPage`), orden (`sortBy`,
        `sortDesc`), proyección (`fields`), filtros avanzados (`filters`) y
        búsqueda simple (`simpleSearch`).
        """
        try:
            query = parse_list_query(request.query_params)
            contextual = contextual_filter(service, current_user) if contextual_filter else None
            result = service.list(query, contextual)
        except Exception as e:
            raise handle_service_exception(e)
        return list_response(result, query, response_model)

    @router.get("/search")
    def search_items(
        request: Request,
        q: str = Query(..., min_length=1, description="Término de búsqueda"),
        current_user: UserORM = Depends(can_read),
        service: EntityService = Depends(get_service),
    ):
        try:
            query = parse_list_query(request.query_params)
            contextual = contextual_filter(service, current_user) if contextual_filter else None
            result = service.search(q, query, contextual)
        except Exception as e:
            raise handle_service_exception(e)
        return list_response(result, query, response_model)

    @router.get("/{item_id}", response_model=response_model)
    def get_item(
        item_id: str,
        current_user: UserORM = Depends(can_read),
        service: EntityService = Depends(get_service),
    ):
        try:
            return service.get(item_id)
        except Exception as e:
            raise handle_service_exception(e)

    @router.post("/", response_model=response_model, status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: create_model,
        current_user: UserORM = Depends(can_write),
        service: EntityService = Depends(get_service),
    ):
        try:
            return service.create(payload.model_dump(), current_user)
        except Exception as e:
            raise handle_service_exception(e)

    @router.put("/{item_id}", response_model=response_model)
    def update_item(
        item_id: str,
        payload: update_model,
        current_user: UserORM = Depends(can_write),
        service: EntityService = Depends(get_service),
    ):
        try:
            result = service.update(item_id, payload.model_dump(exclude_unset=True), current_user)
        except Exception as e:
            raise handle_service_exception(e)
        return result.entity

    @router.delete("/{item_id}")
    def delete_item(
        item_id: str,
        current_user: UserORM = Depends(can_delete),
        service: EntityService = Depends(get_service),
    ):
        try:
            service.delete(item_id, current_user)
        except Exception as e:
            raise handle_service_exception(e)
        return create_delete_response(
            message=f"{service.name} eliminado permanentemente",
            deleted_id=item_id,
            soft_delete=False,
        )

    @router.patch("/{item_id}/soft-delete")
    def soft_delete_item(
        item_id: str,
        current_user: UserORM = Depends(can_delete),
        service: EntityService = Depends(get_service),
    ):
        try:
            service.soft_delete(item_id, current_user)
        except Exception as e:
            raise handle_service_exception(e)
        return create_delete_response(
            message=f"{service.name} eliminado correctamente",
            deleted_id=item_id,
            soft_delete=True,
        )

    @router.patch("/{item_id}/restore", response_model=response_model)
    def restore_item(
        item_id: str,
        current_user: UserORM = Depends(can_write),
        service: EntityService = Depends(get_service),
    ):
        try:
            return service.restore(item_id, current_user)
        except Exception as e:
            raise handle_service_exception(e)

    return router
