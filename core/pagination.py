"""
Utilidades de paginación (páginas indexadas desde 1).

Los valores fuera de rango nunca son un error: se ajustan al mínimo válido.
"""

import math
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

DEFAULT_ITEMS_PER_PAGE = 10


class PaginationParams(BaseModel):
    """Parámetros de paginación tal como llegan del llamador."""
    model_config = ConfigDict(populate_by_name=True)

    page: Optional[int] = Field(None, description="Número de página (desde 1)")
    items_per_page: Optional[int] = Field(
        None, alias="itemsPerPage", description="Elementos por página"
    )


class PaginationMeta(BaseModel):
    """Metadata de la página devuelta."""
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., ge=1, description="Página actual")
    items_per_page: int = Field(..., ge=1, alias="itemsPerPage")
    total_filtered_rows: int = Field(..., ge=0, alias="totalFilteredRows")
    total_rows: int = Field(..., ge=0, alias="totalRows")
    pages: int = Field(..., ge=0, description="ceil(totalFilteredRows / itemsPerPage)")


class PaginatedResult(BaseModel):
    """Página de resultados: entidades ORM más la metadata."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: List[Any]
    pagination: PaginationMeta


def clamp_page(page: Any) -> int:
    try:
        return max(1, int(page))
    except (TypeError, ValueError):
        return 1


def clamp_items_per_page(items_per_page: Any, default: int = DEFAULT_ITEMS_PER_PAGE) -> int:
    if items_per_page is None:
        return default
    try:
        return max(1, int(items_per_page))
    except (TypeError, ValueError):
        return default


def calculate_skip(page: int, items_per_page: int) -> int:
    """
    Calcula el offset para la consulta.

    Args:
        page: Página actual (indexada desde 1)
        items_per_page: Elementos por página

    Returns:
        Número de registros a saltar
    """
    return (page - 1) * items_per_page


def calculate_pages(total_filtered_rows: int, items_per_page: int) -> int:
    return math.ceil(total_filtered_rows / items_per_page) if items_per_page > 0 else 0


def calculate_pagination_meta(
    page: int,
    items_per_page: int,
    total_filtered_rows: int,
    total_rows: int,
) -> PaginationMeta:
    return PaginationMeta(
        page=page,
        items_per_page=items_per_page,
        total_filtered_rows=total_filtered_rows,
        total_rows=total_rows,
        pages=calculate_pages(total_filtered_rows, items_per_page),
    )


def create_paginated_response(
    items: List[Any],
    pagination: PaginationMeta,
    info: Optional[dict] = None,
) -> dict:
    """
    Crea el cuerpo de respuesta de un listado.

    Args:
        items: Elementos ya serializados de la página actual
        pagination: Metadata de paginación
        info: Bloque informativo opcional (p. ej. límite de seguridad aplicado)

    Returns:
        Diccionario con success, data, pagination (camelCase) y timestamp
    """
    response = {
        "success": True,
        "data": items,
        "pagination": pagination.model_dump(by_alias=True),
        "timestamp": datetime.utcnow(),
    }
    if info:
        response["info"] = info
    return response
