"""
Parser de filtros avanzados y combinación de filtros.

Orden de precedencia al combinar (el último gana en claves repetidas):
permanente < base < avanzado (saneado) < contextual (sin sanear).
"""

import json
import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from core.exceptions import FilterSyntaxError
from core.filter_sanitizer import SanitizerOptions, sanitize_filter
from core.filter_tree import build_filter_tree
from core.query_builder import QueryBuilder

logger = logging.getLogger(__name__)


def parse_advanced_filters(
    filters_string: Optional[str],
    should_sanitize: bool = True,
    options: Optional[SanitizerOptions] = None,
    log: Optional[logging.Logger] = None,
    entity_name: str = "entidad",
) -> dict[str, Any]:
    """
    Convierte un filtro JSON en un filtro nativo.

    Un filtro vacío, mal formado o con sintaxis inválida se registra y se
    trata como `{}`; nunca interrumpe la petición. El texto original del
    filtro no se escribe en los logs.

    Args:
        filters_string: JSON recibido en el parámetro `filters`
        should_sanitize: False sólo para filtros generados por el backend
        options: Configuración del saneador
        log: Logger donde registrar los errores
        entity_name: Nombre de la entidad para los mensajes

    Returns:
        Filtro en el dialecto nativo
    """
    log = log or logger
    if not filters_string or not filters_string.strip():
        return {}

    try:
        raw = json.loads(filters_string)
    except json.JSONDecodeError as e:
        log.error(
            f"Error al parsear filtros de {entity_name}: JSON inválido "
            f"(línea {e.lineno}, columna {e.colno}, longitud {len(filters_string)})"
        )
        return {}

    if not isinstance(raw, dict):
        log.error(f"Error al parsear filtros de {entity_name}: se esperaba un objeto JSON")
        return {}

    if should_sanitize:
        if options is None:
            options = SanitizerOptions(logger=log)
        elif options.logger is None:
            options = replace(options, logger=log)
        raw = sanitize_filter(raw, options=options).sanitized

    try:
        query = QueryBuilder().build(raw)
        build_filter_tree(query)
    except FilterSyntaxError as e:
        log.error(f"Filtro inválido para {entity_name}: {e}")
        return {}
    return query


def merge_filters(
    permanent: Optional[Mapping[str, Any]] = None,
    base: Optional[Mapping[str, Any]] = None,
    advanced: Optional[Mapping[str, Any]] = None,
    contextual: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Combinación superficial por clave de primer nivel."""
    combined: dict[str, Any] = {}
    for layer in (permanent, base, advanced, contextual):
        if layer:
            combined.update(layer)
    return combined


def build_total_rows_filter(
    permanent: Optional[Mapping[str, Any]],
    combined: Mapping[str, Any],
    contextual: Optional[Mapping[str, Any]],
    deleted_field: str = "is_deleted",
) -> dict[str, Any]:
    """
    Filtro para `totalRows`: el permanente, el estado de borrado que traiga
    el filtro combinado y el contextual. Ignora búsquedas y filtros base.
    """
    result = dict(permanent or {})
    if deleted_field in combined:
        result[deleted_field] = combined[deleted_field]
    if contextual:
        result.update(contextual)
    return result
