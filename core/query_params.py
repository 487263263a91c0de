"""
Contrato de query string para los endpoints de listado.

Parámetros reconocidos:
    page            Página (desde 1). Si falta, se devuelve un listado sin
                    paginar limitado a `unpaged_safety_limit` registros.
    itemsPerPage    También `items_per_page` o `items-per-page`.
    sortBy          Campo, lista separada por comas o arreglo JSON.
    sortDesc        `true`/`false` o arreglo JSON paralelo a sortBy.
    fields          Proyección, separada por comas.
    filters         Filtro avanzado en JSON (se sanea).
    simpleSearch    JSON `{"search": "...", "fields": ["a", "b"]}`.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from config import settings
from core.exceptions import InvalidQueryParameterException
from core.filter_sanitizer import PROTECTED_FIELDS

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE_ALIASES = ("itemsPerPage", "items_per_page", "items-per-page")


@dataclass
class ListQuery:
    page: int = 1
    items_per_page: int = 10
    paged: bool = True
    sort_by: list[str] = field(default_factory=list)
    sort_desc: list[bool] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    filters: Optional[str] = None
    search_filter: dict[str, Any] = field(default_factory=dict)

    def unpaged_info(self, total_rows: int) -> dict[str, Any]:
        """Bloque `info` que acompaña a los listados sin parámetro page."""
        limit = self.items_per_page
        return {
            "message": (
                f"Se ha aplicado un límite automático de {limit} registros. "
                "Si necesita más registros, utilice paginación con los parámetros "
                "'page' y 'itemsPerPage'."
            ),
            "totalRows": total_rows,
            "limit": limit,
            "limitApplied": True,
        }


def parse_list_query(
    params: Mapping[str, str],
    protected_fields: frozenset[str] = PROTECTED_FIELDS,
) -> ListQuery:
    """
    Interpreta los parámetros de un listado.

    Raises:
        InvalidQueryParameterException: itemsPerPage mayor al máximo o
            simpleSearch inválido
    """
    query = ListQuery(
        sort_by=parse_sort_by(params.get("sortBy")),
        sort_desc=parse_sort_desc(params.get("sortDesc")),
        fields=_split_csv(params.get("fields")),
        filters=params.get("filters") or None,
        search_filter=parse_simple_search(params.get("simpleSearch"), protected_fields),
    )

    raw_page = params.get("page")
    if raw_page is None or raw_page == "":
        query.paged = False
        query.page = 1
        query.items_per_page = settings.unpaged_safety_limit
        return query

    query.page = _parse_positive_int(raw_page, default=1)
    query.items_per_page = parse_items_per_page(params)
    return query


def parse_items_per_page(params: Mapping[str, str]) -> int:
    raw = next((params.get(alias) for alias in ITEMS_PER_PAGE_ALIASES if params.get(alias)), None)
    default = settings.default_items_per_page
    if raw is None:
        return default

    value = _parse_positive_int(raw, default=default)
    if value > settings.max_items_per_page:
        raise InvalidQueryParameterException(
            f"El parámetro itemsPerPage no puede superar {settings.max_items_per_page}. "
            f"Valor solicitado: {value}",
            parameter="itemsPerPage",
            details={
                "message": (
                    f"El valor máximo permitido es {settings.max_items_per_page}. "
                    "Utilice paginación para obtener más registros."
                ),
            },
        )
    return value


def parse_sort_by(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    raw = raw.strip()
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("sortBy con JSON inválido, se ignora el ordenamiento")
            return []
        if not isinstance(parsed, list):
            return []
        return [str(item) for item in parsed if isinstance(item, str) and item]
    return _split_csv(raw)


def parse_sort_desc(raw: Optional[str]) -> list[bool]:
    if not raw:
        return []
    raw = raw.strip()
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("sortDesc con JSON inválido, se usa orden ascendente")
            return []
        if not isinstance(parsed, list):
            return []
        return [item is True or str(item).lower() == "true" for item in parsed]
    return [value.lower() == "true" for value in _split_csv(raw)]


def parse_simple_search(
    raw: Optional[str],
    protected_fields: frozenset[str] = PROTECTED_FIELDS,
) -> dict[str, Any]:
    """
    Traduce simpleSearch a un filtro `$or` de coincidencias parciales sin
    distinguir mayúsculas. Los campos protegidos se omiten.
    """
    if not raw:
        return {}
    try:
        search = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidQueryParameterException("Formato JSON inválido para simpleSearch", parameter="simpleSearch")

    if (
        not isinstance(search, dict)
        or not isinstance(search.get("search"), (str, int, float))
        or isinstance(search.get("search"), bool)
        or str(search.get("search")) == ""
        or not isinstance(search.get("fields"), list)
        or not search["fields"]
        or not all(isinstance(f, str) and f for f in search["fields"])
    ):
        raise InvalidQueryParameterException(
            'Formato inválido para simpleSearch. El formato correcto es: '
            '{"search":"término","fields":["campo1","campo2"]}',
            parameter="simpleSearch",
        )

    term = str(search["search"])
    conditions = [
        {field_name: {"$contains": term}}
        for field_name in dict.fromkeys(search["fields"])
        if field_name not in protected_fields
    ]
    if not conditions:
        return {}
    return {"$or": conditions}


def _parse_positive_int(raw: Any, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _split_csv(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]
