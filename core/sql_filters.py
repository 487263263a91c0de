"""
Compilación del árbol de filtros a expresiones SQLAlchemy.

Se conserva la semántica del almacén documental original:

- Un campo que el modelo no tiene se comporta como un campo ausente:
  `$eq: x` no coincide, `$ne: x` sí, `$exists: false` sí.
- `$ne` y `$nin` también coinciden con NULL.
- Cada comparación produce siempre TRUE/FALSE (nunca NULL), de modo que
  `Not(...)` invierte el resultado sin perder filas con valores nulos.
"""

import logging
import math
from typing import Any, Optional, Sequence

from sqlalchemy import (
    Boolean,
    DateTime,
    Integer,
    Numeric,
    String,
    and_,
    cast,
    false,
    inspect,
    not_,
    or_,
    true,
)
from sqlalchemy.orm import load_only
from sqlalchemy.orm.attributes import InstrumentedAttribute

from core.exceptions import FilterSyntaxError
from core.filter_tree import And, Comparison, ComparisonOp, FilterNode, Not, Or
from core.query_builder import parse_date
from utils.datetime_utils import to_naive_local

logger = logging.getLogger(__name__)

_UNPARSEABLE = object()


def resolve_column(model, field: str) -> Optional[InstrumentedAttribute]:
    """Devuelve el atributo de columna mapeado con ese nombre, o None."""
    mapper = inspect(model)
    if field not in mapper.column_attrs:
        return None
    return getattr(model, field)


def compile_filter(node: FilterNode, model):
    """Convierte un nodo del árbol en una cláusula WHERE para `model`."""
    if isinstance(node, And):
        if not node.children:
            return true()
        return and_(*(compile_filter(child, model) for child in node.children))
    if isinstance(node, Or):
        if not node.children:
            return false()
        return or_(*(compile_filter(child, model) for child in node.children))
    if isinstance(node, Not):
        return not_(compile_filter(node.child, model))
    if isinstance(node, Comparison):
        return _compile_comparison(node, model)
    raise FilterSyntaxError(f"Nodo de filtro desconocido: {type(node).__name__}")


def _compile_comparison(node: Comparison, model):
    column = resolve_column(model, node.field)
    if column is None:
        return _missing_field(node)

    op = node.op
    value = node.value

    if op is ComparisonOp.EXISTS:
        return column.is_not(None) if value else column.is_(None)

    if op is ComparisonOp.CONTAINS:
        pattern = f"%{_escape_like(str(value))}%"
        target = column if isinstance(column.type, String) else cast(column, String)
        return and_(column.is_not(None), target.ilike(pattern, escape="\\"))

    if op is ComparisonOp.REGEX:
        if not isinstance(value, str):
            raise FilterSyntaxError(f"$regex en '{node.field}' requiere un texto")
        flags = "".join(sorted(set(node.options or "")))
        pattern = f"(?{flags}){value}" if flags else value
        target = column if isinstance(column.type, String) else cast(column, String)
        return and_(column.is_not(None), target.regexp_match(pattern))

    if op in (ComparisonOp.IN, ComparisonOp.NIN):
        values = [_coerce(column, v) for v in value]
        membership = _membership(column, values)
        return not_(membership) if op is ComparisonOp.NIN else membership

    value = _coerce(column, value)
    if value is _UNPARSEABLE:
        return true() if op is ComparisonOp.NE else false()

    if op is ComparisonOp.EQ:
        if value is None:
            return column.is_(None)
        return and_(column.is_not(None), column == value)
    if op is ComparisonOp.NE:
        if value is None:
            return column.is_not(None)
        return or_(column.is_(None), column != value)

    if value is None:
        return false()
    if op is ComparisonOp.GT:
        return and_(column.is_not(None), column > value)
    if op is ComparisonOp.GTE:
        return and_(column.is_not(None), column >= value)
    if op is ComparisonOp.LT:
        return and_(column.is_not(None), column < value)
    if op is ComparisonOp.LTE:
        return and_(column.is_not(None), column <= value)

    raise FilterSyntaxError(f"Operador no soportado: {op.value}")


def _membership(column, values: list):
    include_null = any(v is None for v in values)
    concrete = [v for v in values if v is not None and v is not _UNPARSEABLE]
    clauses = []
    if concrete:
        clauses.append(and_(column.is_not(None), column.in_(concrete)))
    if include_null:
        clauses.append(column.is_(None))
    if not clauses:
        return false()
    return or_(*clauses)


def _missing_field(node: Comparison):
    op = node.op
    if op is ComparisonOp.EQ:
        return true() if node.value is None else false()
    if op is ComparisonOp.NE:
        return false() if node.value is None else true()
    if op is ComparisonOp.IN:
        return true() if None in node.value else false()
    if op is ComparisonOp.NIN:
        return false() if None in node.value else true()
    if op is ComparisonOp.EXISTS:
        return false() if node.value else true()
    return false()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _coerce(column, value: Any) -> Any:
    """
    Adapta valores JSON al tipo de la columna (fechas, booleanos y números).

    Lo que no se puede adaptar devuelve `_UNPARSEABLE` y la comparación se
    resuelve sin tocar la base de datos.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple, dict)):
        return _UNPARSEABLE
    column_type = column.type
    if isinstance(column_type, DateTime):
        try:
            return to_naive_local(parse_date(value))
        except FilterSyntaxError:
            logger.debug(f"Valor de fecha no interpretable para {column.key}")
            return _UNPARSEABLE
    if isinstance(column_type, Boolean):
        return _coerce_bool(value)
    if isinstance(column_type, (Integer, Numeric)):
        return _coerce_number(column_type, value)
    return value


def _coerce_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
    return _UNPARSEABLE


def _coerce_number(column_type, value: Any) -> Any:
    if isinstance(value, bool):
        return _UNPARSEABLE
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return _UNPARSEABLE
    try:
        number = float(value.strip())
    except ValueError:
        return _UNPARSEABLE
    if not math.isfinite(number):
        return _UNPARSEABLE
    if isinstance(column_type, Integer) and number.is_integer():
        return int(number)
    return number


def apply_sort(query, model, sort_by: Sequence[str], sort_desc: Sequence[bool]):
    """
    Ordena por varios campos. `sort_desc[i] is True` ordena el campo i de
    forma descendente; si la lista es más corta, el resto va ascendente.
    Los campos desconocidos se ignoran.
    """
    for index, field in enumerate(sort_by or []):
        column = resolve_column(model, field)
        if column is None:
            logger.debug(f"Campo de ordenamiento ignorado: {field}")
            continue
        descending = index < len(sort_desc or []) and sort_desc[index] is True
        query = query.order_by(column.desc() if descending else column.asc())
    return query


def projection_options(model, fields: Optional[Sequence[str]]) -> list:
    """Opciones `load_only` para la proyección; la clave primaria siempre se carga."""
    if not fields:
        return []
    mapper = inspect(model)
    primary_keys = {mapper.get_property_by_column(column).key for column in mapper.primary_key}
    attributes = [
        getattr(model, field)
        for field in dict.fromkeys(fields)
        if field in mapper.column_attrs and field not in primary_keys
    ]
    if not attributes:
        return []
    return [load_only(*attributes)]
