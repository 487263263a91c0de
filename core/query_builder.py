"""
Traducción del DSL de filtros al dialecto nativo de consulta.

El cliente puede escribir operadores "legibles" (`like`, `between`,
`>=`, `is null`...) o directamente operadores `$`. `QueryBuilder.build`
devuelve siempre el dialecto nativo ($eq, $gte, $in, $contains, $and...),
que es lo que entiende `core.filter_tree`.

Ejemplo:
    {"price": {"between": [10, 20]}, "or": [{"name": {"like": "caf"}}, {"active": true}]}
    ->
    {"price": {"$gte": 10, "$lte": 20},
     "$or": [{"name": {"$contains": "caf"}}, {"active": {"$eq": true}}]}
"""

from datetime import datetime
from typing import Any, Mapping

from dateutil import parser as date_parser

from core.exceptions import FilterSyntaxError

LOGICAL_KEYS = {
    "and": "$and",
    "or": "$or",
    "$and": "$and",
    "$or": "$or",
    "$nor": "$nor",
}

NATIVE_OPERATORS = frozenset({
    "$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin",
    "$exists", "$regex", "$options", "$contains",
})

SIMPLE_OPERATORS = {
    "=": "$eq",
    "eq": "$eq",
    "!=": "$ne",
    "ne": "$ne",
    "<>": "$ne",
    ">": "$gt",
    "gt": "$gt",
    ">=": "$gte",
    "gte": "$gte",
    "<": "$lt",
    "lt": "$lt",
    "<=": "$lte",
    "lte": "$lte",
}


def _as_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def parse_date(value: Any) -> datetime:
    """Convierte un valor en datetime o lanza FilterSyntaxError."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise FilterSyntaxError("Se esperaba una fecha en formato texto")
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise FilterSyntaxError(f"Fecha inválida: {e}") from e


class QueryBuilder:
    """Construye filtros nativos a partir del DSL de la API."""

    def build(self, conditions: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(conditions, Mapping):
            raise FilterSyntaxError("El filtro debe ser un objeto JSON")

        query: dict[str, Any] = {}
        for key, value in conditions.items():
            if key in LOGICAL_KEYS:
                if not isinstance(value, list):
                    raise FilterSyntaxError(f"El operador '{key}' requiere una lista de condiciones")
                query[LOGICAL_KEYS[key]] = [self.build(item) for item in value]
            elif key in ("not", "$not"):
                query["$nor"] = [self.build(value)]
            elif key.startswith("$"):
                raise FilterSyntaxError(f"Operador lógico no soportado: {key}")
            else:
                query[key] = self.build_field(key, value)
        return query

    def build_field(self, field: str, value: Any) -> Any:
        """Traduce la condición de un campo; varios operadores se combinan."""
        if isinstance(value, Mapping):
            result: dict[str, Any] = {}
            for op, operand in value.items():
                result.update(self._translate(field, op, operand))
            if not result:
                raise FilterSyntaxError(f"Condición vacía para el campo '{field}'")
            return result
        if isinstance(value, (list, tuple)):
            return {"$in": list(value)}
        return {"$eq": value}

    def _translate(self, field: str, op: str, operand: Any) -> dict[str, Any]:
        if op == "$not":
            if not isinstance(operand, Mapping):
                raise FilterSyntaxError(f"$not en '{field}' requiere un objeto de operadores")
            return {"$not": self.build_field(field, operand)}

        if op.startswith("$"):
            if op not in NATIVE_OPERATORS:
                raise FilterSyntaxError(f"Operador no soportado: {op}")
            if op in ("$in", "$nin"):
                return {op: _as_list(operand)}
            return {op: operand}

        key = op.strip().lower()
        if key in SIMPLE_OPERATORS:
            return {SIMPLE_OPERATORS[key]: operand}
        if key == "in":
            return {"$in": _as_list(operand)}
        if key in ("nin", "not in"):
            return {"$nin": _as_list(operand)}
        if key == "like":
            return {"$contains": self._like_value(field, operand)}
        if key == "not like":
            return {"$not": {"$contains": self._like_value(field, operand)}}
        if key == "between":
            return self._between(field, operand)
        if key == ">*date":
            return {"$gt": parse_date(operand)}
        if key == "<*date":
            return {"$lt": parse_date(operand)}
        if key == "exists":
            if not isinstance(operand, bool):
                raise FilterSyntaxError(f"'exists' en '{field}' requiere un valor booleano")
            return {"$exists": operand}
        if key == "is null":
            return {"$eq": None}
        if key == "is not null":
            return {"$ne": None}

        raise FilterSyntaxError(f"Operador desconocido '{op}' en el campo '{field}'")

    @staticmethod
    def _like_value(field: str, operand: Any) -> str:
        if operand is None or isinstance(operand, (dict, list)):
            raise FilterSyntaxError(f"'like' en '{field}' requiere un texto")
        return str(operand)

    @staticmethod
    def _between(field: str, operand: Any) -> dict[str, Any]:
        if not isinstance(operand, (list, tuple)) or len(operand) != 2:
            raise FilterSyntaxError(f"'between' en '{field}' requiere exactamente dos valores")
        low, high = operand
        if low is None or high is None:
            raise FilterSyntaxError(f"'between' en '{field}' no acepta valores nulos")
        try:
            if low > high:
                raise FilterSyntaxError(
                    f"'between' en '{field}': el mínimo no puede ser mayor que el máximo"
                )
        except TypeError as e:
            raise FilterSyntaxError(f"'between' en '{field}': valores no comparables") from e
        return {"$gte": low, "$lte": high}
