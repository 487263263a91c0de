"""
Árbol de filtros.

El dialecto nativo (un dict con operadores `$`) se convierte en un árbol
cerrado de nodos inmutables antes de compilarse a SQL. Así el compilador
sólo tiene que cubrir cuatro tipos de nodo y un conjunto fijo de
comparaciones.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union

from core.exceptions import FilterSyntaxError


class ComparisonOp(str, Enum):
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    EXISTS = "$exists"
    REGEX = "$regex"
    CONTAINS = "$contains"


@dataclass(frozen=True)
class Comparison:
    field: str
    op: ComparisonOp
    value: Any
    options: str = ""


@dataclass(frozen=True)
class And:
    children: tuple = ()


@dataclass(frozen=True)
class Or:
    children: tuple = ()


@dataclass(frozen=True)
class Not:
    child: "FilterNode"


FilterNode = Union[Comparison, And, Or, Not]


def build_filter_tree(query: Mapping[str, Any]) -> FilterNode:
    """
    Convierte un filtro nativo en un árbol.

    Un filtro vacío produce `And(())`, que coincide con todo.

    Raises:
        FilterSyntaxError: Si el filtro usa operadores desconocidos o
            estructuras que no se pueden representar
    """
    if not isinstance(query, Mapping):
        raise FilterSyntaxError("El filtro debe ser un objeto")

    nodes: list[FilterNode] = []
    for key, value in query.items():
        if key in ("$and", "$or", "$nor"):
            if not isinstance(value, (list, tuple)):
                raise FilterSyntaxError(f"{key} requiere una lista")
            children = tuple(build_filter_tree(item) for item in value)
            if key == "$and":
                nodes.append(And(children))
            elif key == "$or":
                nodes.append(Or(children))
            else:
                nodes.append(Not(Or(children)))
        elif key == "$not":
            nodes.append(Not(build_filter_tree(value)))
        elif key.startswith("$"):
            raise FilterSyntaxError(f"Operador no soportado: {key}")
        else:
            nodes.append(_field_node(key, value))

    if len(nodes) == 1:
        return nodes[0]
    return And(tuple(nodes))


def _field_node(field: str, value: Any) -> FilterNode:
    if isinstance(value, Mapping):
        if not value:
            raise FilterSyntaxError(f"Condición vacía para el campo '{field}'")
        if not all(isinstance(k, str) and k.startswith("$") for k in value):
            raise FilterSyntaxError(f"Subdocumentos no soportados en el campo '{field}'")

        options = value.get("$options", "")
        parts: list[FilterNode] = []
        for op, operand in value.items():
            if op == "$options":
                continue
            if op == "$not":
                parts.append(Not(_field_node(field, operand)))
                continue
            try:
                comparison_op = ComparisonOp(op)
            except ValueError:
                raise FilterSyntaxError(f"Operador no soportado: {op}")
            if comparison_op in (ComparisonOp.IN, ComparisonOp.NIN):
                operand = tuple(operand) if isinstance(operand, (list, tuple)) else (operand,)
            parts.append(Comparison(
                field=field,
                op=comparison_op,
                value=operand,
                options=options if comparison_op is ComparisonOp.REGEX else "",
            ))

        if not parts:
            raise FilterSyntaxError(f"$options sin $regex en el campo '{field}'")
        return parts[0] if len(parts) == 1 else And(tuple(parts))

    if isinstance(value, (list, tuple)):
        return Comparison(field=field, op=ComparisonOp.IN, value=tuple(value))
    return Comparison(field=field, op=ComparisonOp.EQ, value=value)


def referenced_fields(node: FilterNode) -> set[str]:
    """Devuelve los campos usados por un árbol (útil para logs y validaciones)."""
    if isinstance(node, Comparison):
        return {node.field}
    if isinstance(node, Not):
        return referenced_fields(node.child)
    fields: set[str] = set()
    for child in node.children:
        fields |= referenced_fields(child)
    return fields
