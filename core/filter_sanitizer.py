"""
Saneamiento de filtros avanzados enviados por el cliente.

`sanitize_filter` recorre un filtro arbitrario (el JSON de `filters`) y
devuelve una copia sin campos protegidos, operadores desconocidos, valores
demasiado grandes ni subárboles más profundos que el máximo configurado.
Nunca lanza excepciones: lo que no pasa la validación se descarta y queda
registrado como violación.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# Campos que ningún filtro de usuario puede tocar
PROTECTED_FIELDS = frozenset({
    "is_deleted",
    "deleted_at",
    "deleted_by",
    "password_hash",
    "password_salt",
})

LOGICAL_OPERATORS = frozenset({"$and", "$or", "$nor", "and", "or"})
NEGATION_OPERATORS = frozenset({"$not", "not"})

FIELD_OPERATORS = frozenset({
    # dialecto nativo
    "$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin",
    "$exists", "$regex", "$options", "$contains", "$not",
    # DSL de filtros
    "=", "eq", "!=", "ne", "<>", ">", "gt", ">=", "gte", "<", "lt", "<=", "lte",
    "in", "nin", "not in", "like", "not like", "between",
    ">*date", "<*date", "exists", "is null", "is not null",
})

# Únicos operadores que aceptan una lista como operando
LIST_OPERATORS = frozenset({"$in", "$nin", "in", "nin", "not in", "between"})

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_REGEX_FLAGS = re.compile(r"^[imsx]*$")
# (a+)+, (a*)*, (.*a){n}...: backtracking exponencial
_NESTED_QUANTIFIER = re.compile(r"\([^)]*[+*][^)]*\)\s*[+*{]")

_DROP = object()


@dataclass
class SanitizerOptions:
    allowed_fields: Optional[set[str]] = None
    custom_protected_fields: list[str] = field(default_factory=list)
    logger: Optional[logging.Logger] = None
    max_depth: int = 5
    max_array_length: int = 100
    max_string_length: int = 200
    max_object_keys: int = 50

    @property
    def protected_fields(self) -> frozenset[str]:
        return PROTECTED_FIELDS | set(self.custom_protected_fields)


@dataclass
class SanitizationResult:
    sanitized: dict[str, Any]
    violations: list[str]


def sanitize_filter(
    filter: Any,
    depth: int = 0,
    options: Optional[SanitizerOptions] = None,
) -> SanitizationResult:
    """
    Sanea un filtro de usuario.

    Args:
        filter: Filtro ya decodificado desde JSON
        depth: Profundidad inicial (0 para el nivel raíz)
        options: Campos protegidos, lista blanca y límites

    Returns:
        SanitizationResult con el filtro limpio y la lista de violaciones
    """
    options = options or SanitizerOptions()
    violations: list[str] = []

    if isinstance(filter, Mapping):
        sanitized = _sanitize_conditions(filter, depth, options, violations)
    else:
        violations.append(f"Filter must be an object, got {type(filter).__name__}")
        sanitized = {}

    if violations:
        (options.logger or logger).warning(
            f"Filtro saneado con {len(violations)} violación(es): {'; '.join(violations)}"
        )
    return SanitizationResult(sanitized=sanitized, violations=violations)


def is_safe_regex(pattern: str) -> bool:
    """Rechaza patrones con cuantificadores anidados o que no compilan."""
    if _NESTED_QUANTIFIER.search(pattern):
        return False
    try:
        re.compile(pattern)
    except re.error:
        return False
    return True


def _depth_exceeded(depth: int, options: SanitizerOptions, violations: list[str]) -> bool:
    if depth > options.max_depth:
        violations.append(f"Maximum filter depth exceeded ({options.max_depth})")
        return True
    return False


def _too_many_keys(obj: Mapping, options: SanitizerOptions, violations: list[str]) -> bool:
    if len(obj) > options.max_object_keys:
        violations.append(
            f"Too many keys in filter object ({len(obj)} > {options.max_object_keys})"
        )
        return True
    return False


def _sanitize_conditions(
    conditions: Mapping,
    depth: int,
    options: SanitizerOptions,
    violations: list[str],
) -> dict[str, Any]:
    if _depth_exceeded(depth, options, violations):
        return {}
    if _too_many_keys(conditions, options, violations):
        return {}

    protected = options.protected_fields
    result: dict[str, Any] = {}
    for key, value in conditions.items():
        if not isinstance(key, str):
            violations.append(f"Invalid filter key: {key!r}")
            continue

        if key in LOGICAL_OPERATORS:
            clauses = _sanitize_clause_list(key, value, depth + 1, options, violations)
            if clauses:
                result[key] = clauses
            continue

        if key in NEGATION_OPERATORS:
            if isinstance(value, Mapping):
                inner = _sanitize_conditions(value, depth + 1, options, violations)
                if inner:
                    result[key] = inner
            else:
                violations.append(f"Operator {key} requires an object")
            continue

        if key.startswith("$"):
            violations.append(f"Blocked forbidden operator: {key}")
            continue
        if key in protected:
            violations.append(f"Blocked protected field: {key}")
            continue
        if options.allowed_fields is not None and key not in options.allowed_fields:
            violations.append(f"Field not in whitelist: {key}")
            continue
        if not _FIELD_NAME.match(key):
            violations.append(f"Invalid field name: {key}")
            continue

        clean = _sanitize_field_value(key, value, depth + 1, options, violations)
        if clean is not _DROP:
            result[key] = clean
    return result


def _sanitize_clause_list(
    operator: str,
    value: Any,
    depth: int,
    options: SanitizerOptions,
    violations: list[str],
) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        violations.append(f"Operator {operator} requires an array")
        return []
    if len(value) > options.max_array_length:
        violations.append(
            f"Array too long in {operator} ({len(value)} > {options.max_array_length})"
        )
        return []

    clauses = []
    for item in value:
        if not isinstance(item, Mapping):
            violations.append(f"Operator {operator} only accepts objects")
            continue
        clean = _sanitize_conditions(item, depth, options, violations)
        if clean:
            clauses.append(clean)
    return clauses


def _sanitize_field_value(
    field_name: str,
    value: Any,
    depth: int,
    options: SanitizerOptions,
    violations: list[str],
) -> Any:
    if isinstance(value, Mapping):
        return _sanitize_operators(field_name, value, depth, options, violations)
    return _sanitize_literal(field_name, value, options, violations)


def _sanitize_operators(
    field_name: str,
    operators: Mapping,
    depth: int,
    options: SanitizerOptions,
    violations: list[str],
) -> Any:
    if _depth_exceeded(depth, options, violations):
        return _DROP
    if _too_many_keys(operators, options, violations):
        return _DROP

    result: dict[str, Any] = {}
    for op, operand in operators.items():
        if not isinstance(op, str):
            violations.append(f"Invalid operator in field {field_name}")
            continue
        if op == "$not":
            if not isinstance(operand, Mapping):
                violations.append(f"Operator $not in field {field_name} requires an object")
                continue
            inner = _sanitize_operators(field_name, operand, depth + 1, options, violations)
            if inner is not _DROP:
                result[op] = inner
            continue
        if op not in FIELD_OPERATORS:
            if op.startswith("$"):
                violations.append(f"Blocked forbidden operator: {op}")
            else:
                violations.append(f"Unknown operator '{op}' in field {field_name}")
            continue
        if isinstance(operand, Mapping):
            violations.append(f"Operator {op} in field {field_name} does not accept objects")
            continue
        if isinstance(operand, list) and op not in LIST_OPERATORS:
            violations.append(f"Operator {op} in field {field_name} does not accept arrays")
            continue

        clean = _sanitize_literal(field_name, operand, options, violations)
        if clean is _DROP:
            continue
        if op == "$regex" and not (isinstance(clean, str) and is_safe_regex(clean)):
            violations.append(f"Invalid or dangerous regex pattern in field {field_name}")
            continue
        if op == "$options" and not (isinstance(clean, str) and _REGEX_FLAGS.match(clean)):
            violations.append(f"Invalid regex options in field {field_name}")
            continue
        result[op] = clean

    if "$options" in result and "$regex" not in result:
        del result["$options"]
    return result or _DROP


def _sanitize_literal(
    field_name: str,
    value: Any,
    options: SanitizerOptions,
    violations: list[str],
) -> Any:
    if isinstance(value, list):
        if len(value) > options.max_array_length:
            violations.append(
                f"Array too long in field {field_name} ({len(value)} > {options.max_array_length})"
            )
            return _DROP
        items = []
        for item in value:
            clean = _sanitize_scalar(field_name, item, options, violations)
            if clean is not _DROP:
                items.append(clean)
        return items
    return _sanitize_scalar(field_name, value, options, violations)


def _sanitize_scalar(
    field_name: str,
    value: Any,
    options: SanitizerOptions,
    violations: list[str],
) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        if len(value) > options.max_string_length:
            violations.append(
                f"String too long in field {field_name} ({len(value)} > {options.max_string_length})"
            )
            return _DROP
        return value
    violations.append(f"Unsupported value type in field {field_name}: {type(value).__name__}")
    return _DROP
