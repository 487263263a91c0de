"""
Funciones de utilidad generales.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Iterable, Optional
from uuid import UUID

from slugify import slugify
from sqlalchemy import inspect

from core.exceptions import ValidationException


def enum_to_value(value: Any) -> Any:
    """
    Convierte un Enum a su valor, o devuelve el valor sin cambios.

    Args:
        value: Valor a convertir

    Returns:
        Enum.value si value es un Enum, de lo contrario el valor sin cambios
    """
    if isinstance(value, PyEnum):
        return value.value
    return value


def validate_uuid(value: str, field_name: str = "id") -> str:
    """
    Valida que una cadena sea un UUID válido.

    Raises:
        ValidationException: Si el valor no es un UUID válido
    """
    try:
        UUID(str(value))
        return str(value)
    except (ValueError, AttributeError, TypeError):
        raise ValidationException(
            message=f"{field_name} debe ser un UUID válido",
            field=field_name,
            details={"value": str(value)}
        )


def make_slug(text: str, max_length: int = 120) -> str:
    """Slug en minúsculas y sin acentos ("Fotos del Año" -> "fotos-del-ano")."""
    return slugify(text or "", max_length=max_length)


def orm_to_dict(obj: Any, fields: Optional[Iterable[str]] = None) -> dict[str, Any]:
    """
    Serializa una instancia ORM a dict usando los nombres de atributo.

    Sólo incluye atributos ya cargados, así una consulta con `load_only`
    no dispara cargas perezosas. Si se pasa `fields`, se limita a esos
    campos más la clave primaria.

    Args:
        obj: Instancia ORM
        fields: Proyección opcional

    Returns:
        Diccionario con valores serializables
    """
    state = inspect(obj)
    mapper = state.mapper
    primary_keys = {mapper.get_property_by_column(column).key for column in mapper.primary_key}
    wanted = set(fields) | primary_keys if fields else None

    data: dict[str, Any] = {}
    for attr in mapper.column_attrs:
        key = attr.key
        if key in state.unloaded:
            continue
        if wanted is not None and key not in wanted:
            continue
        value = getattr(obj, key)
        if isinstance(value, datetime):
            value = value.isoformat()
        data[key] = enum_to_value(value)
    return data
