"""
Excepciones de la aplicación.

La jerarquía `AppException` lleva el código HTTP (y, si hace falta, las
cabeceras) que se usan para construir la respuesta: las rutas la convierten
con `handle_service_exception` y las dependencias de autenticación dejan que
la convierta el manejador global registrado en `main.py`.

`FilterSyntaxError` es distinta: la lanza el traductor de filtros y nunca
sale del parser, que la registra y degrada el filtro a vacío.
"""

from typing import Optional, Any


class AppException(Exception):
    """Excepción base para todos los errores de la aplicación."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)


class BusinessException(AppException):
    """Error de reglas de negocio (400)."""

    status_code = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, details=details)


class InvalidQueryParameterException(BusinessException):
    """
    Parámetro de listado rechazado (itemsPerPage, simpleSearch...).

    El nombre del parámetro viaja en `details["field"]` para que el cliente
    sepa qué corregir.
    """

    def __init__(self, message: str, parameter: str, details: Optional[dict[str, Any]] = None):
        self.parameter = parameter
        super().__init__(message, details={"field": parameter, **(details or {})})


class NotFoundException(AppException):
    status_code = 404

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"{resource} no encontrado"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, details=details)


class UnauthorizedException(AppException):
    """Token ausente, inválido o de un usuario que ya no puede entrar (401)."""

    status_code = 401

    def __init__(self, message: str = "No autenticado", details: Optional[dict[str, Any]] = None):
        super().__init__(message, details=details, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenException(AppException):
    status_code = 403

    def __init__(
        self,
        message: str = "No autorizado para realizar esta acción",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class ValidationException(AppException):
    """Datos de entrada inválidos a nivel de servicio (422)."""

    status_code = 422

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        if field:
            details = {**(details or {}), "field": field}
        super().__init__(message, details=details)


class DuplicateException(AppException):
    """Violación de unicidad al crear o actualizar un registro (400)."""

    status_code = 400

    def __init__(
        self,
        resource: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"{resource} duplicado (ya existe)"
        if field and value:
            message += f": {field}='{value}'"
        super().__init__(message, details=details)


class DatabaseException(AppException):
    def __init__(self, message: str = "Error de base de datos", details: Optional[dict[str, Any]] = None):
        super().__init__(message, details=details)


class FilterSyntaxError(ValueError):
    """Expresión de filtro que no se puede traducir al dialecto de consulta."""
