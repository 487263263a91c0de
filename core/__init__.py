""" Utilidades principales y componentes compartidos para la aplicación.

Este paquete contiene:

- Excepciones personalizadas
- Saneamiento, traducción y compilación de filtros
- Paginación y contrato de query string de los listados
- Contexto por petición y permisos
"""

from .exceptions import (
    AppException,
    BusinessException,
    InvalidQueryParameterException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    DuplicateException,
    ForbiddenException,
    DatabaseException,
    FilterSyntaxError,
)
from .filter_sanitizer import (
    PROTECTED_FIELDS,
    SanitizerOptions,
    SanitizationResult,
    sanitize_filter,
)
from .filtering import (
    parse_advanced_filters,
    merge_filters,
    build_total_rows_filter,
)
from .pagination import (
    PaginationParams,
    PaginationMeta,
    PaginatedResult,
    calculate_pagination_meta,
    create_paginated_response,
    calculate_skip,
)
from .permissions import Permission, Role, has_permissions
from .request_context import RequestContext, get_request_context
from .utils import (
    enum_to_value,
    validate_uuid,
    make_slug,
    orm_to_dict,
)

__all__ = [
    # Excepciones
    "AppException",
    "BusinessException",
    "InvalidQueryParameterException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "DuplicateException",
    "ForbiddenException",
    "DatabaseException",
    "FilterSyntaxError",
    # filtros
    "PROTECTED_FIELDS",
    "SanitizerOptions",
    "SanitizationResult",
    "sanitize_filter",
    "parse_advanced_filters",
    "merge_filters",
    "build_total_rows_filter",
    # paginacion
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResult",
    "calculate_pagination_meta",
    "create_paginated_response",
    "calculate_skip",
    # permisos y contexto
    "Permission",
    "Role",
    "has_permissions",
    "RequestContext",
    "get_request_context",
    # utils
    "enum_to_value",
    "validate_uuid",
    "make_slug",
    "orm_to_dict",
]
