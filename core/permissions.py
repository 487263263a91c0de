"""
Roles y permisos.

Los permisos tienen la forma `<recurso>:<acción>`. El rol admin tiene
`system:admin`, que concede cualquier permiso.
"""

from enum import Enum


class Permission(str, Enum):
    MEDIA_READ = "media:read"
    MEDIA_WRITE = "media:write"
    MEDIA_DELETE = "media:delete"

    LIBRARY_READ = "library:read"
    LIBRARY_WRITE = "library:write"
    LIBRARY_DELETE = "library:delete"

    USER_READ = "user:read"
    USER_WRITE = "user:write"
    USER_DELETE = "user:delete"

    PRUEBA_READ = "prueba:read"
    PRUEBA_WRITE = "prueba:write"
    PRUEBA_DELETE = "prueba:delete"

    SYSTEM_ADMIN = "system:admin"


class Role(str, Enum):
    admin = "admin"
    developer = "developer"
    user = "user"
    content_manager = "content-manager"


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.admin: frozenset({Permission.SYSTEM_ADMIN}),
    Role.developer: frozenset({
        Permission.MEDIA_READ,
        Permission.MEDIA_WRITE,
        Permission.LIBRARY_READ,
        Permission.LIBRARY_WRITE,
        Permission.USER_READ,
    }),
    Role.user: frozenset({
        Permission.PRUEBA_READ,
    }),
    Role.content_manager: frozenset({
        Permission.MEDIA_READ,
        Permission.MEDIA_WRITE,
        Permission.MEDIA_DELETE,
        Permission.LIBRARY_READ,
        Permission.LIBRARY_WRITE,
        Permission.PRUEBA_READ,
        Permission.PRUEBA_WRITE,
        Permission.PRUEBA_DELETE,
    }),
}


def permissions_for_role(role: str) -> frozenset[Permission]:
    try:
        return ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return frozenset()


def has_permissions(role: str, *required: Permission) -> bool:
    """True si el rol tiene todos los permisos indicados."""
    granted = permissions_for_role(role)
    if Permission.SYSTEM_ADMIN in granted:
        return True
    return all(permission in granted for permission in required)
