from .auth import router as auth_router
from .pruebas import router as pruebas_router
from .products import router as products_router
from .cms import categories_router, tags_router
from .libraries import router as libraries_router
from .media import router as media_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "pruebas_router",
    "products_router",
    "categories_router",
    "tags_router",
    "libraries_router",
    "media_router",
    "users_router",
]
