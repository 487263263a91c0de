from .common import (
    AuditedModel,
    DeleteResponse,
    HealthCheckResponse,
    create_delete_response,
)
from .users import (
    User,
    UserCreate,
    UserPrivilegedCreate,
    UserUpdate,
    LoginRequest,
    LoginResponse,
    TokenResponse,
)
from .pruebas import Prueba, PruebaCreate, PruebaUpdate
from .products import Product, ProductCreate, ProductUpdate
from .cms import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    Tag,
    TagCreate,
    TagUpdate,
    Translation,
    Seo,
)
from .media import (
    Folder,
    Library,
    LibraryCreate,
    LibraryUpdate,
    Media,
    MediaCreate,
    MediaUpdate,
    MediaType,
    StorageProvider,
)

__all__ = [
    # Common responses
    "AuditedModel", "DeleteResponse", "HealthCheckResponse",
    "create_delete_response",
    # Users
    "User", "UserCreate", "UserPrivilegedCreate", "UserUpdate", "LoginRequest", "LoginResponse", "TokenResponse",
    # Pruebas
    "Prueba", "PruebaCreate", "PruebaUpdate",
    # Products
    "Product", "ProductCreate", "ProductUpdate",
    # CMS
    "Category", "CategoryCreate", "CategoryUpdate", "Tag", "TagCreate", "TagUpdate",
    "Translation", "Seo",
    # Media
    "Folder", "Library", "LibraryCreate", "LibraryUpdate",
    "Media", "MediaCreate", "MediaUpdate", "MediaType", "StorageProvider",
]
