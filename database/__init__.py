from .db import (
    SessionLocal,
    create_tables,
    engine,
    get_db,
    UserORM,
    PruebaORM,
    ProductORM,
    CategoryORM,
    TagORM,
    LibraryORM,
    MediaORM,
    get_database_url,
    hash_password,
    verify_password
)

__all__ = [
    "SessionLocal",
    "create_tables",
    "engine",
    "get_db",
    "UserORM",
    "PruebaORM",
    "ProductORM",
    "CategoryORM",
    "TagORM",
    "LibraryORM",
    "MediaORM",
    "get_database_url",
    "hash_password",
    "verify_password"
]
