"""
Configuración de fixtures para pytest.

Este módulo contiene fixtures reutilizables para todos los tests.
"""

import pytest
import os
from typing import Generator, Dict, Any, List
from datetime import datetime
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Configurar para usar base de datos en memoria para tests
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from main import app
from database.db import get_db, Base, hash_password
from database.models import UserORM, ProductORM, LibraryORM
from auth import create_access_token


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== User Fixtures ====================

def _create_user(db_session: Session, id: str, username: str, role: str) -> UserORM:
    salt_hex, hash_hex = hash_password("password123")
    user = UserORM(
        id=id,
        username=username,
        name=f"{username.capitalize()} Test",
        email=f"{username}@example.com",
        role=role,
        password_salt=salt_hex,
        password_hash=hash_hex,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session: Session) -> UserORM:
    return _create_user(db_session, "ffffffff-ffff-ffff-ffff-ffffffffffff", "testadmin", "admin")


@pytest.fixture
def developer_user(db_session: Session) -> UserORM:
    return _create_user(db_session, "dddddddd-dddd-dddd-dddd-dddddddddddd", "testdev", "developer")


@pytest.fixture
def basic_user(db_session: Session) -> UserORM:
    return _create_user(db_session, "12345678-1234-5678-1234-567812345678", "testuser", "user")


@pytest.fixture
def content_manager_user(db_session: Session) -> UserORM:
    return _create_user(db_session, "cccccccc-cccc-cccc-cccc-cccccccccccc", "testeditor", "content-manager")


# ==================== Auth Token Fixtures ====================

def _headers(user: UserORM) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': user.id})}"}


@pytest.fixture
def auth_headers_admin(admin_user: UserORM) -> Dict[str, str]:
    """Generate authentication headers for admin."""
    return _headers(admin_user)


@pytest.fixture
def auth_headers_developer(developer_user: UserORM) -> Dict[str, str]:
    return _headers(developer_user)


@pytest.fixture
def auth_headers_user(basic_user: UserORM) -> Dict[str, str]:
    return _headers(basic_user)


@pytest.fixture
def auth_headers_content_manager(content_manager_user: UserORM) -> Dict[str, str]:
    return _headers(content_manager_user)


# ==================== Entity Fixtures ====================

@pytest.fixture
def products(db_session: Session) -> List[ProductORM]:
    """Doce productos activos: "Producto 01" ... "Producto 12", precio = 10 * n."""
    items = [
        ProductORM(
            name=f"Producto {n:02d}",
            active=n % 2 == 0,
            price=float(n * 10),
            created_at=datetime(2024, 1, n, 12, 0, 0),
        )
        for n in range(1, 13)
    ]
    db_session.add_all(items)
    db_session.commit()
    for item in items:
        db_session.refresh(item)
    return items


@pytest.fixture
def product_data() -> Dict[str, Any]:
    return {"name": "Teclado mecánico", "active": True, "price": 120.5}


@pytest.fixture
def library(db_session: Session, developer_user: UserORM) -> LibraryORM:
    library = LibraryORM(
        id="aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
        name="Fotos del Año",
        slug="fotos-del-ano",
        description="Imágenes del sitio",
        user_id=developer_user.id,
        folders=[],
    )
    db_session.add(library)
    db_session.commit()
    db_session.refresh(library)
    return library


@pytest.fixture
def media_data(library: LibraryORM) -> Dict[str, Any]:
    return {
        "filename": "portada.jpg",
        "original_filename": "Portada Final.JPG",
        "type": "image",
        "mime_type": "image/jpeg",
        "size": 20480,
        "storage": {"provider": "minio", "bucket": "media", "key": "fotos-del-ano/portada.jpg"},
        "library_id": library.id,
        "metadata": {"width": 1920, "height": 1080},
        "tag_ids": [],
    }


# ==================== Utility Functions ====================

def assert_valid_uuid(uuid_string: str) -> bool:
    """Assert that a string is a valid UUID."""
    from uuid import UUID
    try:
        UUID(str(uuid_string))
        return True
    except (ValueError, AttributeError):
        return False
