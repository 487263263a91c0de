"""
Dependency injection for services and repositories.

Cada petición recibe una sesión (`get_db`) y un contexto de actividad
(`get_request_context`) propios; los repositorios se construyen con ambos
a partir del `EntityConfig` de la entidad.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from core.request_context import RequestContext, get_request_context
from database.db import get_db
from repositories import entities
from repositories.base_repository import EntityRepository
from repositories.user_repository import UserRepository
from services.category_service import CategoryService, TagService
from services.library_service import LibraryService
from services.media_service import MediaService
from services.product_service import ProductService
from services.prueba_service import PruebaService
from services.user_service import UserService


def get_prueba_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> PruebaService:
    return PruebaService(EntityRepository(db, entities.PRUEBA, context))


def get_product_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> ProductService:
    return ProductService(EntityRepository(db, entities.PRODUCT, context))


def get_category_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> CategoryService:
    return CategoryService(EntityRepository(db, entities.CATEGORY, context))


def get_tag_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> TagService:
    return TagService(EntityRepository(db, entities.TAG, context))


def get_library_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> LibraryService:
    return LibraryService(EntityRepository(db, entities.LIBRARY, context))


def get_media_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> MediaService:
    """MediaService necesita también el servicio de librerías para validar library_id."""
    library_service = LibraryService(EntityRepository(db, entities.LIBRARY, context))
    return MediaService(EntityRepository(db, entities.MEDIA, context), library_service)


def get_user_service(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> UserService:
    return UserService(UserRepository(db, context))
