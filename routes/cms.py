"""
Rutas del CMS: categorías y etiquetas.
"""

from dependencies import get_category_service, get_tag_service
from models.cms import Category, CategoryCreate, CategoryUpdate, Tag, TagCreate, TagUpdate
from routes.crud_router import build_crud_router

categories_router = build_crud_router(
    prefix="/categories",
    tags=["categories"],
    get_service=get_category_service,
    response_model=Category,
    create_model=CategoryCreate,
    update_model=CategoryUpdate,
)

tags_router = build_crud_router(
    prefix="/tags",
    tags=["tags"],
    get_service=get_tag_service,
    response_model=Tag,
    create_model=TagCreate,
    update_model=TagUpdate,
)
