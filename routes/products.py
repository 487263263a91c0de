from dependencies import get_product_service
from models.products import Product, ProductCreate, ProductUpdate
from routes.crud_router import build_crud_router

# Productos, categorías y etiquetas sólo requieren autenticación
router = build_crud_router(
    prefix="/products",
    tags=["products"],
    get_service=get_product_service,
    response_model=Product,
    create_model=ProductCreate,
    update_model=ProductUpdate,
)
