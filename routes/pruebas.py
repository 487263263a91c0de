from core.permissions import Permission
from dependencies import get_prueba_service
from models.pruebas import Prueba, PruebaCreate, PruebaUpdate
from routes.crud_router import build_crud_router

# Sin prueba:write sólo se listan las pruebas propias
router = build_crud_router(
    prefix="/pruebas",
    tags=["pruebas"],
    get_service=get_prueba_service,
    response_model=Prueba,
    create_model=PruebaCreate,
    update_model=PruebaUpdate,
    read_permissions=(Permission.PRUEBA_READ,),
    write_permissions=(Permission.PRUEBA_WRITE,),
    delete_permissions=(Permission.PRUEBA_DELETE,),
    contextual_filter=lambda service, user: service.owner_filter(user),
)
