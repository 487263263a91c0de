from core.permissions import Permission
from dependencies import get_library_service
from models.media import Library, LibraryCreate, LibraryUpdate
from routes.crud_router import build_crud_router

router = build_crud_router(
    prefix="/libraries",
    tags=["libraries"],
    get_service=get_library_service,
    response_model=Library,
    create_model=LibraryCreate,
    update_model=LibraryUpdate,
    read_permissions=(Permission.LIBRARY_READ,),
    write_permissions=(Permission.LIBRARY_WRITE,),
    delete_permissions=(Permission.LIBRARY_DELETE,),
)
