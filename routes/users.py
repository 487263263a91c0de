from core.permissions import Permission
from dependencies import get_user_service
from models.users import User, UserPrivilegedCreate, UserUpdate
from routes.crud_router import build_crud_router

# Administración de usuarios; el registro público está en /auth/register
router = build_crud_router(
    prefix="/users",
    tags=["users"],
    get_service=get_user_service,
    response_model=User,
    create_model=UserPrivilegedCreate,
    update_model=UserUpdate,
    read_permissions=(Permission.USER_READ,),
    write_permissions=(Permission.USER_WRITE,),
    delete_permissions=(Permission.USER_DELETE,),
)
