from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from auth import create_user_token, get_current_user_dep
from core.permissions import permissions_for_role
from database import UserORM
from dependencies import get_user_service
from models.users import LoginRequest, LoginResponse, TokenResponse, User, UserCreate
from routes.crud_router import handle_service_exception
from services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def _permission_names(user: UserORM) -> list[str]:
    return sorted(p.value for p in permissions_for_role(user.role))


@router.post("/login", response_model=LoginResponse)
def login_with_json(login_data: LoginRequest, service: UserService = Depends(get_user_service)):
    """
    Login con JSON. Devuelve el token, los datos del usuario y sus permisos.
    """
    try:
        user = service.authenticate(login_data.username, login_data.password)
    except Exception as e:
        raise handle_service_exception(e)
    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": User.model_validate(user),
        "permissions": _permission_names(user),
    }


@router.post("/token", response_model=TokenResponse)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: UserService = Depends(get_user_service),
):
    """
    OAuth2 compatible token endpoint (form-data).
    Used by Swagger UI and OAuth2 clients.
    """
    try:
        user = service.authenticate(form_data.username, form_data.password)
    except Exception as e:
        raise handle_service_exception(e)
    return {"access_token": create_user_token(user), "token_type": "bearer"}


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, service: UserService = Depends(get_user_service)):
    """Registro público; el usuario se crea con rol `user`."""
    try:
        return service.register(user_data.model_dump())
    except Exception as e:
        raise handle_service_exception(e)


@router.get("/me")
def read_me(current_user: UserORM = Depends(get_current_user_dep)):
    return {
        "user": User.model_validate(current_user).model_dump(),
        "permissions": _permission_names(current_user),
    }
