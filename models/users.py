from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from core.permissions import Role


class UserCreate(BaseModel):
    """Registro público de usuarios.

    El rol se asigna en el servidor ("user"); sólo un admin puede crear
    usuarios con otro rol.
    """
    username: str = Field(..., min_length=3, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=200, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)


class UserPrivilegedCreate(UserCreate):
    role: Role = Field(..., description="Rol del usuario")


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    name: str
    email: Optional[str] = None
    role: Role
    is_active: bool = True
    created_at: Optional[datetime] = None
    is_deleted: bool = False


class LoginRequest(BaseModel):
    """Login con JSON."""
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    user: User
    permissions: list[str] = []


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=200, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)
