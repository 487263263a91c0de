from pydantic import BaseModel, Field
from typing import Optional

from models.common import AuditedModel


class PruebaCreate(BaseModel):
    """El propietario (`user_id`) se toma del usuario autenticado."""
    name: str = Field(..., min_length=1, max_length=200)


class PruebaUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)


class Prueba(AuditedModel):
    name: str
    user_id: Optional[str] = None
