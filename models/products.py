from pydantic import BaseModel, Field
from typing import Optional

from models.common import AuditedModel


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Nombre (único)")
    active: bool = Field(True, description="Disponible para la venta")
    price: float = Field(..., ge=0, description="Precio")


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    active: Optional[bool] = None
    price: Optional[float] = Field(None, ge=0)


class Product(ProductBase, AuditedModel):
    pass
