"""
Esquemas del CMS: categorías y etiquetas traducibles.

Cada registro guarda una lista de traducciones, una por locale. El
aplanado de traducciones para mostrar no se hace aquí: la API devuelve
siempre la lista completa.
"""
from pydantic import AfterValidator, BaseModel, Field, model_validator
from typing import Annotated, Optional

from models.common import AuditedModel

HEX_COLOR = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class Seo(BaseModel):
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: Optional[list[str]] = None


class Translation(BaseModel):
    locale: str = Field(..., min_length=2, max_length=10)
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120, description="Se genera desde name si falta")
    description: Optional[str] = Field(None, max_length=500)
    seo: Optional[Seo] = None


def _unique_locales(translations: Optional[list[Translation]]) -> Optional[list[Translation]]:
    if translations is None:
        return translations
    locales = [t.locale for t in translations]
    if len(locales) != len(set(locales)):
        raise ValueError("No puede haber dos traducciones con el mismo locale")
    return translations


Translations = Annotated[list[Translation], AfterValidator(_unique_locales)]


# ==================== Categories ====================

class CategoryCreate(BaseModel):
    default_locale: str = Field("es-ES", min_length=2, max_length=10)
    parent_id: Optional[str] = None
    order: int = Field(0, ge=0)
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    media_id: Optional[str] = None
    is_active: bool = True
    translations: Translations = Field(..., min_length=1)


    @model_validator(mode="after")
    def default_locale_translated(self):
        if self.default_locale not in {t.locale for t in self.translations}:
            raise ValueError("Debe existir una traducción para default_locale")
        return self


class CategoryUpdate(BaseModel):
    default_locale: Optional[str] = Field(None, min_length=2, max_length=10)
    parent_id: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    media_id: Optional[str] = None
    is_active: Optional[bool] = None
    translations: Optional[Translations] = Field(None, min_length=1)



class Category(AuditedModel):
    default_locale: str
    parent_id: Optional[str] = None
    order: int = 0
    icon: Optional[str] = None
    color: Optional[str] = None
    media_id: Optional[str] = None
    is_active: bool = True
    translations: list[Translation] = []


# ==================== Tags ====================

class TagCreate(BaseModel):
    default_locale: str = Field("es-ES", min_length=2, max_length=10)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=100)
    media_id: Optional[str] = None
    is_active: bool = True
    translations: Translations = Field(..., min_length=1)



class TagUpdate(BaseModel):
    default_locale: Optional[str] = Field(None, min_length=2, max_length=10)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=100)
    media_id: Optional[str] = None
    is_active: Optional[bool] = None
    translations: Optional[Translations] = Field(None, min_length=1)



class Tag(AuditedModel):
    default_locale: str
    color: Optional[str] = None
    icon: Optional[str] = None
    media_id: Optional[str] = None
    usage_count: int = 0
    is_active: bool = True
    translations: list[Translation] = []
