"""
Servicios del CMS: categorías y etiquetas.

Ambas entidades comparten el manejo de traducciones: cada traducción sin
slug recibe uno derivado de su nombre.
"""

from typing import Any, Optional
import logging

from core.exceptions import BusinessException
from core.utils import make_slug
from database.models import CategoryORM, TagORM, UserORM
from services.base_service import EntityService

logger = logging.getLogger(__name__)


def with_translation_slugs(translations: Optional[list[dict[str, Any]]]) -> Optional[list[dict[str, Any]]]:
    """Completa `slug` en las traducciones que no lo traen."""
    if translations is None:
        return None
    result = []
    for translation in translations:
        translation = dict(translation)
        translation["slug"] = make_slug(translation.get("slug") or translation["name"])
        result.append(translation)
    return result


class CategoryService(EntityService[CategoryORM]):
    """Lógica de negocio de categorías jerárquicas."""

    search_fields = ("translations",)

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        data["translations"] = with_translation_slugs(data.get("translations"))
        if data.get("parent_id"):
            self._validate_parent(data["parent_id"])
        return data

    def prepare_update(self, entity: CategoryORM, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        if "translations" in data:
            data["translations"] = with_translation_slugs(data["translations"])
            if data["translations"] is None:
                del data["translations"]
        if data.get("parent_id"):
            self._validate_parent(data["parent_id"], category_id=entity.id)
        if "default_locale" in data and data["default_locale"] is not None:
            locales = {t["locale"] for t in (data.get("translations") or entity.translations or [])}
            if data["default_locale"] not in locales:
                raise BusinessException("Debe existir una traducción para default_locale")
        return data

    def _validate_parent(self, parent_id: str, category_id: Optional[str] = None) -> None:
        """
        La categoría padre debe existir, no estar eliminada y no ser la
        propia categoría ni uno de sus descendientes.

        Raises:
            BusinessException: Si el padre no es válido
        """
        if category_id is not None and parent_id == category_id:
            raise BusinessException("Una categoría no puede ser su propio padre")

        parent = self.repository.find_by_id(parent_id)
        if parent is None or parent.is_deleted:
            raise BusinessException(
                "La categoría padre no existe",
                details={"field": "parent_id", "value": parent_id},
            )

        if category_id is None:
            return
        # recorrer los ancestros del nuevo padre para evitar ciclos
        seen = {parent.id}
        ancestor_id = parent.parent_id
        while ancestor_id and ancestor_id not in seen:
            if ancestor_id == category_id:
                raise BusinessException("La categoría padre no puede ser una subcategoría propia")
            seen.add(ancestor_id)
            ancestor = self.repository.find_by_id(ancestor_id)
            ancestor_id = ancestor.parent_id if ancestor else None


class TagService(EntityService[TagORM]):
    search_fields = ("translations",)

    def prepare_create(self, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        data["translations"] = with_translation_slugs(data.get("translations"))
        return data

    def prepare_update(self, entity: TagORM, data: dict[str, Any], current_user: UserORM) -> dict[str, Any]:
        if data.get("translations") is not None:
            data["translations"] = with_translation_slugs(data["translations"])
        else:
            data.pop("translations", None)
        return data
