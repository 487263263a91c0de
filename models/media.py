"""
Esquemas de librerías y archivos multimedia.

Una librería agrupa archivos y define su proveedor de almacenamiento.
Los archivos guardan sólo metadatos; la subida y descarga de binarios
no forman parte de esta API.
"""
from pydantic import BaseModel, Field
from typing import Any, Optional
from enum import Enum

from models.common import AuditedModel


class StorageProvider(str, Enum):
    MINIO = "minio"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    OTHER = "other"


# ==================== Libraries ====================

class Folder(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[str] = None


class LibraryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="El nombre es obligatorio")
    slug: Optional[str] = Field(None, max_length=120, description="Se genera desde name si falta")
    description: Optional[str] = Field(
        None, max_length=500, description="La descripción no debe exceder 500 caracteres"
    )
    default_storage_provider: StorageProvider = StorageProvider.MINIO
    folders: list[Folder] = []
    is_active: bool = True


class LibraryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = Field(None, max_length=500)
    default_storage_provider: Optional[StorageProvider] = None
    folders: Optional[list[Folder]] = None
    is_active: Optional[bool] = None


class Library(AuditedModel):
    name: str
    slug: str
    description: Optional[str] = None
    user_id: Optional[str] = None
    default_storage_provider: StorageProvider = StorageProvider.MINIO
    folders: list[Folder] = []
    is_active: bool = True


# ==================== Media ====================

class MediaCreate(BaseModel):
    """`library_name`, `library_slug` y `user_id` los completa el servidor."""
    filename: str = Field(..., min_length=1, max_length=255)
    original_filename: str = Field(..., min_length=1, max_length=255)
    type: MediaType = MediaType.OTHER
    mime_type: str = Field(..., min_length=1, max_length=100)
    size: int = Field(..., ge=0, description="Tamaño en bytes")
    storage: dict[str, Any] = Field(default_factory=dict)
    library_id: str
    folder_id: Optional[str] = None
    file_metadata: Optional[dict[str, Any]] = Field(None, alias="metadata")
    tag_ids: list[str] = []
    variants: list[dict[str, Any]] = []

    model_config = {"populate_by_name": True}


class MediaUpdate(BaseModel):
    filename: Optional[str] = Field(None, min_length=1, max_length=255)
    original_filename: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[MediaType] = None
    mime_type: Optional[str] = Field(None, min_length=1, max_length=100)
    size: Optional[int] = Field(None, ge=0)
    folder_id: Optional[str] = None
    file_metadata: Optional[dict[str, Any]] = Field(None, alias="metadata")
    tag_ids: Optional[list[str]] = None
    variants: Optional[list[dict[str, Any]]] = None

    model_config = {"populate_by_name": True}


class Media(AuditedModel):
    filename: str
    original_filename: str
    type: MediaType
    mime_type: str
    size: int
    library_id: str
    library_name: Optional[str] = None
    library_slug: Optional[str] = None
    folder_id: Optional[str] = None
    file_metadata: Optional[dict[str, Any]] = None
    tag_ids: list[str] = []
    user_id: Optional[str] = None
    variants: list[dict[str, Any]] = []
