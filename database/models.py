from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, Float, ForeignKey, Boolean, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def gen_uuid_str():
    return str(uuid4())


def get_current_time():
    """Hora actual en la zona horaria configurada, sin tzinfo (así se guarda)."""
    from utils.datetime_utils import local_naive_now
    return local_naive_now()


class AuditMixin:
    """Columnas de auditoría y de soft delete comunes a todas las entidades."""
    created_by = Column(String(36), nullable=True)
    updated_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=get_current_time)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time)
    #soft delete
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String(36), nullable=True)


#ORM: Users
class UserORM(AuditMixin, Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(200), nullable=True, unique=True)
    name = Column(String(200), nullable=False)
    role = Column(String(30), nullable=False, default="user")
    is_active = Column(Boolean, default=True, nullable=False)
    password_salt = Column(String(64), nullable=False)
    password_hash = Column(String(128), nullable=False)


#ORM: Pruebas
class PruebaORM(AuditMixin, Base):
    __tablename__ = "pruebas"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    name = Column(String(200), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)


#ORM: Products
class ProductORM(AuditMixin, Base):
    __tablename__ = "products"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    name = Column(String(200), nullable=False, unique=True)
    active = Column(Boolean, default=True, nullable=False)
    price = Column(Float, default=0, nullable=False)


#ORM: Categories (CMS)
class CategoryORM(AuditMixin, Base):
    __tablename__ = "categories"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    default_locale = Column(String(10), nullable=False, default="es-ES")
    parent_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    icon = Column(String(100), nullable=True)
    color = Column(String(20), nullable=True)
    media_id = Column(String(36), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # [{locale, name, slug, description, seo}]
    translations = Column(JSON, nullable=False, default=list)


#ORM: Tags (CMS)
class TagORM(AuditMixin, Base):
    __tablename__ = "tags"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    default_locale = Column(String(10), nullable=False, default="es-ES")
    color = Column(String(20), nullable=True)
    icon = Column(String(100), nullable=True)
    media_id = Column(String(36), nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    translations = Column(JSON, nullable=False, default=list)


#ORM: Libraries (media)
class LibraryORM(AuditMixin, Base):
    __tablename__ = "libraries"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    default_storage_provider = Column(String(30), nullable=False, default="minio")
    # [{id, name, slug, description, parent_id}]
    folders = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False)


#ORM: Media
class MediaORM(AuditMixin, Base):
    __tablename__ = "media"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    filename = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, default="other")
    mime_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False, default=0)
    storage = Column(JSON, nullable=False, default=dict)
    library_id = Column(String(36), ForeignKey("libraries.id"), nullable=False)
    library_name = Column(String(100), nullable=True)
    library_slug = Column(String(120), nullable=True)
    folder_id = Column(String(36), nullable=True)
    # "metadata" está reservado por la API declarativa
    file_metadata = Column("metadata", JSON, nullable=False, default=dict)
    tag_ids = Column(JSON, nullable=False, default=list)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    variants = Column(JSON, nullable=False, default=list)
