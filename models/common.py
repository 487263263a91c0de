"""
Modelos comunes de respuesta para la API.

Estos modelos proporcionan respuestas consistentes y estandarizadas
para todos los endpoints de la API
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class AuditedModel(BaseModel):
    """Campos de auditoría y soft delete presentes en todas las entidades."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="UUID del registro")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None


class DeleteResponse(BaseModel):
    """Respuesta estándar para operaciones de eliminación."""
    success: bool = Field(True, description="Indica si la eliminación fue exitosa")
    message: str = Field(..., description="Mensaje descriptivo")
    deleted_id: str = Field(..., description="ID del registro eliminado")
    soft_delete: bool = Field(True, description="Indica si fue soft delete (true) o hard delete (false)")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthCheckResponse(BaseModel):
    """Respuesta del health check."""
    status: str = Field(..., description="Estado general (healthy/unhealthy)")
    service: str = Field(..., description="Nombre del servicio")
    version: str = Field(..., description="Versión de la API")
    database: str = Field(..., description="Estado de la base de datos")
    environment: str = Field(..., description="Entorno (production/development)")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


def create_delete_response(message: str, deleted_id: str, soft_delete: bool = True) -> dict:
    """Helper para crear respuestas de eliminación."""
    return DeleteResponse(
        message=message,
        deleted_id=deleted_id,
        soft_delete=soft_delete
    ).model_dump()
