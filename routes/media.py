"""
Rutas de archivos multimedia (sólo metadatos).

Además del CRUD se expone la resolución por slug de librería y nombre de
archivo, que es como se referencian los archivos desde URLs públicas.
"""

from fastapi import Depends

from auth import require_permissions
from core.exceptions import NotFoundException
from core.permissions import Permission
from database.models import UserORM
from dependencies import get_media_service
from models.media import Media, MediaCreate, MediaUpdate
from routes.crud_router import build_crud_router, handle_service_exception
from services.media_service import MediaService

router = build_crud_router(
    prefix="/media",
    tags=["media"],
    get_service=get_media_service,
    response_model=Media,
    create_model=MediaCreate,
    update_model=MediaUpdate,
    read_permissions=(Permission.MEDIA_READ,),
    write_permissions=(Permission.MEDIA_WRITE,),
    delete_permissions=(Permission.MEDIA_DELETE,),
)


@router.get("/library/{library_slug}/{filename}", response_model=Media)
def get_media_by_library_slug(
    library_slug: str,
    filename: str,
    current_user: UserORM = Depends(require_permissions(Permission.MEDIA_READ)),
    service: MediaService = Depends(get_media_service),
):
    """Las miniaturas (`thumbsm-`, `thumbmd-`, `thumblg-`) resuelven al archivo original."""
    try:
        media = service.get_by_filename_and_library_slug(filename, library_slug)
        if media is None:
            raise NotFoundException(resource="Media", identifier=f"{library_slug}/{filename}")
        return media
    except Exception as e:
        raise handle_service_exception(e)
