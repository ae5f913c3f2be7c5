import logging
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from typing import Optional

from app.api.deps import get_current_session, get_media_store
from app.api.gallery_utils.controller import GallerySession
from app.api.media_utils.media_store import MediaStore
from app.core.config import PAGE_SIZE, Settings, get_settings
from app.core.errors import UpstreamUnavailable
from app.models.gallery.ImagesResponse import ErrorResponse, ImagesResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/images",
    status_code=status.HTTP_200_OK,
    response_model=ImagesResponse,
    responses={500: {"model": ErrorResponse}},
)
async def list_images(
    cursor: Optional[str] = Query(
        None, description="Opaque continuation token returned as nextCursor"
    ),
    page: Optional[int] = Query(
        None, ge=1, description="Page number to echo back as currentPage"
    ),
    store: MediaStore = Depends(get_media_store),
    settings: Settings = Depends(get_settings),
    session: GallerySession = Depends(get_current_session),
):
    """
    Lists the wedding photos, newest first, 12 per page.
    """
    try:
        result = await store.list_images(settings.gallery_tag, cursor, PAGE_SIZE)
    except UpstreamUnavailable as e:
        logger.error(f"Error while listing images: {e}")
        return JSONResponse(
            content={"error": "Error while fetching images"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if page is None:
        page = 2 if cursor else 1

    return JSONResponse(
        content={
            "images": [record.to_json() for record in result.records],
            "totalPages": result.total_pages(PAGE_SIZE),
            "currentPage": page,
            "total": result.total_count,
            "nextCursor": result.next_cursor,
        }
    )
