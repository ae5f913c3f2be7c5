import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response

from app.api.deps import get_current_session, get_media_store
from app.api.gallery_utils.controller import GallerySession
from app.api.media_utils.archive import (
    ARCHIVE_CONTENT_TYPE,
    archive_headers,
    build_archive,
)
from app.api.media_utils.media_store import MediaStore
from app.core.errors import ArchiveBuildFailed
from app.models.download.DownloadRequest import DownloadRequest
from app.models.gallery.ImagesResponse import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def archive_response(store: MediaStore, identifiers: list[str]) -> Response:
    try:
        payload = await build_archive(store, identifiers)
    except ArchiveBuildFailed as e:
        logger.error(f"Error while creating the ZIP: {e}")
        return JSONResponse(
            content={"error": "Error while creating the ZIP archive"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return Response(
        content=payload,
        media_type=ARCHIVE_CONTENT_TYPE,
        headers=archive_headers(),
    )


@router.post(
    "/download",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={
        200: {"content": {ARCHIVE_CONTENT_TYPE: {}}},
        500: {"model": ErrorResponse},
    },
)
async def download_images(
    request: DownloadRequest,
    store: MediaStore = Depends(get_media_store),
    session: GallerySession = Depends(get_current_session),
):
    """
    Bundles the requested images into a single photos.zip.
    """
    return await archive_response(store, request.images)
