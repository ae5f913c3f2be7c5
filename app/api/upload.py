import logging
from fastapi import (
    APIRouter,
    UploadFile,
    File,
    Depends,
    BackgroundTasks,
)
from fastapi.responses import JSONResponse
from fastapi import status
from app.api.deps import get_current_session, get_media_store
from app.api.gallery_utils.controller import GallerySession
from app.api.gallery_utils.refresh_policy import BackoffPolicy, refresh_after_upload
from app.api.media_utils.media_store import MediaStore
from app.core.config import Settings, get_settings
from app.core.errors import UpstreamUnavailable
from app.models.upload.UploadResponse import UploadResponse


logger = logging.getLogger(__name__)

router = APIRouter()

REFRESH_POLICY = BackoffPolicy()


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_photos(
    background_tasks: BackgroundTasks,
    files: list[UploadFile] = File(...),
    store: MediaStore = Depends(get_media_store),
    settings: Settings = Depends(get_settings),
    session: GallerySession = Depends(get_current_session),
):
    # Taken before uploading so the refresh can tell when the new photos show up
    baseline = session.page if session.cursor is None else None

    uploaded = []
    try:
        for file in files:
            content = await file.read()
            record = await store.upload_image(
                filename=file.filename or "photo.jpg",
                content=content,
                tag=settings.gallery_tag,
                content_type=file.content_type,
            )
            del content
            uploaded.append(record)
    except UpstreamUnavailable as e:
        logger.error(f"Upload stopped after {len(uploaded)} of {len(files)} files: {e}")
        return JSONResponse(
            content={
                "error": "Error while uploading images",
                "media_ids": [r.identifier for r in uploaded],
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    background_tasks.add_task(
        refresh_after_upload,
        session,
        store,
        REFRESH_POLICY,
        baseline,
    )

    return JSONResponse(
        content={
            "message": f"{len(uploaded)} files uploaded successfully",
            "media_ids": [r.identifier for r in uploaded],
        },
        status_code=status.HTTP_201_CREATED,
    )
