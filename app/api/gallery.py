import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, RedirectResponse

from app.api.deps import get_current_session, get_media_store
from app.api.download import archive_response
from app.api.gallery_utils.controller import DirectDownload, GallerySession
from app.api.media_utils.media_store import MediaStore
from app.core.errors import NothingSelected, UpstreamUnavailable
from app.models.gallery.GalleryResponse import (
    GalleryStateResponse,
    SelectionResponse,
    SelectionToggleRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _upstream_error() -> JSONResponse:
    return JSONResponse(
        content={"error": "Error while fetching images"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _state_view(session: GallerySession) -> dict:
    page = session.page
    records = page.records if page else []
    return {
        "state": session.state.value,
        "showWelcome": session.show_welcome,
        "currentPage": session.current_page_number,
        "totalPages": page.total_pages(session.page_size) if page else 0,
        "total": page.total_count if page else 0,
        "hasNext": bool(page and page.next_cursor),
        "hasPrev": bool(session.cursor_history),
        "nextCursor": page.next_cursor if page else None,
        "images": [record.to_json() for record in records],
        "selected": sorted(session.selection),
    }


def _selection_view(session: GallerySession) -> dict:
    return {"selected": sorted(session.selection), "count": len(session.selection)}


@router.get("", status_code=status.HTTP_200_OK, response_model=GalleryStateResponse)
async def get_gallery(
    store: MediaStore = Depends(get_media_store),
    session: GallerySession = Depends(get_current_session),
):
    try:
        await session.ensure_page(store)
    except UpstreamUnavailable:
        return _upstream_error()
    return JSONResponse(content=_state_view(session))


@router.post("/next", status_code=status.HTTP_200_OK, response_model=GalleryStateResponse)
async def next_page(
    store: MediaStore = Depends(get_media_store),
    session: GallerySession = Depends(get_current_session),
):
    try:
        await session.next_page(store)
    except UpstreamUnavailable:
        return _upstream_error()
    return JSONResponse(content=_state_view(session))


@router.post("/prev", status_code=status.HTTP_200_OK, response_model=GalleryStateResponse)
async def prev_page(
    store: MediaStore = Depends(get_media_store),
    session: GallerySession = Depends(get_current_session),
):
    try:
        await session.prev_page(store)
    except UpstreamUnavailable:
        return _upstream_error()
    return JSONResponse(content=_state_view(session))


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=GalleryStateResponse)
async def refresh(
    store: MediaStore = Depends(get_media_store),
    session: GallerySession = Depends(get_current_session),
):
    try:
        await session.first_page(store)
    except UpstreamUnavailable:
        return _upstream_error()
    return JSONResponse(content=_state_view(session))


@router.post(
    "/selection/toggle",
    status_code=status.HTTP_200_OK,
    response_model=SelectionResponse,
)
async def toggle_selection(
    body: SelectionToggleRequest,
    session: GallerySession = Depends(get_current_session),
):
    session.toggle_select(body.identifier)
    return JSONResponse(content=_selection_view(session))


@router.post("/selection/all", status_code=status.HTTP_200_OK, response_model=SelectionResponse)
async def select_all(session: GallerySession = Depends(get_current_session)):
    session.select_all()
    return JSONResponse(content=_selection_view(session))


@router.delete("/selection", status_code=status.HTTP_200_OK, response_model=SelectionResponse)
async def clear_selection(session: GallerySession = Depends(get_current_session)):
    session.clear_all()
    return JSONResponse(content=_selection_view(session))


@router.post("/download", status_code=status.HTTP_200_OK)
async def download_selection(
    store: MediaStore = Depends(get_media_store),
    session: GallerySession = Depends(get_current_session),
):
    """
    Downloads the current selection: a redirect to the image itself for a
    single photo, a photos.zip for several.
    """
    try:
        plan = await session.plan_download(store)
    except NothingSelected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except UpstreamUnavailable:
        return _upstream_error()

    if isinstance(plan, DirectDownload):
        return RedirectResponse(url=plan.url, status_code=status.HTTP_303_SEE_OTHER)

    return await archive_response(store, plan.identifiers)
