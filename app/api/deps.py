from fastapi import Request, HTTPException, Depends, status
from app.core.config import Settings, get_settings
from app.core.security import SESSION_COOKIE, read_session_token
from app.api.auth_utils.verifiers import CredentialVerifier, build_verifier
from app.api.gallery_utils.controller import GallerySession
from app.api.gallery_utils.session_store import SessionStore
from app.api.media_utils.media_store import MediaStore


def get_session_store(
    request: Request, settings: Settings = Depends(get_settings)
) -> SessionStore:
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        store = SessionStore(ttl_seconds=settings.session_ttl_seconds)
        request.app.state.session_store = store
    return store


def get_media_store(
    request: Request, settings: Settings = Depends(get_settings)
) -> MediaStore:
    # one shared HTTP client per process, closed on shutdown
    store = getattr(request.app.state, "media_store", None)
    if store is None:
        store = MediaStore(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            upload_preset=settings.cloudinary_upload_preset,
            timeout=settings.media_store_timeout,
        )
        request.app.state.media_store = store
    return store


def get_verifier(settings: Settings = Depends(get_settings)) -> CredentialVerifier:
    return build_verifier(settings)


def get_current_session(
    request: Request,
    settings: Settings = Depends(get_settings),
    sessions: SessionStore = Depends(get_session_store),
) -> GallerySession:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    session_id = read_session_token(token, settings.secret_key)
    if session_id is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid")

    session = sessions.get(session_id)
    if session is None or not session.is_authenticated:
        raise HTTPException(status_code=401, detail="Session expired or invalid")

    return session
