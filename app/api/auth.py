import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from app.api.auth_utils.verifiers import CredentialVerifier
from app.api.deps import get_session_store, get_verifier
from app.api.gallery_utils.controller import GallerySession
from app.api.gallery_utils.session_store import SessionStore
from app.core import security
from app.core.config import Settings, get_settings
from app.core.errors import AuthRejected, AuthUnavailable
from app.models.auth.auth import AccessCodeModel, MessageResponse, MeResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _open_session(
    code: str,
    verifier: CredentialVerifier,
    sessions: SessionStore,
    settings: Settings,
) -> GallerySession:
    session = sessions.new_session(settings.gallery_tag, settings.welcome_seconds)
    try:
        await session.authenticate(verifier, code)
    except AuthRejected:
        raise HTTPException(status_code=401, detail="Invalid access code")
    except AuthUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Access code could not be verified, try again later",
        )
    sessions.register(session)
    logger.info(f"Guest session {session.session_id[:8]} opened")
    return session


def _set_session_cookie(response: Response, session: GallerySession, settings: Settings):
    token = security.create_session_token(
        session.session_id, settings.secret_key, settings.session_ttl_seconds
    )
    response.set_cookie(
        key=security.SESSION_COOKIE,
        value=token,
        httponly=True,
        max_age=settings.session_ttl_seconds,
        expires=settings.session_ttl_seconds,
        samesite="lax",  # QR links arrive as top-level navigations
        secure=settings.frontend_url.startswith("https://"),
        path="/",
    )


@router.post(
    "/login",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def login(
    credentials: AccessCodeModel,
    verifier: CredentialVerifier = Depends(get_verifier),
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    session = await _open_session(credentials.code, verifier, sessions, settings)

    response = JSONResponse(
        content={"message": "Login successful"},
        status_code=status.HTTP_200_OK,
    )
    _set_session_cookie(response, session, settings)
    return response


@router.get("/qr", status_code=status.HTTP_303_SEE_OTHER)
async def login_from_qr(
    code: str = Query(..., min_length=1, description="Access code carried by the QR link"),
    verifier: CredentialVerifier = Depends(get_verifier),
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """
    Entry point of the QR code printed on the invitations.
    """
    session = await _open_session(code, verifier, sessions, settings)

    response = RedirectResponse(
        url=settings.frontend_url, status_code=status.HTTP_303_SEE_OTHER
    )
    _set_session_cookie(response, session, settings)
    return response


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def logout(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    token = request.cookies.get(security.SESSION_COOKIE)
    session_id = security.read_session_token(token, settings.secret_key) if token else None
    if session_id:
        sessions.discard(session_id)

    response = JSONResponse(
        content={"message": "Logout successful"},
        status_code=status.HTTP_200_OK,
    )
    response.delete_cookie(security.SESSION_COOKIE, path="/")
    return response


@router.get(
    "/me",
    response_model=MeResponse,
    status_code=status.HTTP_200_OK
)
async def read_me(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    token = request.cookies.get(security.SESSION_COOKIE)
    session_id = security.read_session_token(token, settings.secret_key) if token else None
    session = sessions.get(session_id) if session_id else None

    if session is None or not session.is_authenticated:
        return JSONResponse(content={"authenticated": False, "name": None, "showWelcome": False})

    return JSONResponse(
        content={
            "authenticated": True,
            "name": session.principal.name if session.principal else None,
            "showWelcome": session.show_welcome,
        }
    )
