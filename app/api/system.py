import time
from fastapi import APIRouter, Depends, HTTPException
from app.api.deps import get_media_store, get_session_store
from app.api.gallery_utils.session_store import SessionStore
from app.api.media_utils.media_store import MediaStore
from app.api.system_utils.request_metrics import average_response_time
from app.core.errors import UpstreamUnavailable
from app.models.system.HealthResponse import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: MediaStore = Depends(get_media_store),
    sessions: SessionStore = Depends(get_session_store),
):
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "components": {"api": "up", "media_store": "down"},
        "active_sessions": sessions.active_count(),
        "avg_response_time": round(average_response_time(), 2),
    }

    try:
        health_status["media_store_latency_ms"] = await store.ping()
        health_status["components"]["media_store"] = "up"

    except UpstreamUnavailable as e:
        health_status["status"] = "unhealthy"
        health_status["error"] = str(e)

        # return a 503 Service Unavailable so load balancers know we are down
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
