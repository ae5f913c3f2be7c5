from typing import Optional
from pydantic import BaseModel


class HealthComponents(BaseModel):
    api: str
    media_store: str


class HealthResponse(BaseModel):
    status: str
    timestamp: float
    components: HealthComponents
    media_store_latency_ms: Optional[float] = None
    active_sessions: int
    avg_response_time: float
