import time
import logging
from collections import deque

from fastapi import Request

logger = logging.getLogger("app.requests")

# --- Request timing state ---
response_times = deque(maxlen=50)


def average_response_time() -> float:
    return sum(response_times) / len(response_times) if response_times else 0.0


async def track_request_metrics(request: Request, call_next):
    start_time = time.perf_counter()

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    response_times.append(duration_ms)
    logger.debug(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)"
    )
    return response
