import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("gradebook.request")


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds X-Latency-Ms / X-Request-ID headers and logs one line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)

        response.headers["X-Latency-Ms"] = str(latency_ms)
        response.headers["X-Request-ID"] = request_id
        logger.info("%s %s -> %s (%d ms)", request.method, request.url.path, response.status_code, latency_ms)
        return response
