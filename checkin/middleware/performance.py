"""Request timing and correlation middleware."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from checkin.utils.logger import logger


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Middleware to measure and log request processing time.

    - Adds X-Process-Time and X-Request-ID headers to responses
    - Logs slow requests (>500ms) with warning
    - Skips health and docs endpoints
    """

    SLOW_REQUEST_THRESHOLD = 0.5  # 500ms

    REQUEST_ID_HEADER = "X-Request-ID"

    EXCLUDED_PATHS = {
        "/health",
        "/",
        "/docs",
        "/openapi.json",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        response.headers[self.REQUEST_ID_HEADER] = request_id

        path = request.url.path
        if path not in self.EXCLUDED_PATHS:
            summary = (
                f"{request.method} {path} -> {response.status_code} "
                f"{process_time:.3f}s [{request_id}]"
            )
            if process_time >= self.SLOW_REQUEST_THRESHOLD:
                logger.warning(f"[SLOW REQUEST] {summary}")
            else:
                logger.debug(f"[REQUEST] {summary}")

        return response
