"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency, and
a short request ID for correlation. The request_id is also injected into
request.state so router handlers can include it in ApiResponse, and echoed
back in the X-Request-ID response header.

Log format:
    INFO [POST] /api/v1/payment-methods → 201 (23ms) req_a1b2c3d4e5f6

Requests slower than SLOW_REQUEST_SECONDS are logged again at WARNING.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger("pay.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, slow_request_seconds: float = 2.0) -> None:
        super().__init__(app)
        self._slow_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - start

        logger.info(
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed * 1000,
            request.state.request_id,
        )
        if elapsed > self._slow_seconds:
            logger.warning(
                "Slow request detected: [%s] %s took %.2fs %s",
                request.method,
                request.url.path,
                elapsed,
                request.state.request_id,
            )
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
