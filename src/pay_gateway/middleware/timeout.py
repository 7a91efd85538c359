"""Request timeout middleware.

A handler that runs past REQUEST_TIMEOUT_SECONDS is cancelled and the client
gets 504 with the standard error envelope (RequestTimeoutError, code 9003).
"""

import asyncio
import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.pay_common.errors import RequestTimeoutError
from src.pay_common.response import error_response

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, timeout_seconds: float = 30.0) -> None:
        super().__init__(app)
        self._timeout = timeout_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Request timed out after %.1fs: [%s] %s",
                self._timeout,
                request.method,
                request.url.path,
            )
            exc = RequestTimeoutError()
            resp = error_response(exc.code, exc.message, "Gateway Timeout")
            resp.request_id = getattr(request.state, "request_id", resp.request_id)
            return JSONResponse(status_code=exc.http_status, content=resp.model_dump())
