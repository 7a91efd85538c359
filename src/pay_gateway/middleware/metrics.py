"""Prometheus HTTP metrics middleware.

Labels use the matched route template (/api/v1/users/{user_id}), not the raw
path, so per-id URLs do not explode label cardinality. Requests that match no
route are recorded under "unmatched".
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.pay_common.metrics import (
    http_request_duration_seconds,
    http_requests_active,
    http_requests_total,
)

UNMATCHED_ROUTE = "unmatched"


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        http_requests_active.inc()
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed = time.perf_counter() - start
            http_requests_active.dec()
            labels = (request.method, _route_template(request), str(status_code))
            http_requests_total.labels(*labels).inc()
            http_request_duration_seconds.labels(*labels).observe(elapsed)
