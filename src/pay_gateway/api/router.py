"""Operational endpoints: /health and /metrics (mounted at the root, no API key)."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.pay_common.enums import CacheStatus
from src.pay_gateway.dependencies import ContainerDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ops"])

APP_VERSION = "0.1.0"


@router.get("/health", summary="Liveness plus database and cache state")
async def health(container: ContainerDep) -> JSONResponse:
    """200 when the database answers; the cache may be degraded without failing health."""
    database = "connected"
    try:
        async with container.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("Health check: database unreachable")
        database = "disconnected"

    cache_status = await container.cache.ping()
    healthy = database == "connected"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": database,
            "cache": "connected" if cache_status is CacheStatus.OK else "degraded",
        },
    )


@router.get("/metrics", summary="Prometheus exposition")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
