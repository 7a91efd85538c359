"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import Settings, settings as default_settings
from src.bootstrap import Container, build_container
from src.pay_common.errors import AppError, InternalError, ValidationFailedError
from src.pay_common.logging_config import configure_logging
from src.pay_common.response import error_response
from src.pay_gateway.api.router import APP_VERSION
from src.pay_gateway.api.router import router as ops_router
from src.pay_gateway.middleware.metrics import MetricsMiddleware
from src.pay_gateway.middleware.request_log import RequestLogMiddleware
from src.pay_gateway.middleware.timeout import RequestTimeoutMiddleware
from src.pay_method.api.router import router as payment_method_router
from src.pay_provider.api.router import router as provider_router
from src.pay_user.api.router import router as user_router

logger = logging.getLogger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # Drop the "body"/"query"/"path" prefix: ["body", "telp"] → "telp"
        loc = ".".join(str(p) for p in err.get("loc", ())[1:]) or "request"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Validation failed"


def _envelope(request: Request, exc: AppError, error: str | None = None) -> JSONResponse:
    resp = error_response(exc.code, exc.message, error)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return _envelope(request, exc, type(exc).__name__)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _envelope(
            request, ValidationFailedError(_format_validation_errors(exc)), "ValidationError"
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        err = AppError(exc.status_code, str(exc.detail), exc.status_code)
        return _envelope(request, err, "HTTPException")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on [%s] %s", request.method, request.url.path, exc_info=exc
        )
        return _envelope(request, InternalError(), "InternalError")


def create_app(
    settings: Settings | None = None, container: Container | None = None
) -> FastAPI:
    """Build the app. Tests pass a prebuilt container (fakes, in-memory cache)."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        if not hasattr(app.state, "container"):
            app.state.container = build_container(settings)
        logger.info("%s started (cache backend: %s)", settings.APP_NAME, settings.CACHE_BACKEND)
        yield
        # Shutdown
        await app.state.container.close()

    app = FastAPI(title=settings.APP_NAME, version=APP_VERSION, lifespan=lifespan)
    if container is not None:
        app.state.container = container

    # Last added runs first: request id → metrics → timeout → routes
    app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestLogMiddleware, slow_request_seconds=settings.SLOW_REQUEST_SECONDS)

    register_exception_handlers(app)

    app.include_router(user_router, prefix="/api/v1")
    app.include_router(provider_router, prefix="/api/v1")
    app.include_router(payment_method_router, prefix="/api/v1")
    app.include_router(ops_router)
    return app


app = create_app()
