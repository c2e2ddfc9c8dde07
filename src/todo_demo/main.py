from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .context import AppContext
from .errors import StoreOperationError, UnavailableError
from .gateway import Gateway, MongoGateway
from .health import HealthReporter
from .logging_config import configure_logging
from .routers import info as info_router
from .routers import probes as probes_router
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = structlog.get_logger(__name__)

openapi_tags = [
    {"name": "health", "description": "Liveness, readiness and health probes."},
    {"name": "info", "description": "Index page and diagnostic endpoints."},
    {"name": "todos", "description": "List and create Todo items stored in MongoDB."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Connect the gateway before serving and close it on shutdown. A failed
    connection leaves the service running in degraded mode.
    """
    ctx: AppContext = app.state.context
    configure_logging(ctx.settings.log_level)
    connected = await ctx.gateway.connect_with_retry(
        ctx.settings.connect_attempts, ctx.settings.connect_backoff
    )
    logger.info(
        "app_started",
        app=ctx.settings.app_name,
        version=ctx.settings.app_version,
        database="connected" if connected else "disconnected",
    )
    try:
        yield
    finally:
        await ctx.gateway.close()
        logger.info("app_stopped")


async def unavailable_exception_handler(request: Request, exc: UnavailableError) -> JSONResponse:
    """
    Map a call that needs the database while disconnected to 503.

    Response format:
        {"status": "unavailable", "error": "Database not connected"}
    """
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unavailable", "error": str(exc)},
    )


async def store_exception_handler(request: Request, exc: StoreOperationError) -> JSONResponse:
    """
    Map a failed store operation to a generic 500. The driver detail is logged only.
    """
    logger.error(
        "store_operation_failed",
        operation=exc.operation,
        detail=exc.detail,
        method=request.method,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "error": "Internal server error"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort for anything a handler did not map. Keeps error bodies JSON.
    """
    logger.error(
        "unhandled_error",
        error=repr(exc),
        method=request.method,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "error": "Internal server error"},
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, gateway: Optional[Gateway] = None) -> FastAPI:
    """
    Build the FastAPI application with an explicitly constructed context.

    Args:
        settings: configuration; read from the environment when omitted.
        gateway: database gateway; a MongoGateway for ``settings`` when omitted.
    """
    settings = settings or get_settings()
    if gateway is None:
        gateway = MongoGateway(settings.connection, timeout_ms=settings.timeout_ms)

    app = FastAPI(
        title=settings.app_name,
        description="Demo todo service backed by MongoDB, used for cloud security exercises.",
        version=settings.app_version,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.context = AppContext(
        settings=settings,
        gateway=gateway,
        reporter=HealthReporter(gateway, settings.app_version),
    )

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UnavailableError, unavailable_exception_handler)
    app.add_exception_handler(StoreOperationError, store_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(info_router.router)
    app.include_router(probes_router.router)
    app.include_router(todos_router.router)
    return app


app = create_app()
