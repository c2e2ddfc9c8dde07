from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..context import AppContext, get_context

router = APIRouter(tags=["health"])


# PUBLIC_INTERFACE
@router.get(
    "/health",
    summary="Health Check",
    description="Actively probes the database and reports uptime and version.",
    responses={
        200: {"description": "Service healthy, or running without a database"},
        503: {"description": "Database probe failed"},
    },
)
async def health(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    code, body = await ctx.reporter.health()
    return JSONResponse(status_code=code, content=body)


# PUBLIC_INTERFACE
@router.get("/live", summary="Liveness Probe", responses={200: {"description": "Process is alive"}})
def live(ctx: AppContext = Depends(get_context)) -> dict:
    """
    Liveness probe. Never consults the database.
    """
    return ctx.reporter.liveness()


# PUBLIC_INTERFACE
@router.get(
    "/ready",
    summary="Readiness Probe",
    responses={
        200: {"description": "Database connected"},
        503: {"description": "Database not connected"},
    },
)
def ready(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    """
    Readiness probe. 200 only while the database gateway is connected.
    """
    is_ready, body = ctx.reporter.readiness()
    code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
