from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from ..context import AppContext, get_context
from ..rendering import build_info, check_marker, render_index

router = APIRouter(tags=["info"])


# PUBLIC_INTERFACE
@router.get("/", response_class=HTMLResponse, summary="Index Page")
def index(ctx: AppContext = Depends(get_context)) -> HTMLResponse:
    """
    Human-readable description of the running application.
    """
    return HTMLResponse(render_index(ctx.settings))


# PUBLIC_INTERFACE
@router.get("/api/info", summary="Application Info")
def info(ctx: AppContext = Depends(get_context)) -> dict:
    """
    Application name, version, masked connection string and uptime.
    """
    return build_info(ctx.settings, ctx.reporter.uptime())


# PUBLIC_INTERFACE
@router.get(
    "/api/validate-file",
    summary="Validate Marker File",
    description="Reports whether the deployment marker file exists and holds the expected value.",
)
def validate_file(ctx: AppContext = Depends(get_context)) -> dict:
    return check_marker(ctx.settings.marker_file_path, ctx.settings.marker_expected)
