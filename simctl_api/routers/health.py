"""Health-check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from simctl_api import __version__
from simctl_api.auth import require_api_key
from simctl_api.dependencies import get_simctl
from simctl_api.models.responses import HealthResponse, ToolHealthResponse
from simctl_api.services.simctl import SimCtl

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def service_health() -> HealthResponse:
    """Basic liveness check (no auth required)."""
    return HealthResponse(status="ok", version=__version__)


@router.get(
    "/tool/health",
    response_model=ToolHealthResponse,
    dependencies=[Depends(require_api_key)],
)
async def tool_health(simctl: SimCtl = Depends(get_simctl)) -> ToolHealthResponse:
    """Check that simctl can be launched and answers with parseable output."""
    result = await simctl.list_runtimes()
    if not result.ok:
        return ToolHealthResponse(
            reachable=False,
            launch_path=simctl.executor.launch_path,
            error=result.error.detail,
            error_kind=result.error.kind,
        )
    return ToolHealthResponse(
        reachable=True,
        launch_path=simctl.executor.launch_path,
        runtimes=len(result.value.runtimes),
    )
