"""Run any catalogued simctl command."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from simctl_api.auth import require_api_key
from simctl_api.dependencies import get_simctl
from simctl_api.models.responses import ActionResponse, RawCommandRequest
from simctl_api.services.simctl import SimCtl

router = APIRouter(tags=["simctl"], dependencies=[Depends(require_api_key)])


@router.post("/simctl", response_model=ActionResponse)
async def run_command(
    req: RawCommandRequest,
    simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    """Run one command description and return simctl's raw output."""
    result = await simctl.executor.execute(req.command)
    return ActionResponse.from_result(result)
