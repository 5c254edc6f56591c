"""Application endpoints scoped to one simulator."""

from __future__ import annotations

import json
from typing import Optional

from fastapi import APIRouter, Depends, Query

from simctl_api.auth import require_api_key
from simctl_api.dependencies import get_simctl
from simctl_api.models.commands import PrivacyAction
from simctl_api.models.responses import (
    ActionResponse,
    AppContainerResponse,
    InstallRequest,
    PrivacyRequest,
    PushRequest,
)
from simctl_api.models.simulators import ApplicationsList
from simctl_api.services.simctl import SimCtl

router = APIRouter(
    prefix="/devices/{udid}/apps",
    tags=["apps"],
    dependencies=[Depends(require_api_key)],
)


@router.get("", response_model=ApplicationsList)
async def list_apps(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ApplicationsList:
    """Installed applications keyed by bundle identifier."""
    return (await simctl.list_applications(udid)).unwrap()


@router.post("", response_model=ActionResponse)
async def install_app(
    udid: str, req: InstallRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.install(udid, req.app_path))


@router.delete("/{bundle_id}", response_model=ActionResponse)
async def uninstall_app(
    udid: str, bundle_id: str, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.uninstall(udid, bundle_id))


@router.post("/{bundle_id}/launch", response_model=ActionResponse)
async def launch_app(
    udid: str, bundle_id: str, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.launch(udid, bundle_id))


@router.post("/{bundle_id}/terminate", response_model=ActionResponse)
async def terminate_app(
    udid: str, bundle_id: str, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.terminate(udid, bundle_id))


@router.post("/{bundle_id}/restart", response_model=ActionResponse)
async def restart_app(
    udid: str, bundle_id: str, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    """Terminate (if running) then launch again."""
    return ActionResponse.from_result(await simctl.restart(udid, bundle_id))


@router.post("/{bundle_id}/push", response_model=ActionResponse)
async def push_notification(
    udid: str,
    bundle_id: str,
    req: PushRequest,
    simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    """Deliver an APNs-style JSON payload to the app."""
    return ActionResponse.from_result(
        await simctl.send_push_notification(udid, bundle_id, json.dumps(req.payload)),
    )


@router.post("/{bundle_id}/privacy", response_model=ActionResponse)
async def change_permission(
    udid: str,
    bundle_id: str,
    req: PrivacyRequest,
    simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    handlers = {
        PrivacyAction.grant: simctl.grant_permission,
        PrivacyAction.revoke: simctl.revoke_permission,
        PrivacyAction.reset: simctl.reset_permission,
    }
    result = await handlers[req.action](udid, bundle_id, req.service)
    return ActionResponse.from_result(result)


@router.get("/{bundle_id}/container", response_model=AppContainerResponse)
async def get_app_container(
    udid: str,
    bundle_id: str,
    container: Optional[str] = Query(None, description="app, data, groups or a group id"),
    simctl: SimCtl = Depends(get_simctl),
) -> AppContainerResponse:
    path = await simctl.get_app_container(udid, bundle_id, container)
    return AppContainerResponse(bundle_id=bundle_id, container=container, path=path)
