"""Simulator inventory, lifecycle and settings endpoints."""

from __future__ import annotations

from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from simctl_api.auth import require_api_key
from simctl_api.dependencies import get_simctl
from simctl_api.errors import SimctlError
from simctl_api.models.responses import (
    ActionResponse,
    AppearanceRequest,
    BatteryRequest,
    BootRequest,
    CellularRequest,
    CertificateRequest,
    ContentSizeRequest,
    CreateDeviceRequest,
    DeleteDevicesRequest,
    ErrorResponse,
    LoggingRequest,
    NameRequest,
    OpenURLRequest,
    TimeRequest,
    WifiRequest,
)
from simctl_api.models.simulators import Device, DeviceList, DeviceTypeList, RuntimeList
from simctl_api.services.simctl import SimCtl

router = APIRouter(tags=["devices"], dependencies=[Depends(require_api_key)])


# ---------------------------------------------------------------------------
# READ endpoints
# ---------------------------------------------------------------------------


@router.get("/devices", response_model=DeviceList)
async def list_devices(simctl: SimCtl = Depends(get_simctl)) -> DeviceList:
    """All available simulators grouped by runtime."""
    return (await simctl.list_devices()).unwrap()


@router.get("/devices/watch")
async def watch_devices(
    interval: Optional[float] = Query(
        None, ge=1, description="Seconds between polls; defaults to the configured interval",
    ),
    simctl: SimCtl = Depends(get_simctl),
) -> StreamingResponse:
    """Stream the device list as NDJSON, one line per change.

    The first line is the current list.  If a poll fails, a final error line
    is written and the stream ends; reconnect to resume.
    """

    async def _lines() -> AsyncIterator[str]:
        try:
            async for device_list in simctl.watch_device_list(interval):
                yield device_list.model_dump_json(by_alias=True) + "\n"
        except SimctlError as exc:
            err = ErrorResponse(detail=str(exc), error_kind=exc.kind, diagnostic=exc.detail)
            yield err.model_dump_json() + "\n"

    return StreamingResponse(_lines(), media_type="application/x-ndjson")


@router.get("/devices/{udid}", response_model=Device)
async def get_device(udid: str, simctl: SimCtl = Depends(get_simctl)) -> Device:
    device = (await simctl.list_devices()).unwrap().find(udid)
    if device is None:
        raise HTTPException(status_code=404, detail=f"No available device {udid}")
    return device


@router.get("/device-types", response_model=DeviceTypeList)
async def list_device_types(simctl: SimCtl = Depends(get_simctl)) -> DeviceTypeList:
    return (await simctl.list_device_types()).unwrap()


@router.get("/runtimes", response_model=RuntimeList)
async def list_runtimes(simctl: SimCtl = Depends(get_simctl)) -> RuntimeList:
    return (await simctl.list_runtimes()).unwrap()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@router.post("/devices", response_model=ActionResponse)
async def create_device(
    req: CreateDeviceRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    """Create a simulator; the new udid is returned as output."""
    result = await simctl.create(req.name, req.device_type_id, req.runtime_id)
    resp = ActionResponse.from_result(result)
    return resp.model_copy(update={"output": resp.output.strip()})


@router.post("/devices/delete", response_model=ActionResponse)
async def delete_devices(
    req: DeleteDevicesRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.delete(req.udids))


@router.post("/devices/{udid}/boot", response_model=ActionResponse)
async def boot_device(
    udid: str,
    req: Optional[BootRequest] = None,
    simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    arch = req.arch if req else None
    return ActionResponse.from_result(await simctl.boot(udid, arch=arch))


@router.post("/devices/{udid}/shutdown", response_model=ActionResponse)
async def shutdown_device(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ActionResponse:
    return ActionResponse.from_result(await simctl.shutdown(udid))


@router.post("/devices/{udid}/reboot", response_model=ActionResponse)
async def reboot_device(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ActionResponse:
    return ActionResponse.from_result(await simctl.reboot(udid))


@router.post("/devices/{udid}/erase", response_model=ActionResponse)
async def erase_device(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ActionResponse:
    return ActionResponse.from_result(await simctl.erase(udid))


@router.post("/devices/{udid}/clone", response_model=ActionResponse)
async def clone_device(
    udid: str, req: NameRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.clone(udid, req.name))


@router.post("/devices/{udid}/rename", response_model=ActionResponse)
async def rename_device(
    udid: str, req: NameRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.rename(udid, req.name))


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@router.post("/devices/{udid}/logging", response_model=ActionResponse)
async def set_logging(
    udid: str, req: LoggingRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    """Toggle verbose logging; the device is rebooted to apply it."""
    return ActionResponse.from_result(await simctl.set_logging(udid, req.enabled))


@router.post("/devices/{udid}/appearance", response_model=ActionResponse)
async def set_appearance(
    udid: str, req: AppearanceRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.set_appearance(udid, req.appearance))


@router.post("/devices/{udid}/content-size", response_model=ActionResponse)
async def set_content_size(
    udid: str, req: ContentSizeRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(
        await simctl.set_content_size(udid, req.content_size),
    )


@router.post("/devices/{udid}/status-bar/battery", response_model=ActionResponse)
async def override_battery(
    udid: str, req: BatteryRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(
        await simctl.override_status_bar_battery(udid, req.level, req.state),
    )


@router.post("/devices/{udid}/status-bar/wifi", response_model=ActionResponse)
async def override_wifi(
    udid: str, req: WifiRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(
        await simctl.override_status_bar_wifi(
            udid, req.network, req.wifi_mode, req.wifi_bars,
        ),
    )


@router.post("/devices/{udid}/status-bar/cellular", response_model=ActionResponse)
async def override_cellular(
    udid: str, req: CellularRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(
        await simctl.override_status_bar_cellular(
            udid, req.cell_mode, req.cell_bars, req.carrier,
        ),
    )


@router.post("/devices/{udid}/status-bar/time", response_model=ActionResponse)
async def override_time(
    udid: str, req: TimeRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.override_status_bar_time(udid, req.time))


@router.delete("/devices/{udid}/status-bar", response_model=ActionResponse)
async def clear_status_bar(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ActionResponse:
    return ActionResponse.from_result(await simctl.clear_status_bar_overrides(udid))


@router.post("/devices/{udid}/icloud-sync", response_model=ActionResponse)
async def icloud_sync(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ActionResponse:
    return ActionResponse.from_result(await simctl.trigger_icloud_sync(udid))


@router.post("/devices/{udid}/pasteboard/to-host", response_model=ActionResponse)
async def pasteboard_to_host(udid: str, simctl: SimCtl = Depends(get_simctl)) -> ActionResponse:
    return ActionResponse.from_result(await simctl.copy_pasteboard_to_host(udid))


@router.post("/devices/{udid}/pasteboard/to-device", response_model=ActionResponse)
async def pasteboard_to_device(
    udid: str, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.copy_pasteboard_to_device(udid))


@router.post("/devices/{udid}/open-url", response_model=ActionResponse)
async def open_url(
    udid: str, req: OpenURLRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.open_url(udid, req.url))


@router.post("/devices/{udid}/root-certificate", response_model=ActionResponse)
async def add_root_certificate(
    udid: str, req: CertificateRequest, simctl: SimCtl = Depends(get_simctl),
) -> ActionResponse:
    return ActionResponse.from_result(await simctl.add_root_certificate(udid, req.path))
