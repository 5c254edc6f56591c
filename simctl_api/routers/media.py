"""Screenshot and screen recording endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from simctl_api.auth import require_api_key
from simctl_api.config import Settings
from simctl_api.dependencies import get_recordings, get_settings, get_simctl
from simctl_api.models.commands import ImageFormat
from simctl_api.models.responses import (
    ActionResponse,
    RecordingRequest,
    ScreenshotRequest,
    ScreenshotResponse,
)
from simctl_api.services.recordings import Recording, RecordingStore
from simctl_api.services.simctl import SimCtl

router = APIRouter(tags=["media"], dependencies=[Depends(require_api_key)])


def _default_path(cfg: Settings, udid: str, suffix: str) -> str:
    media_dir = Path(cfg.simctl_media_dir)
    media_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return str(media_dir / f"{udid}-{stamp}.{suffix}")


@router.post("/devices/{udid}/screenshot", response_model=ScreenshotResponse)
async def take_screenshot(
    udid: str,
    req: ScreenshotRequest,
    simctl: SimCtl = Depends(get_simctl),
    cfg: Settings = Depends(get_settings),
) -> ScreenshotResponse:
    suffix = (req.type or ImageFormat.png).value
    path = req.path or _default_path(cfg, udid, suffix)
    result = await simctl.take_screenshot(
        udid, path, type=req.type, display=req.display, mask=req.mask,
    )
    action = ActionResponse.from_result(result)
    return ScreenshotResponse(**action.model_dump(), path=path)


@router.post("/devices/{udid}/recordings", response_model=Recording)
async def start_recording(
    udid: str,
    req: RecordingRequest,
    simctl: SimCtl = Depends(get_simctl),
    store: RecordingStore = Depends(get_recordings),
    cfg: Settings = Depends(get_settings),
) -> Recording:
    """Start a screen recording that keeps running until stopped."""
    path = req.path or _default_path(cfg, udid, "mov")
    handle = simctl.start_video(
        udid, path, codec=req.codec, display=req.display, mask=req.mask,
    )
    return store.add(udid, path, handle)


@router.get("/recordings", response_model=list[Recording])
async def list_recordings(store: RecordingStore = Depends(get_recordings)) -> list[Recording]:
    return store.list_recordings()


@router.delete("/recordings/{recording_id}", response_model=Recording)
async def stop_recording(
    recording_id: str, store: RecordingStore = Depends(get_recordings),
) -> Recording:
    """Stop a recording; the file is complete once this returns."""
    rec = await store.stop(recording_id)
    if rec is None:
        raise HTTPException(status_code=404, detail="Recording not found")
    return rec
