"""API request and response models."""

from __future__ import annotations

from datetime import time as dtime
from typing import Any, Optional

from pydantic import BaseModel, Field

from simctl_api.models.commands import (
    Appearance,
    BatteryState,
    CellularMode,
    Command,
    ContentSize,
    DataNetwork,
    Display,
    ImageFormat,
    Mask,
    PrivacyAction,
    PrivacyService,
    VideoCodec,
    WifiMode,
)
from simctl_api.models.results import ExecutionResult


class HealthResponse(BaseModel):
    status: str
    version: str


class ToolHealthResponse(BaseModel):
    reachable: bool
    launch_path: str
    runtimes: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None


class ErrorResponse(BaseModel):
    detail: str
    error_kind: str
    diagnostic: Optional[str] = None


class ActionResponse(BaseModel):
    """Outcome of one simctl action, failures included."""

    success: bool
    output: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def from_result(cls, result: ExecutionResult[bytes]) -> "ActionResponse":
        if result.ok:
            return cls(
                success=True,
                output=result.value.decode("utf-8", errors="replace"),
            )
        return cls(
            success=False,
            error=result.error.detail,
            error_kind=result.error.kind,
        )


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------


class CreateDeviceRequest(BaseModel):
    name: str = Field(min_length=1)
    device_type_id: str
    runtime_id: str


class DeleteDevicesRequest(BaseModel):
    udids: list[str] = Field(min_length=1)


class BootRequest(BaseModel):
    arch: Optional[str] = None


class NameRequest(BaseModel):
    name: str = Field(min_length=1)


class LoggingRequest(BaseModel):
    enabled: bool


class OpenURLRequest(BaseModel):
    url: str


class CertificateRequest(BaseModel):
    path: str


class AppearanceRequest(BaseModel):
    appearance: Appearance


class ContentSizeRequest(BaseModel):
    content_size: ContentSize


class BatteryRequest(BaseModel):
    level: int = Field(ge=0, le=100)
    state: BatteryState


class WifiRequest(BaseModel):
    network: DataNetwork = DataNetwork.wifi
    wifi_mode: WifiMode = WifiMode.active
    wifi_bars: int = Field(default=3, ge=0, le=3)


class CellularRequest(BaseModel):
    cell_mode: CellularMode = CellularMode.active
    cell_bars: int = Field(default=4, ge=0, le=4)
    carrier: str = ""


class TimeRequest(BaseModel):
    time: dtime


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class InstallRequest(BaseModel):
    app_path: str


class PushRequest(BaseModel):
    payload: dict[str, Any]


class PrivacyRequest(BaseModel):
    action: PrivacyAction
    service: PrivacyService


class AppContainerResponse(BaseModel):
    bundle_id: str
    container: Optional[str] = None
    path: Optional[str] = None


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


class ScreenshotRequest(BaseModel):
    path: Optional[str] = None
    type: Optional[ImageFormat] = None
    display: Optional[Display] = None
    mask: Optional[Mask] = None


class ScreenshotResponse(ActionResponse):
    path: str = ""


class RecordingRequest(BaseModel):
    path: Optional[str] = None
    codec: Optional[VideoCodec] = None
    display: Optional[Display] = None
    mask: Optional[Mask] = None


# ---------------------------------------------------------------------------
# Raw command
# ---------------------------------------------------------------------------


class RawCommandRequest(BaseModel):
    command: Command
