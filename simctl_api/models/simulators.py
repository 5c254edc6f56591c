"""Typed views of simctl's inventory output."""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel


class _SimctlModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# list devices
# ---------------------------------------------------------------------------


class Device(_SimctlModel):
    """Single simulator from ``simctl list devices``."""

    udid: str
    name: str
    state: str
    is_available: bool = Field(default=True, alias="isAvailable")
    device_type_identifier: Optional[str] = Field(
        default=None, alias="deviceTypeIdentifier",
    )
    data_path: Optional[str] = Field(default=None, alias="dataPath")
    data_path_size: Optional[int] = Field(default=None, alias="dataPathSize")
    log_path: Optional[str] = Field(default=None, alias="logPath")
    log_path_size: Optional[int] = Field(default=None, alias="logPathSize")
    last_booted_at: Optional[str] = Field(default=None, alias="lastBootedAt")
    availability_error: Optional[str] = Field(default=None, alias="availabilityError")

    @property
    def is_booted(self) -> bool:
        return self.state == "Booted"


class DeviceList(_SimctlModel):
    # keyed by runtime identifier
    devices: dict[str, list[Device]]

    def iter_devices(self) -> Iterator[tuple[str, Device]]:
        for runtime_id, devices in self.devices.items():
            for device in devices:
                yield runtime_id, device

    def find(self, udid: str) -> Optional[Device]:
        for _, device in self.iter_devices():
            if device.udid == udid:
                return device
        return None


# ---------------------------------------------------------------------------
# list devicetypes
# ---------------------------------------------------------------------------


class DeviceType(_SimctlModel):
    identifier: str
    name: str
    product_family: Optional[str] = Field(default=None, alias="productFamily")
    model_identifier: Optional[str] = Field(default=None, alias="modelIdentifier")
    bundle_path: Optional[str] = Field(default=None, alias="bundlePath")
    min_runtime_version: Optional[int] = Field(default=None, alias="minRuntimeVersion")
    max_runtime_version: Optional[int] = Field(default=None, alias="maxRuntimeVersion")
    min_runtime_version_string: Optional[str] = Field(
        default=None, alias="minRuntimeVersionString",
    )
    max_runtime_version_string: Optional[str] = Field(
        default=None, alias="maxRuntimeVersionString",
    )


class DeviceTypeList(_SimctlModel):
    devicetypes: list[DeviceType]


# ---------------------------------------------------------------------------
# list runtimes
# ---------------------------------------------------------------------------


class SupportedDeviceType(_SimctlModel):
    identifier: str
    name: str
    product_family: Optional[str] = Field(default=None, alias="productFamily")
    bundle_path: Optional[str] = Field(default=None, alias="bundlePath")


class Runtime(_SimctlModel):
    identifier: str
    name: str
    version: str
    build_version: Optional[str] = Field(default=None, alias="buildversion")
    platform: Optional[str] = None
    is_available: bool = Field(default=True, alias="isAvailable")
    is_internal: bool = Field(default=False, alias="isInternal")
    bundle_path: Optional[str] = Field(default=None, alias="bundlePath")
    runtime_root: Optional[str] = Field(default=None, alias="runtimeRoot")
    supported_device_types: list[SupportedDeviceType] = Field(
        default_factory=list, alias="supportedDeviceTypes",
    )


class RuntimeList(_SimctlModel):
    runtimes: list[Runtime]


# ---------------------------------------------------------------------------
# listapps (property list keyed by bundle identifier)
# ---------------------------------------------------------------------------


class Application(_SimctlModel):
    application_type: str = Field(alias="ApplicationType")
    bundle: str = Field(alias="Bundle")
    bundle_identifier: str = Field(alias="CFBundleIdentifier")
    display_name: Optional[str] = Field(default=None, alias="CFBundleDisplayName")
    bundle_name: Optional[str] = Field(default=None, alias="CFBundleName")
    executable: Optional[str] = Field(default=None, alias="CFBundleExecutable")
    version: Optional[str] = Field(default=None, alias="CFBundleVersion")
    short_version: Optional[str] = Field(
        default=None, alias="CFBundleShortVersionString",
    )
    data_container: Optional[str] = Field(default=None, alias="DataContainer")
    path: Optional[str] = Field(default=None, alias="Path")
    group_containers: dict[str, str] = Field(
        default_factory=dict, alias="GroupContainers",
    )

    @property
    def is_user_app(self) -> bool:
        return self.application_type == "User"


class ApplicationsList(RootModel[dict[str, Application]]):
    model_config = ConfigDict(frozen=True)

    def user_apps(self) -> list[Application]:
        return [app for app in self.root.values() if app.is_user_app]
