"""simctl invocation shapes.

Every subcommand family is one frozen model.  The executor only needs
``subcommand``, ``arguments()`` and ``input``; ``render()`` joins the first
two into the argument vector that follows the tool selector.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Option vocabularies
# ---------------------------------------------------------------------------


class ListFilter(str, Enum):
    devices = "devices"
    devicetypes = "devicetypes"
    runtimes = "runtimes"
    pairs = "pairs"


class ImageFormat(str, Enum):
    png = "png"
    tiff = "tiff"
    bmp = "bmp"
    gif = "gif"
    jpeg = "jpeg"


class VideoCodec(str, Enum):
    h264 = "h264"
    hevc = "hevc"


class Display(str, Enum):
    internal = "internal"
    external = "external"


class Mask(str, Enum):
    ignored = "ignored"
    alpha = "alpha"
    black = "black"


class Appearance(str, Enum):
    light = "light"
    dark = "dark"


class ContentSize(str, Enum):
    extra_small = "extra-small"
    small = "small"
    medium = "medium"
    large = "large"
    extra_large = "extra-large"
    extra_extra_large = "extra-extra-large"
    extra_extra_extra_large = "extra-extra-extra-large"
    accessibility_medium = "accessibility-medium"
    accessibility_large = "accessibility-large"
    accessibility_extra_large = "accessibility-extra-large"
    accessibility_extra_extra_large = "accessibility-extra-extra-large"
    accessibility_extra_extra_extra_large = "accessibility-extra-extra-extra-large"


class BatteryState(str, Enum):
    charging = "charging"
    charged = "charged"
    discharging = "discharging"


class DataNetwork(str, Enum):
    hide = "hide"
    wifi = "wifi"
    g3 = "3g"
    g4 = "4g"
    lte = "lte"
    lte_a = "lte-a"
    lte_plus = "lte+"
    g5 = "5g"
    g5_plus = "5g+"
    g5_uwb = "5g-uwb"
    g5_uc = "5g-uc"


class WifiMode(str, Enum):
    searching = "searching"
    failed = "failed"
    active = "active"


class CellularMode(str, Enum):
    not_supported = "notSupported"
    searching = "searching"
    failed = "failed"
    active = "active"


class PrivacyAction(str, Enum):
    grant = "grant"
    revoke = "revoke"
    reset = "reset"


class PrivacyService(str, Enum):
    all = "all"
    calendar = "calendar"
    contacts_limited = "contacts-limited"
    contacts = "contacts"
    location = "location"
    location_always = "location-always"
    photos_add = "photos-add"
    photos = "photos"
    media_library = "media-library"
    microphone = "microphone"
    motion = "motion"
    reminders = "reminders"
    siri = "siri"


class KeychainAction(str, Enum):
    add_root_cert = "add-root-cert"
    add_cert = "add-cert"
    reset = "reset"


HOST = "host"


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class SimctlCommand(BaseModel):
    """One invocation of simctl."""

    model_config = ConfigDict(frozen=True)

    subcommand: ClassVar[str] = ""

    @property
    def input(self) -> Optional[bytes]:
        """Bytes fed to stdin, if the command reads any."""
        return None

    def arguments(self) -> list[str]:
        return []

    def render(self) -> list[str]:
        return [self.subcommand, *self.arguments()]


def _opt(flag: str, value: Optional[Enum]) -> list[str]:
    return [f"--{flag}={value.value}"] if value is not None else []


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class ListCommand(SimctlCommand):
    kind: Literal["list"] = "list"
    subcommand: ClassVar[str] = "list"

    filter: Optional[ListFilter] = None
    # "available" or a free-text search term
    search: Optional[str] = None
    json_output: bool = True

    def arguments(self) -> list[str]:
        args: list[str] = []
        if self.json_output:
            args.append("--json")
        if self.filter is not None:
            args.append(self.filter.value)
        if self.search:
            args.append(self.search)
        return args


class ListAppsCommand(SimctlCommand):
    kind: Literal["listapps"] = "listapps"
    subcommand: ClassVar[str] = "listapps"

    udid: str

    def arguments(self) -> list[str]:
        return [self.udid]


# ---------------------------------------------------------------------------
# Device lifecycle
# ---------------------------------------------------------------------------


class BootCommand(SimctlCommand):
    kind: Literal["boot"] = "boot"
    subcommand: ClassVar[str] = "boot"

    udid: str
    arch: Optional[str] = None

    def arguments(self) -> list[str]:
        args = [self.udid]
        if self.arch:
            args.append(f"--arch={self.arch}")
        return args


class _DeviceSetCommand(SimctlCommand):
    """Commands that take a set of devices, ``all`` or ``unavailable``."""

    udids: list[str] = Field(default_factory=list)
    all_devices: bool = False

    def arguments(self) -> list[str]:
        if self.all_devices:
            return ["all"]
        return list(self.udids)


class ShutdownCommand(_DeviceSetCommand):
    kind: Literal["shutdown"] = "shutdown"
    subcommand: ClassVar[str] = "shutdown"


class EraseCommand(_DeviceSetCommand):
    kind: Literal["erase"] = "erase"
    subcommand: ClassVar[str] = "erase"


class DeleteCommand(_DeviceSetCommand):
    kind: Literal["delete"] = "delete"
    subcommand: ClassVar[str] = "delete"

    unavailable: bool = False

    def arguments(self) -> list[str]:
        if self.unavailable:
            return ["unavailable"]
        return super().arguments()


class CloneCommand(SimctlCommand):
    kind: Literal["clone"] = "clone"
    subcommand: ClassVar[str] = "clone"

    udid: str
    name: str

    def arguments(self) -> list[str]:
        return [self.udid, self.name]


class CreateCommand(SimctlCommand):
    kind: Literal["create"] = "create"
    subcommand: ClassVar[str] = "create"

    name: str
    device_type_id: str
    runtime_id: str

    def arguments(self) -> list[str]:
        return [self.name, self.device_type_id, self.runtime_id]


class RenameCommand(SimctlCommand):
    kind: Literal["rename"] = "rename"
    subcommand: ClassVar[str] = "rename"

    udid: str
    name: str

    def arguments(self) -> list[str]:
        return [self.udid, self.name]


# ---------------------------------------------------------------------------
# Device settings
# ---------------------------------------------------------------------------


class StatusBarOverrides(BaseModel):
    """Any subset of the status bar fields simctl can override."""

    model_config = ConfigDict(frozen=True)

    time: Optional[str] = None
    data_network: Optional[DataNetwork] = None
    wifi_mode: Optional[WifiMode] = None
    wifi_bars: Optional[int] = Field(default=None, ge=0, le=3)
    cellular_mode: Optional[CellularMode] = None
    cellular_bars: Optional[int] = Field(default=None, ge=0, le=4)
    operator_name: Optional[str] = None
    battery_state: Optional[BatteryState] = None
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)

    _FLAGS: ClassVar[dict[str, str]] = {
        "time": "--time",
        "data_network": "--dataNetwork",
        "wifi_mode": "--wifiMode",
        "wifi_bars": "--wifiBars",
        "cellular_mode": "--cellularMode",
        "cellular_bars": "--cellularBars",
        "operator_name": "--operatorName",
        "battery_state": "--batteryState",
        "battery_level": "--batteryLevel",
    }

    def arguments(self) -> list[str]:
        args: list[str] = []
        for field, flag in self._FLAGS.items():
            value = getattr(self, field)
            if value is None:
                continue
            args += [flag, value.value if isinstance(value, Enum) else str(value)]
        return args


class StatusBarCommand(SimctlCommand):
    kind: Literal["status_bar"] = "status_bar"
    subcommand: ClassVar[str] = "status_bar"

    udid: str
    # None clears every override
    overrides: Optional[StatusBarOverrides] = None

    def arguments(self) -> list[str]:
        if self.overrides is None:
            return [self.udid, "clear"]
        return [self.udid, "override", *self.overrides.arguments()]


class UICommand(SimctlCommand):
    kind: Literal["ui"] = "ui"
    subcommand: ClassVar[str] = "ui"

    udid: str
    appearance: Optional[Appearance] = None
    content_size: Optional[ContentSize] = None

    def arguments(self) -> list[str]:
        if self.appearance is not None:
            return [self.udid, "appearance", self.appearance.value]
        if self.content_size is not None:
            return [self.udid, "content_size", self.content_size.value]
        return [self.udid]


class LogVerboseCommand(SimctlCommand):
    kind: Literal["logverbose"] = "logverbose"
    subcommand: ClassVar[str] = "logverbose"

    udid: str
    enabled: bool

    def arguments(self) -> list[str]:
        return [self.udid, "enable" if self.enabled else "disable"]


class ICloudSyncCommand(SimctlCommand):
    kind: Literal["icloud_sync"] = "icloud_sync"
    subcommand: ClassVar[str] = "icloud_sync"

    udid: str

    def arguments(self) -> list[str]:
        return [self.udid]


class PasteboardSyncCommand(SimctlCommand):
    kind: Literal["pbsync"] = "pbsync"
    subcommand: ClassVar[str] = "pbsync"

    # a device udid or "host"
    source: str
    destination: str

    def arguments(self) -> list[str]:
        return [self.source, self.destination]


class OpenURLCommand(SimctlCommand):
    kind: Literal["openurl"] = "openurl"
    subcommand: ClassVar[str] = "openurl"

    udid: str
    url: str

    def arguments(self) -> list[str]:
        return [self.udid, self.url]


class KeychainCommand(SimctlCommand):
    kind: Literal["keychain"] = "keychain"
    subcommand: ClassVar[str] = "keychain"

    udid: str
    action: KeychainAction
    path: Optional[str] = None

    def arguments(self) -> list[str]:
        args = [self.udid, self.action.value]
        if self.action is not KeychainAction.reset and self.path:
            args.append(self.path)
        return args


# ---------------------------------------------------------------------------
# Screen capture
# ---------------------------------------------------------------------------


class ScreenshotCommand(SimctlCommand):
    kind: Literal["screenshot"] = "screenshot"
    subcommand: ClassVar[str] = "io"

    udid: str
    path: str
    type: Optional[ImageFormat] = None
    display: Optional[Display] = None
    mask: Optional[Mask] = None

    def arguments(self) -> list[str]:
        return [
            self.udid,
            "screenshot",
            *_opt("type", self.type),
            *_opt("display", self.display),
            *_opt("mask", self.mask),
            self.path,
        ]


class RecordVideoCommand(SimctlCommand):
    kind: Literal["record_video"] = "record_video"
    subcommand: ClassVar[str] = "io"

    udid: str
    path: str
    codec: Optional[VideoCodec] = None
    display: Optional[Display] = None
    mask: Optional[Mask] = None
    force: bool = True

    def arguments(self) -> list[str]:
        args = [
            self.udid,
            "recordVideo",
            *_opt("codec", self.codec),
            *_opt("display", self.display),
            *_opt("mask", self.mask),
        ]
        if self.force:
            args.append("--force")
        args.append(self.path)
        return args


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class InstallCommand(SimctlCommand):
    kind: Literal["install"] = "install"
    subcommand: ClassVar[str] = "install"

    udid: str
    app_path: str

    def arguments(self) -> list[str]:
        return [self.udid, self.app_path]


class _AppCommand(SimctlCommand):
    udid: str
    bundle_id: str

    def arguments(self) -> list[str]:
        return [self.udid, self.bundle_id]


class UninstallCommand(_AppCommand):
    kind: Literal["uninstall"] = "uninstall"
    subcommand: ClassVar[str] = "uninstall"


class LaunchCommand(_AppCommand):
    kind: Literal["launch"] = "launch"
    subcommand: ClassVar[str] = "launch"


class TerminateCommand(_AppCommand):
    kind: Literal["terminate"] = "terminate"
    subcommand: ClassVar[str] = "terminate"


class PushCommand(_AppCommand):
    kind: Literal["push"] = "push"
    subcommand: ClassVar[str] = "push"

    # Either a file on disk or inline bytes sent through stdin
    payload_path: Optional[str] = None
    payload: Optional[bytes] = None

    @property
    def input(self) -> Optional[bytes]:
        return self.payload if self.payload_path is None else None

    def arguments(self) -> list[str]:
        return [self.udid, self.bundle_id, self.payload_path or "-"]


class PrivacyCommand(SimctlCommand):
    kind: Literal["privacy"] = "privacy"
    subcommand: ClassVar[str] = "privacy"

    udid: str
    action: PrivacyAction
    service: PrivacyService
    bundle_id: Optional[str] = None

    def arguments(self) -> list[str]:
        args = [self.udid, self.action.value, self.service.value]
        if self.bundle_id:
            args.append(self.bundle_id)
        return args


class GetAppContainerCommand(_AppCommand):
    kind: Literal["get_app_container"] = "get_app_container"
    subcommand: ClassVar[str] = "get_app_container"

    # app, data, groups or a group identifier
    container: Optional[str] = None

    def arguments(self) -> list[str]:
        args = super().arguments()
        if self.container:
            args.append(self.container)
        return args


Command = Annotated[
    Union[
        ListCommand,
        ListAppsCommand,
        BootCommand,
        ShutdownCommand,
        EraseCommand,
        DeleteCommand,
        CloneCommand,
        CreateCommand,
        RenameCommand,
        StatusBarCommand,
        UICommand,
        LogVerboseCommand,
        ICloudSyncCommand,
        PasteboardSyncCommand,
        OpenURLCommand,
        KeychainCommand,
        ScreenshotCommand,
        RecordVideoCommand,
        InstallCommand,
        UninstallCommand,
        LaunchCommand,
        TerminateCommand,
        PushCommand,
        PrivacyCommand,
        GetAppContainerCommand,
    ],
    Field(discriminator="kind"),
]
