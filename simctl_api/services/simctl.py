"""Device and application operations built on the command executor.

``SimCtl`` holds no mutable state of its own: it is constructed once at
startup and handed to request handlers as a dependency.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, time as dtime
from typing import AsyncIterator, Callable, Optional, Union

from simctl_api.config import Settings, settings
from simctl_api.errors import LaunchError
from simctl_api.models.commands import (
    HOST,
    Appearance,
    BatteryState,
    BootCommand,
    CellularMode,
    CloneCommand,
    ContentSize,
    CreateCommand,
    DataNetwork,
    DeleteCommand,
    Display,
    EraseCommand,
    GetAppContainerCommand,
    ICloudSyncCommand,
    ImageFormat,
    InstallCommand,
    KeychainAction,
    KeychainCommand,
    LaunchCommand,
    ListAppsCommand,
    ListCommand,
    ListFilter,
    LogVerboseCommand,
    Mask,
    OpenURLCommand,
    PasteboardSyncCommand,
    PrivacyAction,
    PrivacyCommand,
    PrivacyService,
    PushCommand,
    RecordVideoCommand,
    RenameCommand,
    ScreenshotCommand,
    ShutdownCommand,
    StatusBarCommand,
    StatusBarOverrides,
    TerminateCommand,
    UICommand,
    UninstallCommand,
    VideoCodec,
    WifiMode,
)
from simctl_api.models.results import ExecutionResult
from simctl_api.models.simulators import (
    ApplicationsList,
    DeviceList,
    DeviceTypeList,
    RuntimeList,
)
from simctl_api.services.change_feed import ChangeFeed
from simctl_api.services.decoders import JSONDecoder, PropertyListDecoder
from simctl_api.services.executor import CommandExecutor, RunningProcess
from simctl_api.services.process_runner import ProcessRunner
from simctl_api.utils.logging import get_logger

log = get_logger(__name__)

_DEVICE_LIST = JSONDecoder(DeviceList)
_DEVICE_TYPE_LIST = JSONDecoder(DeviceTypeList)
_RUNTIME_LIST = JSONDecoder(RuntimeList)
_APPLICATIONS_LIST = PropertyListDecoder(ApplicationsList)


def format_status_bar_time(value: Union[datetime, dtime]) -> str:
    """Status bar clock text, 12-hour ``hh:mm``.

    Only the time is sent; ISO 8601 dates are not parsed reliably by
    simctl since Xcode 15.3.
    """
    return value.strftime("%I:%M")


class SimCtl:
    """Everything the service can ask simctl to do."""

    def __init__(
        self,
        executor: CommandExecutor,
        runner: ProcessRunner,
        cfg: Settings | None = None,
    ) -> None:
        self.executor = executor
        self._runner = runner
        self._cfg = cfg or settings

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "SimCtl":
        cfg = cfg or settings
        runner = ProcessRunner(max_workers=cfg.simctl_worker_threads)
        executor = CommandExecutor(
            runner,
            cfg.simctl_launch_path,
            cfg.simctl_tool_arguments,
            cfg.simctl_environment,
        )
        return cls(executor, runner, cfg)

    def close(self) -> None:
        self._runner.shutdown()

    # ── inventory ─────────────────────────────────────────────────────

    async def list_devices(self) -> ExecutionResult[DeviceList]:
        return await self.executor.execute_decoded(
            ListCommand(filter=ListFilter.devices, search="available"),
            _DEVICE_LIST,
        )

    async def list_device_types(self) -> ExecutionResult[DeviceTypeList]:
        return await self.executor.execute_decoded(
            ListCommand(filter=ListFilter.devicetypes), _DEVICE_TYPE_LIST,
        )

    async def list_runtimes(self) -> ExecutionResult[RuntimeList]:
        return await self.executor.execute_decoded(
            ListCommand(filter=ListFilter.runtimes), _RUNTIME_LIST,
        )

    async def list_applications(self, udid: str) -> ExecutionResult[ApplicationsList]:
        return await self.executor.execute_decoded(
            ListAppsCommand(udid=udid), _APPLICATIONS_LIST,
        )

    def device_feed(self, interval: float | None = None) -> ChangeFeed[DeviceList]:
        if interval is None:
            interval = self._cfg.simctl_poll_interval_seconds
        return ChangeFeed(self.list_devices, interval, name="devices")

    def watch_device_list(self, interval: float | None = None) -> AsyncIterator[DeviceList]:
        """Current device list now, then again whenever it changes."""
        return self.device_feed(interval).subscribe()

    # ── device lifecycle ──────────────────────────────────────────────

    async def open_simulator_app(self) -> None:
        """Bring up Simulator.app so a booted device gets a window."""
        try:
            output = await self._runner.run(
                self._cfg.simctl_open_path, ["-a", "Simulator"],
            )
        except LaunchError as exc:
            log.warning("simulator_app.open_failed", error=str(exc))
            return
        if output.failed:
            log.warning("simulator_app.open_failed", rc=output.returncode)

    async def boot(self, udid: str, arch: Optional[str] = None) -> ExecutionResult[bytes]:
        if self._cfg.simctl_open_simulator_app:
            await self.open_simulator_app()
        return await self.executor.execute(BootCommand(udid=udid, arch=arch))

    async def shutdown(self, udid: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(ShutdownCommand(udids=[udid]))

    async def reboot(self, udid: str) -> ExecutionResult[bytes]:
        # A device that is already shut down makes the first step fail; boot anyway.
        await self.shutdown(udid)
        return await self.boot(udid)

    async def erase(self, udid: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(EraseCommand(udids=[udid]))

    async def clone(self, udid: str, name: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(CloneCommand(udid=udid, name=name))

    async def create(
        self, name: str, device_type_id: str, runtime_id: str,
    ) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            CreateCommand(
                name=name, device_type_id=device_type_id, runtime_id=runtime_id,
            ),
        )

    async def rename(self, udid: str, name: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(RenameCommand(udid=udid, name=name))

    async def delete(self, udids: list[str]) -> ExecutionResult[bytes]:
        return await self.executor.execute(DeleteCommand(udids=sorted(set(udids))))

    # ── device settings ───────────────────────────────────────────────

    async def _status_bar(
        self, udid: str, overrides: Optional[StatusBarOverrides],
    ) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            StatusBarCommand(udid=udid, overrides=overrides),
        )

    async def override_status_bar_battery(
        self, udid: str, level: int, state: BatteryState,
    ) -> ExecutionResult[bytes]:
        return await self._status_bar(
            udid, StatusBarOverrides(battery_level=level, battery_state=state),
        )

    async def override_status_bar_wifi(
        self,
        udid: str,
        network: DataNetwork,
        wifi_mode: WifiMode,
        wifi_bars: int,
    ) -> ExecutionResult[bytes]:
        return await self._status_bar(
            udid,
            StatusBarOverrides(
                data_network=network, wifi_mode=wifi_mode, wifi_bars=wifi_bars,
            ),
        )

    async def override_status_bar_cellular(
        self,
        udid: str,
        cell_mode: CellularMode,
        cell_bars: int,
        carrier: str,
    ) -> ExecutionResult[bytes]:
        return await self._status_bar(
            udid,
            StatusBarOverrides(
                cellular_mode=cell_mode,
                cellular_bars=cell_bars,
                operator_name=carrier,
            ),
        )

    async def override_status_bar_time(
        self, udid: str, value: Union[datetime, dtime],
    ) -> ExecutionResult[bytes]:
        return await self._status_bar(
            udid, StatusBarOverrides(time=format_status_bar_time(value)),
        )

    async def clear_status_bar_overrides(self, udid: str) -> ExecutionResult[bytes]:
        return await self._status_bar(udid, None)

    async def set_appearance(self, udid: str, appearance: Appearance) -> ExecutionResult[bytes]:
        return await self.executor.execute(UICommand(udid=udid, appearance=appearance))

    async def set_content_size(
        self, udid: str, content_size: ContentSize,
    ) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            UICommand(udid=udid, content_size=content_size),
        )

    async def set_logging(self, udid: str, enabled: bool) -> ExecutionResult[bytes]:
        """Toggle verbose logging; it only takes effect after a reboot."""
        result = await self.executor.execute(LogVerboseCommand(udid=udid, enabled=enabled))
        if not result.ok:
            return result
        return await self.reboot(udid)

    async def trigger_icloud_sync(self, udid: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(ICloudSyncCommand(udid=udid))

    async def copy_pasteboard_to_host(self, udid: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            PasteboardSyncCommand(source=udid, destination=HOST),
        )

    async def copy_pasteboard_to_device(self, udid: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            PasteboardSyncCommand(source=HOST, destination=udid),
        )

    async def open_url(self, udid: str, url: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(OpenURLCommand(udid=udid, url=url))

    async def add_root_certificate(self, udid: str, path: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            KeychainCommand(udid=udid, action=KeychainAction.add_root_cert, path=path),
        )

    # ── screen capture ────────────────────────────────────────────────

    def save_screenshot(
        self,
        udid: str,
        path: str,
        completion: Callable[[ExecutionResult[bytes]], None],
        type: Optional[ImageFormat] = None,
        display: Optional[Display] = None,
        mask: Optional[Mask] = None,
    ):
        """Take a screenshot in the background and report through *completion*."""
        return self.executor.execute_with_callback(
            ScreenshotCommand(udid=udid, path=path, type=type, display=display, mask=mask),
            completion,
        )

    async def take_screenshot(
        self,
        udid: str,
        path: str,
        type: Optional[ImageFormat] = None,
        display: Optional[Display] = None,
        mask: Optional[Mask] = None,
    ) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            ScreenshotCommand(udid=udid, path=path, type=type, display=display, mask=mask),
        )

    def start_video(
        self,
        udid: str,
        path: str,
        codec: Optional[VideoCodec] = None,
        display: Optional[Display] = None,
        mask: Optional[Mask] = None,
    ) -> RunningProcess:
        """Start recording; the caller stops it through the returned handle."""
        return self.executor.execute_detached(
            RecordVideoCommand(
                udid=udid, path=path, codec=codec, display=display, mask=mask, force=True,
            ),
        )

    # ── applications ──────────────────────────────────────────────────

    async def install(self, udid: str, app_path: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(InstallCommand(udid=udid, app_path=app_path))

    async def uninstall(self, udid: str, bundle_id: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(UninstallCommand(udid=udid, bundle_id=bundle_id))

    async def launch(self, udid: str, bundle_id: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(LaunchCommand(udid=udid, bundle_id=bundle_id))

    async def terminate(self, udid: str, bundle_id: str) -> ExecutionResult[bytes]:
        return await self.executor.execute(TerminateCommand(udid=udid, bundle_id=bundle_id))

    async def restart(self, udid: str, bundle_id: str) -> ExecutionResult[bytes]:
        # Terminating an app that is not running fails; launch regardless.
        await self.terminate(udid, bundle_id)
        return await self.launch(udid, bundle_id)

    async def send_push_notification(
        self, udid: str, bundle_id: str, json_payload: str,
    ) -> ExecutionResult[bytes]:
        """Deliver *json_payload* through a temporary file, removed afterwards."""
        fd, path = tempfile.mkstemp(suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json_payload)
            return await self.executor.execute(
                PushCommand(udid=udid, bundle_id=bundle_id, payload_path=path),
            )
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass

    async def _privacy(
        self,
        udid: str,
        action: PrivacyAction,
        service: PrivacyService,
        bundle_id: Optional[str],
    ) -> ExecutionResult[bytes]:
        return await self.executor.execute(
            PrivacyCommand(udid=udid, action=action, service=service, bundle_id=bundle_id),
        )

    async def grant_permission(
        self, udid: str, bundle_id: str, service: PrivacyService,
    ) -> ExecutionResult[bytes]:
        return await self._privacy(udid, PrivacyAction.grant, service, bundle_id)

    async def revoke_permission(
        self, udid: str, bundle_id: str, service: PrivacyService,
    ) -> ExecutionResult[bytes]:
        return await self._privacy(udid, PrivacyAction.revoke, service, bundle_id)

    async def reset_permission(
        self, udid: str, bundle_id: str, service: PrivacyService,
    ) -> ExecutionResult[bytes]:
        return await self._privacy(udid, PrivacyAction.reset, service, bundle_id)

    async def get_app_container(
        self, udid: str, bundle_id: str, container: Optional[str] = None,
    ) -> Optional[str]:
        """Filesystem path of the app's container, or None if simctl failed."""
        result = await self.executor.execute(
            GetAppContainerCommand(udid=udid, bundle_id=bundle_id, container=container),
        )
        if not result.ok:
            return None
        path = result.value.decode("utf-8", errors="replace").strip()
        return path or None
