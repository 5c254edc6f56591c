"""Fake process runner for testing without Xcode.

Provides canned simctl outputs so that executor, feed and API flows can be
tested on any machine.
"""

from __future__ import annotations

import itertools
import plistlib
import signal
from typing import Mapping, Optional, Sequence, Union

from simctl_api.errors import LaunchError
from simctl_api.models.results import ProcessOutput

# ── Canned simctl outputs ─────────────────────────────────────────────────

IOS_17 = "com.apple.CoreSimulator.SimRuntime.iOS-17-5"
WATCH_10 = "com.apple.CoreSimulator.SimRuntime.watchOS-10-5"

IPHONE_UDID = "6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70"
IPAD_UDID = "0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9"
WATCH_UDID = "F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F"

DEVICES_JSON = b"""\
{
  "devices" : {
    "com.apple.CoreSimulator.SimRuntime.iOS-17-5" : [
      {
        "lastBootedAt" : "2024-06-01T09:41:00Z",
        "dataPath" : "/Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70/data",
        "dataPathSize" : 1843200000,
        "logPath" : "/Users/dev/Library/Logs/CoreSimulator/6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70",
        "udid" : "6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70",
        "isAvailable" : true,
        "deviceTypeIdentifier" : "com.apple.CoreSimulator.SimDeviceType.iPhone-15-Pro",
        "state" : "Shutdown",
        "name" : "iPhone 15 Pro"
      },
      {
        "dataPath" : "/Users/dev/Library/Developer/CoreSimulator/Devices/0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9/data",
        "dataPathSize" : 13058048,
        "logPath" : "/Users/dev/Library/Logs/CoreSimulator/0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9",
        "udid" : "0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9",
        "isAvailable" : true,
        "deviceTypeIdentifier" : "com.apple.CoreSimulator.SimDeviceType.iPad-Pro-11-inch-4th-generation-8GB",
        "state" : "Shutdown",
        "name" : "iPad Pro (11-inch) (4th generation)"
      }
    ],
    "com.apple.CoreSimulator.SimRuntime.watchOS-10-5" : [
      {
        "dataPath" : "/Users/dev/Library/Developer/CoreSimulator/Devices/F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F/data",
        "dataPathSize" : 13058048,
        "logPath" : "/Users/dev/Library/Logs/CoreSimulator/F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F",
        "udid" : "F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F",
        "isAvailable" : true,
        "deviceTypeIdentifier" : "com.apple.CoreSimulator.SimDeviceType.Apple-Watch-Series-9-45mm",
        "state" : "Shutdown",
        "name" : "Apple Watch Series 9 (45mm)"
      }
    ]
  }
}
"""

# Same inventory: runtimes and keys in another order, compact whitespace.
DEVICES_JSON_REORDERED = (
    b'{"devices":{"com.apple.CoreSimulator.SimRuntime.watchOS-10-5":[{"name":"Apple Watch Series 9 (45mm)",'
    b'"state":"Shutdown","deviceTypeIdentifier":"com.apple.CoreSimulator.SimDeviceType.Apple-Watch-Series-9-45mm",'
    b'"isAvailable":true,"udid":"F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F",'
    b'"logPath":"/Users/dev/Library/Logs/CoreSimulator/F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F",'
    b'"dataPathSize":13058048,'
    b'"dataPath":"/Users/dev/Library/Developer/CoreSimulator/Devices/F0E1D2C3-B4A5-9687-7869-5A4B3C2D1E0F/data"}],'
    b'"com.apple.CoreSimulator.SimRuntime.iOS-17-5":[{"name":"iPhone 15 Pro","state":"Shutdown",'
    b'"deviceTypeIdentifier":"com.apple.CoreSimulator.SimDeviceType.iPhone-15-Pro","isAvailable":true,'
    b'"udid":"6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70",'
    b'"logPath":"/Users/dev/Library/Logs/CoreSimulator/6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70",'
    b'"dataPathSize":1843200000,'
    b'"dataPath":"/Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A-3F2D-4C7B-9E1A-2B3C4D5E6F70/data",'
    b'"lastBootedAt":"2024-06-01T09:41:00Z"},'
    b'{"name":"iPad Pro (11-inch) (4th generation)","state":"Shutdown",'
    b'"deviceTypeIdentifier":"com.apple.CoreSimulator.SimDeviceType.iPad-Pro-11-inch-4th-generation-8GB",'
    b'"isAvailable":true,"udid":"0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9",'
    b'"logPath":"/Users/dev/Library/Logs/CoreSimulator/0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9",'
    b'"dataPathSize":13058048,'
    b'"dataPath":"/Users/dev/Library/Developer/CoreSimulator/Devices/0A1B2C3D-4E5F-6071-8293-A4B5C6D7E8F9/data"}]}}'
)

# The iPhone has been booted.
DEVICES_JSON_BOOTED = DEVICES_JSON.replace(
    b'"state" : "Shutdown",\n        "name" : "iPhone 15 Pro"',
    b'"state" : "Booted",\n        "name" : "iPhone 15 Pro"',
)

DEVICE_TYPES_JSON = b"""\
{
  "devicetypes" : [
    {
      "productFamily" : "iPhone",
      "bundlePath" : "/Library/Developer/CoreSimulator/Profiles/DeviceTypes/iPhone 15 Pro.simdevicetype",
      "maxRuntimeVersion" : 4294967295,
      "maxRuntimeVersionString" : "65535.255.255",
      "identifier" : "com.apple.CoreSimulator.SimDeviceType.iPhone-15-Pro",
      "modelIdentifier" : "iPhone16,1",
      "minRuntimeVersionString" : "17.0.0",
      "minRuntimeVersion" : 1114112,
      "name" : "iPhone 15 Pro"
    },
    {
      "productFamily" : "Apple Watch",
      "bundlePath" : "/Library/Developer/CoreSimulator/Profiles/DeviceTypes/Apple Watch Series 9 (45mm).simdevicetype",
      "maxRuntimeVersion" : 4294967295,
      "maxRuntimeVersionString" : "65535.255.255",
      "identifier" : "com.apple.CoreSimulator.SimDeviceType.Apple-Watch-Series-9-45mm",
      "modelIdentifier" : "Watch7,2",
      "minRuntimeVersionString" : "10.0.0",
      "minRuntimeVersion" : 655360,
      "name" : "Apple Watch Series 9 (45mm)"
    }
  ]
}
"""

RUNTIMES_JSON = b"""\
{
  "runtimes" : [
    {
      "bundlePath" : "/Library/Developer/CoreSimulator/Volumes/iOS_21F79/Library/Developer/CoreSimulator/Profiles/Runtimes/iOS 17.5.simruntime",
      "buildversion" : "21F79",
      "platform" : "iOS",
      "runtimeRoot" : "/Library/Developer/CoreSimulator/Volumes/iOS_21F79/Library/Developer/CoreSimulator/Profiles/Runtimes/iOS 17.5.simruntime/Contents/Resources/RuntimeRoot",
      "identifier" : "com.apple.CoreSimulator.SimRuntime.iOS-17-5",
      "version" : "17.5",
      "isInternal" : false,
      "isAvailable" : true,
      "name" : "iOS 17.5",
      "supportedDeviceTypes" : [
        {
          "bundlePath" : "/Library/Developer/CoreSimulator/Profiles/DeviceTypes/iPhone 15 Pro.simdevicetype",
          "name" : "iPhone 15 Pro",
          "identifier" : "com.apple.CoreSimulator.SimDeviceType.iPhone-15-Pro",
          "productFamily" : "iPhone"
        }
      ]
    }
  ]
}
"""

APPS = {
    "com.apple.mobilesafari": {
        "ApplicationType": "System",
        "Bundle": "file:///Library/Developer/CoreSimulator/Volumes/iOS_21F79/Applications/MobileSafari.app/",
        "CFBundleDisplayName": "Safari",
        "CFBundleExecutable": "MobileSafari",
        "CFBundleIdentifier": "com.apple.mobilesafari",
        "CFBundleName": "Safari",
        "CFBundleVersion": "8618.2.12.10.5",
        "DataContainer": "file:///Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Data/Application/11AA/",
        "GroupContainers": {
            "group.com.apple.mobilesafari": "file:///Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Shared/AppGroup/22BB/",
        },
        "Path": "/Library/Developer/CoreSimulator/Volumes/iOS_21F79/Applications/MobileSafari.app",
        "SBAppTags": [],
    },
    "com.example.Notes": {
        "ApplicationType": "User",
        "Bundle": "file:///Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Bundle/Application/33CC/Notes.app/",
        "CFBundleDisplayName": "Notes",
        "CFBundleExecutable": "Notes",
        "CFBundleIdentifier": "com.example.Notes",
        "CFBundleName": "Notes",
        "CFBundleShortVersionString": "1.4",
        "CFBundleVersion": "42",
        "Path": "/Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Bundle/Application/33CC/Notes.app",
    },
}

APPS_PLIST_XML = plistlib.dumps(APPS, fmt=plistlib.FMT_XML)
APPS_PLIST_BINARY = plistlib.dumps(APPS, fmt=plistlib.FMT_BINARY)

# What `simctl listapps` actually prints: an OpenStep text plist of APPS.
APPS_OPENSTEP = b"""\
{
    "com.apple.mobilesafari" =     {
        ApplicationType = System;
        Bundle = "file:///Library/Developer/CoreSimulator/Volumes/iOS_21F79/Applications/MobileSafari.app/";
        CFBundleDisplayName = Safari;
        CFBundleExecutable = MobileSafari;
        CFBundleIdentifier = "com.apple.mobilesafari";
        CFBundleName = Safari;
        CFBundleVersion = "8618.2.12.10.5";
        DataContainer = "file:///Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Data/Application/11AA/";
        GroupContainers =         {
            "group.com.apple.mobilesafari" = "file:///Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Shared/AppGroup/22BB/";
        };
        Path = "/Library/Developer/CoreSimulator/Volumes/iOS_21F79/Applications/MobileSafari.app";
        SBAppTags =         (
        );
    };
    "com.example.Notes" =     {
        ApplicationType = User;
        Bundle = "file:///Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Bundle/Application/33CC/Notes.app/";
        CFBundleDisplayName = Notes;
        CFBundleExecutable = Notes;
        CFBundleIdentifier = "com.example.Notes";
        CFBundleName = Notes;
        CFBundleShortVersionString = "1.4";
        CFBundleVersion = 42;
        Path = "/Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Bundle/Application/33CC/Notes.app";
    };
}
"""

APP_CONTAINER = b"/Users/dev/Library/Developer/CoreSimulator/Devices/6C1B5E8A/data/Containers/Bundle/Application/33CC/Notes.app\n"

INVALID_DEVICE_ERROR = b"Invalid device: 00000000-0000-0000-0000-000000000000\n"

# argv keys as rendered by the executor (tool selector included)
LIST_DEVICES = ("simctl", "list", "--json", "devices", "available")
LIST_DEVICE_TYPES = ("simctl", "list", "--json", "devicetypes")
LIST_RUNTIMES = ("simctl", "list", "--json", "runtimes")


Outcome = Union[ProcessOutput, BaseException]


class FakePopen:
    """Stand-in for a detached ``subprocess.Popen``."""

    _pids = itertools.count(40000)

    def __init__(self, argv: Sequence[str]) -> None:
        self.args = list(argv)
        self.pid = next(self._pids)
        self.returncode: Optional[int] = None
        self.signals: list[int] = []

    def poll(self) -> Optional[int]:
        return self.returncode

    def send_signal(self, sig: int) -> None:
        self.signals.append(sig)
        if sig == signal.SIGINT:
            self.returncode = 0

    def terminate(self) -> None:
        self.signals.append(signal.SIGTERM)
        self.returncode = -signal.SIGTERM

    def kill(self) -> None:
        self.signals.append(signal.SIGKILL)
        self.returncode = -signal.SIGKILL

    def wait(self, timeout: Optional[float] = None) -> int:
        if self.returncode is None:
            self.returncode = 0
        return self.returncode


class FakeRunner:
    """Mimics ``ProcessRunner`` with canned responses keyed by argv."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str], Optional[dict], Optional[bytes]]] = []
        self.spawned: list[FakePopen] = []
        self._responses: dict[tuple[str, ...], list[Outcome]] = {}
        self.spawn_error: Optional[BaseException] = None
        self.respond(LIST_DEVICES, stdout=DEVICES_JSON)
        self.respond(LIST_DEVICE_TYPES, stdout=DEVICE_TYPES_JSON)
        self.respond(LIST_RUNTIMES, stdout=RUNTIMES_JSON)

    # ── configuration ─────────────────────────────────────────────────

    def respond(
        self,
        argv: Sequence[str],
        stdout: bytes = b"",
        stderr: bytes = b"",
        returncode: int = 0,
    ) -> None:
        """Always answer *argv* (or any longer argv it prefixes) this way."""
        self._responses[tuple(argv)] = [
            ProcessOutput(
                argv=list(argv), returncode=returncode, stdout=stdout, stderr=stderr,
            ),
        ]

    def queue(self, argv: Sequence[str], *outcomes: Outcome) -> None:
        """Answer successive calls in order; the last outcome repeats."""
        self._responses[tuple(argv)] = list(outcomes)

    def fail_launch(self, argv: Sequence[str], cause: Optional[BaseException] = None) -> None:
        self.queue(argv, cause or FileNotFoundError(2, "No such file or directory"))

    # ── inspection ────────────────────────────────────────────────────

    @property
    def argvs(self) -> list[list[str]]:
        return [args for _, args, _, _ in self.calls]

    def count(self, argv: Sequence[str]) -> int:
        return sum(1 for args in self.argvs if args == list(argv))

    # ── ProcessRunner interface ───────────────────────────────────────

    def _lookup(self, arguments: list[str]) -> Outcome:
        key = tuple(arguments)
        while key:
            if key in self._responses:
                outcomes = self._responses[key]
                return outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
            key = key[:-1]
        return ProcessOutput(argv=arguments, returncode=0)

    def run_sync(
        self,
        executable: str,
        arguments: Sequence[str],
        env_overrides: Optional[Mapping[str, str]] = None,
        input: Optional[bytes] = None,
    ) -> ProcessOutput:
        args = list(arguments)
        self.calls.append(
            (executable, args, dict(env_overrides) if env_overrides else None, input),
        )
        outcome = self._lookup(args)
        if isinstance(outcome, BaseException):
            raise LaunchError(executable, outcome)
        return outcome.model_copy(update={"argv": args})

    async def run(
        self,
        executable: str,
        arguments: Sequence[str],
        env_overrides: Optional[Mapping[str, str]] = None,
        input: Optional[bytes] = None,
    ) -> ProcessOutput:
        return self.run_sync(executable, arguments, env_overrides, input)

    def spawn(
        self,
        executable: str,
        arguments: Sequence[str],
        env_overrides: Optional[Mapping[str, str]] = None,
    ) -> FakePopen:
        if self.spawn_error is not None:
            raise LaunchError(executable, self.spawn_error)
        proc = FakePopen(arguments)
        self.spawned.append(proc)
        return proc

    def shutdown(self) -> None:
        pass
