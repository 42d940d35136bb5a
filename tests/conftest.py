from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from asdctl.core.catalog import DeviceCatalog
from asdctl.core.errors import (
    DeviceOpenError,
    DeviceQueryError,
    ReportExchangeError,
    ReportInitError,
    UsageExchangeError,
)
from asdctl.core.model import DeviceId, DeviceInfo, ReportRef, UsageRef, VendorInfo

APPLE = 0x05AC
STUDIO_DISPLAY = 0x1114
MONITOR_APPLICATION = 0x00800001
KEYBOARD_APPLICATION = 0x00010006


@dataclass
class FakeDevice:
    vendor: int = APPLE
    product: int = STUDIO_DISPLAY
    applications: tuple[int, ...] = (KEYBOARD_APPLICATION, MONITOR_APPLICATION)
    brightness: int = 20000
    # Applied to every value committed with set_report, to mimic device-side quantisation.
    quantum: int = 1
    readable: bool = True
    writable: bool = True
    fail_version: bool = False
    fail_info: bool = False
    fail_application: bool = False
    fail_init: bool = False
    fail_get_usage: bool = False
    fail_set_report: bool = False
    writes: list[int] = field(default_factory=list)
    pending: int | None = None


class FakeHidChannel:
    def __init__(self, devices: dict[str, FakeDevice] | None = None) -> None:
        self.devices = devices or {}
        self.opened: list[tuple[str, bool]] = []
        self.closed: list[str] = []
        self.application_queries: list[tuple[str, int]] = []
        self._handles: dict[int, str] = {}
        self._next = 3

    def _device(self, handle: int) -> FakeDevice:
        return self.devices[self._handles[handle]]

    def open(self, path: str, *, writable: bool) -> int:
        device = self.devices.get(path)
        if device is None:
            raise DeviceOpenError(f"{path}: No such file or directory")
        if not device.readable or (writable and not device.writable):
            raise DeviceOpenError(f"{path}: Permission denied")
        self.opened.append((path, writable))
        handle = self._next
        self._next += 1
        self._handles[handle] = path
        return handle

    def close(self, handle: int) -> None:
        self.closed.append(self._handles.pop(handle))

    def driver_version(self, handle: int) -> int:
        if self._device(handle).fail_version:
            raise DeviceQueryError("Cannot read hiddev driver version: Inappropriate ioctl for device")
        return 0x010004

    def device_info(self, handle: int) -> DeviceInfo:
        device = self._device(handle)
        if device.fail_info:
            raise DeviceQueryError("Cannot read device information: Inappropriate ioctl for device")
        return DeviceInfo(
            vendor=device.vendor,
            product=device.product,
            num_applications=len(device.applications),
        )

    def application(self, handle: int, index: int) -> int:
        self.application_queries.append((self._handles[handle], index))
        if self._device(handle).fail_application:
            raise DeviceQueryError(f"Cannot read application collection {index}: Input/output error")
        return self._device(handle).applications[index]

    def init_report(self, handle: int) -> None:
        if self._device(handle).fail_init:
            raise ReportInitError("Failed to initialize internal report structures")

    def get_usage(self, handle: int, usage: UsageRef) -> int:
        device = self._device(handle)
        if device.fail_get_usage:
            raise UsageExchangeError("Cannot ask monitor for brightness control")
        return device.brightness

    def set_usage(self, handle: int, usage: UsageRef, value: int) -> None:
        self._device(handle).pending = value

    def get_report(self, handle: int, report: ReportRef) -> None:
        return None

    def set_report(self, handle: int, report: ReportRef) -> None:
        device = self._device(handle)
        if device.fail_set_report:
            raise ReportExchangeError("Cannot write brightness")
        assert device.pending is not None
        device.writes.append(device.pending)
        device.brightness = device.pending - device.pending % device.quantum
        device.pending = None


@pytest.fixture
def catalog() -> DeviceCatalog:
    return DeviceCatalog(
        [DeviceId(APPLE, STUDIO_DISPLAY, 'Apple Studio Display (2022, 27")', 400, 60000)],
        [VendorInfo(APPLE, "Apple")],
    )


@pytest.fixture
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path
