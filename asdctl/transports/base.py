"""HID channel interface."""

from __future__ import annotations

from typing import Protocol

from asdctl.core.model import DeviceInfo, ReportRef, UsageRef


class HidChannel(Protocol):
    """Device-level operations a HID session is built on.

    Handles are opaque to callers; they are only passed back to the same
    channel and released with ``close``.
    """

    def open(self, path: str, *, writable: bool) -> int:
        """Open a device path read-only or read-write."""

    def close(self, handle: int) -> None:
        """Release a handle returned by ``open``."""

    def driver_version(self, handle: int) -> int:
        """Return the packed 32-bit driver version."""

    def device_info(self, handle: int) -> DeviceInfo:
        """Return vendor, product, and application count for the device."""

    def application(self, handle: int, index: int) -> int:
        """Return the 32-bit usage code of application collection ``index``."""

    def init_report(self, handle: int) -> None:
        """Prepare the driver's report structures for usage access."""

    def get_usage(self, handle: int, usage: UsageRef) -> int:
        """Return the value currently held in a usage slot."""

    def set_usage(self, handle: int, usage: UsageRef, value: int) -> None:
        """Load a value into a usage slot without sending it."""

    def get_report(self, handle: int, report: ReportRef) -> None:
        """Fetch a report from the device."""

    def set_report(self, handle: int, report: ReportRef) -> None:
        """Send a report to the device."""
