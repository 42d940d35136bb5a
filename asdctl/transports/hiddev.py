"""Linux hiddev channel implementation using ioctl calls on /dev/usb/hiddevN."""

from __future__ import annotations

import ctypes
import fcntl
import os

from asdctl.core.errors import (
    DeviceOpenError,
    DeviceQueryError,
    ReportExchangeError,
    ReportInitError,
    UsageExchangeError,
)
from asdctl.core.model import DeviceInfo, ReportRef, UsageRef

# linux/hiddev.h


class hiddev_devinfo(ctypes.Structure):
    _fields_ = [
        ("bustype", ctypes.c_uint),
        ("busnum", ctypes.c_uint),
        ("devnum", ctypes.c_uint),
        ("ifnum", ctypes.c_uint),
        ("vendor", ctypes.c_short),
        ("product", ctypes.c_short),
        ("version", ctypes.c_short),
        ("num_applications", ctypes.c_uint),
    ]


class hiddev_report_info(ctypes.Structure):
    _fields_ = [
        ("report_type", ctypes.c_uint),
        ("report_id", ctypes.c_uint),
        ("num_fields", ctypes.c_uint),
    ]


class hiddev_usage_ref(ctypes.Structure):
    _fields_ = [
        ("report_type", ctypes.c_uint),
        ("report_id", ctypes.c_uint),
        ("field_index", ctypes.c_uint),
        ("usage_index", ctypes.c_uint),
        ("usage_code", ctypes.c_uint),
        ("value", ctypes.c_int),
    ]


_IOC_NONE = 0
_IOC_WRITE = 1
_IOC_READ = 2


def _ioc(direction: int, nr: int, size: int = 0) -> int:
    """Build a hiddev ('H') ioctl request number."""
    return (direction << 30) | (size << 16) | (ord("H") << 8) | nr


HIDIOCGVERSION = _ioc(_IOC_READ, 0x01, ctypes.sizeof(ctypes.c_int))
HIDIOCAPPLICATION = _ioc(_IOC_NONE, 0x02)
HIDIOCGDEVINFO = _ioc(_IOC_READ, 0x03, ctypes.sizeof(hiddev_devinfo))
HIDIOCINITREPORT = _ioc(_IOC_NONE, 0x05)
HIDIOCGREPORT = _ioc(_IOC_WRITE, 0x07, ctypes.sizeof(hiddev_report_info))
HIDIOCSREPORT = _ioc(_IOC_WRITE, 0x08, ctypes.sizeof(hiddev_report_info))
HIDIOCGUSAGE = _ioc(_IOC_READ | _IOC_WRITE, 0x0B, ctypes.sizeof(hiddev_usage_ref))
HIDIOCSUSAGE = _ioc(_IOC_WRITE, 0x0C, ctypes.sizeof(hiddev_usage_ref))


def _usage_struct(usage: UsageRef, value: int = 0) -> hiddev_usage_ref:
    return hiddev_usage_ref(
        report_type=usage.report_type,
        report_id=usage.report_id,
        field_index=usage.field_index,
        usage_index=usage.usage_index,
        usage_code=usage.usage_code,
        value=value,
    )


def _report_struct(report: ReportRef) -> hiddev_report_info:
    return hiddev_report_info(
        report_type=report.report_type,
        report_id=report.report_id,
        num_fields=report.num_fields,
    )


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


class HiddevChannel:
    def open(self, path: str, *, writable: bool) -> int:
        flags = os.O_RDWR if writable else os.O_RDONLY
        try:
            return os.open(path, flags)
        except OSError as exc:
            raise DeviceOpenError(f"{path}: {_reason(exc)}") from exc

    def close(self, handle: int) -> None:
        os.close(handle)

    def driver_version(self, handle: int) -> int:
        version = ctypes.c_int(0)
        try:
            fcntl.ioctl(handle, HIDIOCGVERSION, version, True)
        except OSError as exc:
            raise DeviceQueryError(f"Cannot read hiddev driver version: {_reason(exc)}") from exc
        return version.value

    def device_info(self, handle: int) -> DeviceInfo:
        info = hiddev_devinfo()
        try:
            fcntl.ioctl(handle, HIDIOCGDEVINFO, info, True)
        except OSError as exc:
            raise DeviceQueryError(f"Cannot read device information: {_reason(exc)}") from exc
        return DeviceInfo(
            vendor=info.vendor,
            product=info.product,
            num_applications=info.num_applications,
            version=info.version,
            bustype=info.bustype,
            busnum=info.busnum,
            devnum=info.devnum,
            ifnum=info.ifnum,
        )

    def application(self, handle: int, index: int) -> int:
        try:
            return fcntl.ioctl(handle, HIDIOCAPPLICATION, index)
        except OSError as exc:
            raise DeviceQueryError(f"Cannot read application collection {index}: {_reason(exc)}") from exc

    def init_report(self, handle: int) -> None:
        try:
            fcntl.ioctl(handle, HIDIOCINITREPORT, 0)
        except OSError as exc:
            raise ReportInitError(
                f"Failed to initialize internal report structures: {_reason(exc)}"
            ) from exc

    def get_usage(self, handle: int, usage: UsageRef) -> int:
        ref = _usage_struct(usage)
        try:
            fcntl.ioctl(handle, HIDIOCGUSAGE, ref, True)
        except OSError as exc:
            raise UsageExchangeError(f"Cannot ask monitor for brightness control: {_reason(exc)}") from exc
        return ref.value

    def set_usage(self, handle: int, usage: UsageRef, value: int) -> None:
        ref = _usage_struct(usage, value)
        try:
            fcntl.ioctl(handle, HIDIOCSUSAGE, ref, True)
        except OSError as exc:
            raise UsageExchangeError(f"Cannot set brightness: {_reason(exc)}") from exc

    def get_report(self, handle: int, report: ReportRef) -> None:
        info = _report_struct(report)
        try:
            fcntl.ioctl(handle, HIDIOCGREPORT, info, True)
        except OSError as exc:
            raise ReportExchangeError(f"Cannot read brightness: {_reason(exc)}") from exc

    def set_report(self, handle: int, report: ReportRef) -> None:
        info = _report_struct(report)
        try:
            fcntl.ioctl(handle, HIDIOCSREPORT, info, True)
        except OSError as exc:
            raise ReportExchangeError(f"Cannot write brightness: {_reason(exc)}") from exc
