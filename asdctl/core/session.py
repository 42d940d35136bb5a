"""Per-device HID session driving the brightness feature report."""

from __future__ import annotations

import logging
from enum import Enum
from types import TracebackType

from asdctl.core.catalog import DeviceCatalog
from asdctl.core.errors import NotAMonitorError, SessionStateError
from asdctl.core.model import DeviceId, DeviceInfo, DriverVersion, ReportRef, UsageRef
from asdctl.transports.base import HidChannel

LOGGER = logging.getLogger(__name__)

HID_REPORT_TYPE_FEATURE = 3
# Feature report carrying the monitor brightness.
BRIGHTNESS_CONTROL = 1
# Monitor brightness usage (page 0x82, usage 0x01).
BRIGHTNESS_USAGE_CODE = 0x820001
# HID Usage Tables 1.4: Monitor Control usage page.
MONITOR_CONTROL_PAGE = 0x80

BRIGHTNESS_USAGE = UsageRef(
    report_type=HID_REPORT_TYPE_FEATURE,
    report_id=BRIGHTNESS_CONTROL,
    field_index=0,
    usage_index=0,
    usage_code=BRIGHTNESS_USAGE_CODE,
)
BRIGHTNESS_REPORT = ReportRef(
    report_type=HID_REPORT_TYPE_FEATURE,
    report_id=BRIGHTNESS_CONTROL,
    num_fields=1,
)


class SessionState(str, Enum):
    CLOSED = "closed"
    OPENED = "opened"
    VALIDATED = "validated"
    EXCHANGED = "exchanged"


def is_monitor_application(application: int) -> bool:
    return (application >> 16) & 0xFF == MONITOR_CONTROL_PAGE


class HidSession:
    """One open device path.

    Usable as a context manager; the handle is released on exit whatever
    happened inside the block. Brightness access is only allowed after
    ``init_report`` has succeeded.
    """

    def __init__(self, channel: HidChannel, path: str, *, writable: bool = False) -> None:
        self.channel = channel
        self.path = path
        self.writable = writable
        self.state = SessionState.CLOSED
        self._handle: int | None = None
        self._info: DeviceInfo | None = None

    def __enter__(self) -> HidSession:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        if self.state is not SessionState.CLOSED:
            raise SessionStateError(f"{self.path}: session already open")
        self._handle = self.channel.open(self.path, writable=self.writable)
        self.state = SessionState.OPENED
        LOGGER.debug("Opened %s (%s)", self.path, "read-write" if self.writable else "read-only")

    def close(self) -> None:
        if self._handle is None:
            return
        try:
            self.channel.close(self._handle)
        finally:
            self._handle = None
            self._info = None
            self.state = SessionState.CLOSED
            LOGGER.debug("Closed %s", self.path)

    @property
    def handle(self) -> int:
        if self._handle is None:
            raise SessionStateError(f"{self.path}: session is not open")
        return self._handle

    def driver_version(self) -> DriverVersion:
        return DriverVersion.from_packed(self.channel.driver_version(self.handle))

    def device_info(self) -> DeviceInfo:
        if self._info is None:
            self._info = self.channel.device_info(self.handle)
            LOGGER.debug(
                "%s: vendor=%#06x product=%#06x applications=%d",
                self.path,
                self._info.masked_vendor,
                self._info.masked_product,
                self._info.num_applications,
            )
        return self._info

    def identify(self, catalog: DeviceCatalog) -> DeviceId | None:
        info = self.device_info()
        return catalog.find(info.masked_vendor, info.masked_product)

    def is_monitor_application(self) -> bool:
        info = self.device_info()
        for index in range(info.num_applications):
            application = self.channel.application(self.handle, index)
            if is_monitor_application(application):
                LOGGER.debug("%s: application %d is Monitor Control (%#010x)", self.path, index, application)
                return True
        return False

    def ensure_monitor(self) -> None:
        if not self.is_monitor_application():
            raise NotAMonitorError(f"{self.path}: This device is not a USB monitor!")

    def init_report(self) -> None:
        self.channel.init_report(self.handle)
        self.state = SessionState.VALIDATED

    def get_brightness(self) -> int:
        self._require_validated()
        value = self.channel.get_usage(self.handle, BRIGHTNESS_USAGE)
        self.channel.get_report(self.handle, BRIGHTNESS_REPORT)
        self.state = SessionState.EXCHANGED
        LOGGER.debug("%s: read brightness %d", self.path, value)
        return value

    def set_brightness(self, value: int) -> None:
        self._require_validated()
        if not self.writable:
            raise SessionStateError(f"{self.path}: session was opened read-only")
        self.channel.set_usage(self.handle, BRIGHTNESS_USAGE, value)
        self.channel.set_report(self.handle, BRIGHTNESS_REPORT)
        self.state = SessionState.EXCHANGED
        LOGGER.debug("%s: wrote brightness %d", self.path, value)

    def _require_validated(self) -> None:
        if self.state not in (SessionState.VALIDATED, SessionState.EXCHANGED):
            raise SessionStateError(f"{self.path}: report structures are not initialised")
