"""Service layer used by the CLI and the public API."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from asdctl.core.brightness import adjusted, percent_to_absolute, scale_delta
from asdctl.core.catalog import DeviceCatalog
from asdctl.core.errors import (
    DeviceOpenError,
    DeviceQueryError,
    NotAMonitorError,
    UnknownRangeError,
    UnsupportedDeviceError,
)
from asdctl.core.model import (
    BrightnessMode,
    BrightnessRequest,
    DeviceId,
    DeviceOutcome,
    OutcomeStatus,
)
from asdctl.core.session import HidSession
from asdctl.transports.base import HidChannel

LOGGER = logging.getLogger(__name__)


class BrightnessService:
    """Runs a brightness request against each device path in turn.

    Paths are independent: an unreadable path, a node that does not answer
    hiddev queries, or a device without the Monitor Control application is
    reported and skipped. An unsupported
    device (unless forced) and any report failure abort the whole run by
    raising out of ``run``.
    """

    def __init__(self, catalog: DeviceCatalog, channel: HidChannel) -> None:
        self.catalog = catalog
        self.channel = channel

    def list_devices(self) -> list[DeviceId]:
        return self.catalog.list_all()

    def run(self, request: BrightnessRequest, *, force: bool = False) -> Iterator[DeviceOutcome]:
        for path in request.paths:
            yield self.process(request, path, force=force)

    def process(self, request: BrightnessRequest, path: str, *, force: bool = False) -> DeviceOutcome:
        try:
            with HidSession(self.channel, path, writable=request.mode.writes) as session:
                if request.mode is BrightnessMode.DETECT:
                    return self._detect(session)
                return self._exchange(session, request, force=force)
        except DeviceOpenError as exc:
            LOGGER.debug("Skipping %s: %s", path, exc)
            return DeviceOutcome(
                path=path,
                mode=request.mode,
                status=OutcomeStatus.OPEN_FAILED,
                message=str(exc),
            )
        except DeviceQueryError as exc:
            LOGGER.debug("Skipping %s: %s", path, exc)
            return DeviceOutcome(
                path=path,
                mode=request.mode,
                status=OutcomeStatus.QUERY_FAILED,
                message=f"{path}: {exc}",
            )

    def _detect(self, session: HidSession) -> DeviceOutcome:
        version = session.driver_version()
        info = session.device_info()
        device = session.identify(self.catalog)
        monitor = session.is_monitor_application()
        return DeviceOutcome(
            path=session.path,
            mode=BrightnessMode.DETECT,
            status=OutcomeStatus.DETECTED if monitor else OutcomeStatus.NOT_MONITOR,
            device_info=info,
            device=device,
            driver_version=version,
            message=self.catalog.format_device(info.vendor, info.product),
        )

    def _exchange(
        self,
        session: HidSession,
        request: BrightnessRequest,
        *,
        force: bool,
    ) -> DeviceOutcome:
        version = session.driver_version()
        info = session.device_info()
        device = session.identify(self.catalog)

        warnings: tuple[str, ...] = ()
        if device is None:
            line = self.catalog.format_device(info.vendor, info.product)
            if not force:
                raise UnsupportedDeviceError(f"Unsupported device: {line}")
            LOGGER.warning("Forcing access to unsupported device %s", session.path)
            warnings = (f"Unsupported device: {line}",)

        try:
            session.ensure_monitor()
        except NotAMonitorError as exc:
            return DeviceOutcome(
                path=session.path,
                mode=request.mode,
                status=OutcomeStatus.SKIPPED,
                device_info=info,
                device=device,
                driver_version=version,
                message=str(exc),
                warnings=warnings,
            )

        ranged: DeviceId | None = None
        if request.mode is BrightnessMode.SET_RELATIVE or (
            request.mode is BrightnessMode.SET_ABSOLUTE and request.percent
        ):
            ranged = self._require_range(device, session.path)

        session.init_report()

        requested: int | None = None
        brightness: int | None = None
        status = OutcomeStatus.BRIGHTNESS
        if request.mode is BrightnessMode.GET:
            brightness = session.get_brightness()
        elif request.mode is BrightnessMode.SET_ABSOLUTE:
            requested = self._absolute_target(request, ranged)
            session.set_brightness(requested)
            status = OutcomeStatus.WRITTEN
        elif ranged is not None:
            delta = self._delta(request, ranged)
            current = session.get_brightness()
            requested = adjusted(current, delta, ranged.brightness_min, ranged.brightness_max)
            session.set_brightness(requested)
            brightness = session.get_brightness()

        return DeviceOutcome(
            path=session.path,
            mode=request.mode,
            status=status,
            device_info=info,
            device=device,
            brightness=brightness,
            requested=requested,
            driver_version=version,
            warnings=warnings,
        )

    @staticmethod
    def _require_range(device: DeviceId | None, path: str) -> DeviceId:
        if device is None:
            raise UnknownRangeError(
                f"{path}: brightness range is unknown for this device; "
                "only absolute values can be forced"
            )
        return device

    @staticmethod
    def _absolute_target(request: BrightnessRequest, ranged: DeviceId | None) -> int:
        """Percent targets arrive with the range-checked device; literal ones with ``None``."""
        value = request.value or 0
        if ranged is None:
            return value
        return percent_to_absolute(value, ranged.brightness_min, ranged.brightness_max)

    @staticmethod
    def _delta(request: BrightnessRequest, device: DeviceId) -> int:
        value = request.value or 0
        if not request.percent:
            return value
        return scale_delta(value, device.brightness_min, device.brightness_max)
