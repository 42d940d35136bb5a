"""Stable public API for building tooling on top of asdctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable

from asdctl.core.catalog import DeviceCatalog
from asdctl.core.catalog_loader import load_catalog
from asdctl.core.errors import (
    AsdctlError,
    CatalogLoadError,
    CatalogValidationError,
    DeviceOpenError,
    DeviceQueryError,
    InvalidBrightnessToken,
    NotAMonitorError,
    ReportExchangeError,
    ReportInitError,
    UnknownRangeError,
    UnsupportedDeviceError,
    UsageExchangeError,
)
from asdctl.core.model import (
    BrightnessMode,
    BrightnessRequest,
    DeviceId,
    DeviceInfo,
    DeviceOutcome,
    OutcomeStatus,
    VendorInfo,
)
from asdctl.core.service import BrightnessService
from asdctl.core.value_parser import parse_token
from asdctl.transports.base import HidChannel
from asdctl.transports.hiddev import HiddevChannel

__all__ = [
    "AsdctlError",
    "CatalogLoadError",
    "CatalogValidationError",
    "DeviceOpenError",
    "DeviceQueryError",
    "InvalidBrightnessToken",
    "NotAMonitorError",
    "ReportExchangeError",
    "ReportInitError",
    "UnknownRangeError",
    "UnsupportedDeviceError",
    "UsageExchangeError",
    "BrightnessMode",
    "BrightnessRequest",
    "DeviceCatalog",
    "DeviceId",
    "DeviceInfo",
    "DeviceOutcome",
    "OutcomeStatus",
    "VendorInfo",
    "HidChannel",
    "HiddevChannel",
    "Client",
]


class Client:
    """Public client for reading and setting monitor brightness.

    A `Client` wraps catalog loading and the hiddev channel behind a stable API
    intended for third-party tools (GUI/TUI/services/scripts). Pass `catalog`
    or `channel` to substitute either one.
    """

    def __init__(
        self,
        *,
        catalog: DeviceCatalog | None = None,
        channel: HidChannel | None = None,
    ) -> None:
        warnings: tuple[str, ...] = ()
        if catalog is None:
            loaded = load_catalog()
            catalog, warnings = loaded.catalog, loaded.warnings
        self._load_warnings = warnings
        self._service = BrightnessService(catalog, channel or HiddevChannel())

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._load_warnings

    @property
    def catalog(self) -> DeviceCatalog:
        return self._service.catalog

    def list_devices(self) -> list[DeviceId]:
        return self._service.list_devices()

    def detect(self, paths: Iterable[str]) -> list[DeviceOutcome]:
        request = BrightnessRequest(mode=BrightnessMode.DETECT, paths=tuple(paths))
        return list(self._service.run(request))

    def get_brightness(self, path: str, *, force: bool = False) -> int | None:
        request = BrightnessRequest(mode=BrightnessMode.GET, paths=(path,))
        outcome = _checked(self._service.process(request, path, force=force))
        return outcome.brightness

    def set_brightness(self, path: str, value: int | str, *, force: bool = False) -> DeviceOutcome:
        """Set an absolute value, or apply a token such as ``"+1000"`` or ``"50%"``."""
        if isinstance(value, int):
            request = BrightnessRequest(mode=BrightnessMode.SET_ABSOLUTE, paths=(path,), value=value)
        else:
            token = parse_token(value)
            request = BrightnessRequest(
                mode=BrightnessMode.SET_RELATIVE if token.relative else BrightnessMode.SET_ABSOLUTE,
                paths=(path,),
                value=token.amount,
                percent=token.percent,
            )
        return _checked(self._service.process(request, path, force=force))


def _checked(outcome: DeviceOutcome) -> DeviceOutcome:
    if outcome.status is OutcomeStatus.OPEN_FAILED:
        raise DeviceOpenError(outcome.message or outcome.path)
    if outcome.status is OutcomeStatus.QUERY_FAILED:
        raise DeviceQueryError(outcome.message or outcome.path)
    if outcome.status is OutcomeStatus.SKIPPED:
        raise NotAMonitorError(outcome.message or outcome.path)
    return outcome
