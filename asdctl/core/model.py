"""Core data models used across catalog, session, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, order=True)
class DeviceId:
    vendor: int
    product: int
    description: str = field(compare=False)
    brightness_min: int = field(default=0, compare=False)
    brightness_max: int = field(default=255, compare=False)

    @property
    def key(self) -> tuple[int, int]:
        return (self.vendor, self.product)


@dataclass(frozen=True)
class VendorInfo:
    vendor: int
    name: str


@dataclass(frozen=True)
class DeviceInfo:
    """Metadata reported by the hiddev driver for an open device."""

    vendor: int
    product: int
    num_applications: int
    version: int = 0
    bustype: int = 0
    busnum: int = 0
    devnum: int = 0
    ifnum: int = 0

    @property
    def masked_vendor(self) -> int:
        return self.vendor & 0xFFFF

    @property
    def masked_product(self) -> int:
        return self.product & 0xFFFF


@dataclass(frozen=True)
class DriverVersion:
    major: int
    minor: int
    patch: int

    @classmethod
    def from_packed(cls, packed: int) -> DriverVersion:
        return cls(major=packed >> 16, minor=(packed >> 8) & 0xFF, patch=packed & 0xFF)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class UsageRef:
    """Address of a single usage slot inside a report."""

    report_type: int
    report_id: int
    field_index: int
    usage_index: int
    usage_code: int


@dataclass(frozen=True)
class ReportRef:
    report_type: int
    report_id: int
    num_fields: int = 1


class BrightnessMode(str, Enum):
    GET = "get"
    SET_ABSOLUTE = "set"
    SET_RELATIVE = "adjust"
    DETECT = "detect"

    @property
    def writes(self) -> bool:
        return self in (BrightnessMode.SET_ABSOLUTE, BrightnessMode.SET_RELATIVE)


@dataclass(frozen=True)
class BrightnessToken:
    relative: bool
    amount: int
    percent: bool = False


@dataclass(frozen=True)
class BrightnessRequest:
    mode: BrightnessMode
    paths: tuple[str, ...]
    value: int | None = None
    percent: bool = False


class OutcomeStatus(str, Enum):
    BRIGHTNESS = "brightness"
    WRITTEN = "written"
    DETECTED = "detected"
    NOT_MONITOR = "not-monitor"
    SKIPPED = "skipped"
    OPEN_FAILED = "open-failed"
    QUERY_FAILED = "query-failed"


@dataclass(frozen=True)
class DeviceOutcome:
    path: str
    mode: BrightnessMode
    status: OutcomeStatus
    device_info: DeviceInfo | None = None
    device: DeviceId | None = None
    brightness: int | None = None
    requested: int | None = None
    driver_version: DriverVersion | None = None
    message: str | None = None
    warnings: tuple[str, ...] = ()

    @property
    def supported(self) -> bool:
        return self.device is not None
