"""Read-only registry of supported monitors and their vendors."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from asdctl.core.errors import CatalogValidationError
from asdctl.core.model import DeviceId, VendorInfo


class DeviceCatalog:
    """Immutable lookup table keyed by ``(vendor, product)``.

    Built once at startup and handed to whoever needs it. Lookups take ids
    already masked to 16 bits; ``is_known_vendor`` is the one exception and
    masks on its own.
    """

    def __init__(self, devices: Iterable[DeviceId] = (), vendors: Iterable[VendorInfo] = ()) -> None:
        by_key: dict[tuple[int, int], DeviceId] = {}
        for device in devices:
            if device.brightness_min > device.brightness_max:
                raise CatalogValidationError(
                    f"{device.description}: brightness_min {device.brightness_min} "
                    f"exceeds brightness_max {device.brightness_max}"
                )
            by_key[device.key] = device
        self._devices: Mapping[tuple[int, int], DeviceId] = MappingProxyType(by_key)
        self._vendors: Mapping[int, str] = MappingProxyType({v.vendor: v.name for v in vendors})

    def __len__(self) -> int:
        return len(self._devices)

    def find(self, vendor: int, product: int) -> DeviceId | None:
        return self._devices.get((vendor, product))

    def is_known_vendor(self, vendor: int) -> bool:
        return (vendor & 0xFFFF) in self._vendors

    def vendor_name(self, vendor: int) -> str:
        return self._vendors.get(vendor & 0xFFFF, "")

    def describe(self, vendor: int, product: int) -> str:
        device = self.find(vendor, product)
        return device.description if device else ""

    def list_all(self) -> list[DeviceId]:
        return sorted(self._devices.values())

    def format_device(self, vendor: int, product: int) -> str:
        vendor &= 0xFFFF
        product &= 0xFFFF
        line = f"Vendor={vendor:#6x}"
        if self.is_known_vendor(vendor):
            line += f" ({self.vendor_name(vendor)})"
        line += f", Product={product:#6x}"
        if self.find(vendor, product) is not None:
            line += f"[{self.describe(vendor, product)}]"
        return line

    def format_entry(self, device: DeviceId) -> str:
        return (
            f"Vendor={device.vendor:#6x} ({self.vendor_name(device.vendor)}), "
            f"Product={device.product:#x} [{device.description}]"
        )
