"""Device catalog loading and validation for YAML-based asdctl device files.

The catalog is built from the device files shipped in ``asdctl.devices``
followed by the user's own files under ``$XDG_CONFIG_HOME/asdctl/devices``
and ``$XDG_DATA_HOME/asdctl/devices``. A later file replaces any
vendor:product entry an earlier one defined.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from asdctl.core.catalog import DeviceCatalog
from asdctl.core.errors import CatalogLoadError, CatalogValidationError
from asdctl.core.model import DeviceId, VendorInfo

LOGGER = logging.getLogger(__name__)

DEVICE_FILE_SUFFIXES = (".yml", ".yaml")

DeviceSource = Path | Traversable


class DeviceFileLoader(yaml.SafeLoader):
    """Safe loader that refuses a device file repeating a key in any mapping."""


def _construct_unique_mapping(loader: DeviceFileLoader, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
    mapping: dict[Any, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            line = key_node.start_mark.line + 1
            raise CatalogValidationError(f"Duplicate key '{key}' on line {line}")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


DeviceFileLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_unique_mapping,
)


@dataclass(frozen=True)
class LoadedCatalog:
    catalog: DeviceCatalog
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class DeviceFile:
    source: DeviceSource
    vendor: VendorInfo
    devices: tuple[DeviceId, ...]


def _device_schema_validator() -> Any:
    schema = json.loads(
        resources.files("asdctl.schemas").joinpath("device.schema.json").read_text(encoding="utf-8")
    )
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _user_device_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "asdctl/devices", xdg_data / "asdctl/devices"


def _parse_document(source: DeviceSource, validator: Any) -> dict[str, Any]:
    try:
        content = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Could not read device file {source}: {exc}") from exc

    try:
        doc = yaml.load(content, Loader=DeviceFileLoader)
    except CatalogValidationError as exc:
        raise CatalogValidationError(f"{source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise CatalogValidationError(f"Invalid YAML in {source}: {exc}") from exc

    if not isinstance(doc, dict):
        raise CatalogValidationError(f"Device file {source} must contain a mapping at root")

    try:
        validator.validate(doc)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise CatalogValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc
    return doc


def _read_device_file(source: DeviceSource, validator: Any) -> DeviceFile:
    doc = _parse_document(source, validator)
    vendor = VendorInfo(vendor=int(doc["vendor"]["id"]), name=doc["vendor"]["name"].strip())

    devices: list[DeviceId] = []
    seen: set[int] = set()
    for entry in doc["devices"]:
        product = int(entry["product"])
        context = f"{source}: product {product:#06x}"
        if product in seen:
            raise CatalogValidationError(f"{context} is listed more than once")
        seen.add(product)

        brightness_min = int(entry.get("brightness_min", 0))
        brightness_max = int(entry.get("brightness_max", 255))
        if brightness_min > brightness_max:
            raise CatalogValidationError(
                f"{context} has brightness_min {brightness_min} above brightness_max {brightness_max}"
            )
        devices.append(
            DeviceId(
                vendor=vendor.vendor,
                product=product,
                description=entry["description"].strip(),
                brightness_min=brightness_min,
                brightness_max=brightness_max,
            )
        )

    return DeviceFile(source=source, vendor=vendor, devices=tuple(devices))


def _packaged_device_files() -> list[Traversable]:
    root = resources.files("asdctl.devices")
    return sorted(
        (item for item in root.iterdir() if item.name.endswith(DEVICE_FILE_SUFFIXES)),
        key=lambda item: item.name,
    )


def _user_device_files() -> list[Path]:
    paths: list[Path] = []
    for directory in _user_device_dirs():
        if directory.is_dir():
            paths.extend(sorted(p for p in directory.iterdir() if p.suffix in DEVICE_FILE_SUFFIXES))
    return paths


def _merge(
    files: Iterable[DeviceFile],
    devices: dict[tuple[int, int], DeviceId],
    vendors: dict[int, VendorInfo],
) -> list[str]:
    """Fold ``files`` into the running tables; returns one warning per replaced entry."""
    warnings: list[str] = []
    for device_file in files:
        vendors[device_file.vendor.vendor] = device_file.vendor
        for device in device_file.devices:
            if device.key in devices:
                warning = (
                    f"User device {device.vendor:#06x}:{device.product:#06x} "
                    f"from {device_file.source} overrides packaged entry"
                )
                LOGGER.warning(warning)
                warnings.append(warning)
            devices[device.key] = device
    return warnings


def load_catalog() -> LoadedCatalog:
    validator = _device_schema_validator()
    devices: dict[tuple[int, int], DeviceId] = {}
    vendors: dict[int, VendorInfo] = {}

    for source in _packaged_device_files():
        device_file = _read_device_file(source, validator)
        vendors[device_file.vendor.vendor] = device_file.vendor
        devices.update((device.key, device) for device in device_file.devices)

    warnings = _merge(
        (_read_device_file(source, validator) for source in _user_device_files()),
        devices,
        vendors,
    )

    LOGGER.debug("Loaded %d device(s) from %d vendor(s)", len(devices), len(vendors))
    return LoadedCatalog(
        catalog=DeviceCatalog(devices.values(), vendors.values()),
        warnings=tuple(warnings),
    )
