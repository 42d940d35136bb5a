from __future__ import annotations

import pytest
from conftest import KEYBOARD_APPLICATION, FakeDevice, FakeHidChannel

from asdctl.core.catalog import DeviceCatalog
from asdctl.core.errors import (
    ReportExchangeError,
    ReportInitError,
    UnknownRangeError,
    UnsupportedDeviceError,
    UsageExchangeError,
)
from asdctl.core.model import BrightnessMode, BrightnessRequest, OutcomeStatus
from asdctl.core.request import build_request
from asdctl.core.service import BrightnessService

MONITOR = "/dev/usb/hiddev0"


def _service(catalog: DeviceCatalog, **devices: FakeDevice) -> tuple[BrightnessService, FakeHidChannel]:
    channel = FakeHidChannel({f"/dev/usb/{name}": device for name, device in devices.items()})
    return BrightnessService(catalog, channel), channel


def test_get_reads_current_value(catalog: DeviceCatalog) -> None:
    service, channel = _service(catalog, hiddev0=FakeDevice(brightness=12345))

    [outcome] = service.run(build_request([MONITOR]))

    assert outcome.status is OutcomeStatus.BRIGHTNESS
    assert outcome.brightness == 12345
    assert outcome.device is not None
    assert str(outcome.driver_version) == "1.0.4"
    assert channel.opened == [(MONITOR, False)]


def test_relative_adjust_reads_back_device_value(catalog: DeviceCatalog) -> None:
    device = FakeDevice(brightness=20000)
    service, channel = _service(catalog, hiddev0=device)

    [outcome] = service.run(build_request([MONITOR, "+1000"]))

    assert device.writes == [21000]
    assert outcome.requested == 21000
    assert outcome.brightness == 21000
    assert channel.opened == [(MONITOR, True)]


def test_relative_adjust_reports_quantised_value(catalog: DeviceCatalog) -> None:
    device = FakeDevice(brightness=20000, quantum=64)
    service, _ = _service(catalog, hiddev0=device)

    [outcome] = service.run(build_request([MONITOR, "+1000"]))

    assert outcome.requested == 21000
    assert outcome.brightness == 21000 - 21000 % 64


def test_relative_adjust_clamps_to_range(catalog: DeviceCatalog) -> None:
    device = FakeDevice(brightness=59000)
    service, _ = _service(catalog, hiddev0=device)

    [outcome] = service.run(build_request([MONITOR, "+5000"]))
    assert device.writes == [60000]
    assert outcome.brightness == 60000

    list(service.run(build_request([MONITOR, "-100000"])))
    assert device.writes[-1] == 400


def test_relative_percent_scales_by_range(catalog: DeviceCatalog) -> None:
    device = FakeDevice(brightness=20000)
    service, _ = _service(catalog, hiddev0=device)

    list(service.run(build_request([MONITOR, "-10%"])))

    assert device.writes == [20000 - 5960]


def test_absolute_percent_maps_into_range(catalog: DeviceCatalog) -> None:
    device = FakeDevice()
    service, _ = _service(catalog, hiddev0=device)

    [outcome] = service.run(build_request([MONITOR, "50%"]))

    assert outcome.status is OutcomeStatus.WRITTEN
    assert outcome.requested == 30200
    assert device.writes == [30200]


def test_absolute_literal_is_not_clamped(catalog: DeviceCatalog) -> None:
    device = FakeDevice()
    service, _ = _service(catalog, hiddev0=device)

    list(service.run(build_request([MONITOR, "65000"])))

    assert device.writes == [65000]


def test_detect_never_writes_or_opens_read_write(catalog: DeviceCatalog) -> None:
    monitor = FakeDevice()
    keyboard = FakeDevice(vendor=0x046D, product=0xC52B, applications=(KEYBOARD_APPLICATION,))
    service, channel = _service(catalog, hiddev0=monitor, hiddev1=keyboard)

    outcomes = list(service.run(build_request([MONITOR, "/dev/usb/hiddev1", "20000"], detect=True)))

    assert [o.status for o in outcomes] == [
        OutcomeStatus.DETECTED,
        OutcomeStatus.NOT_MONITOR,
        OutcomeStatus.OPEN_FAILED,
    ]
    assert outcomes[0].supported
    assert outcomes[0].message == 'Vendor= 0x5ac (Apple), Product=0x1114[Apple Studio Display (2022, 27")]'
    assert all(writable is False for _, writable in channel.opened)
    assert monitor.writes == []


def test_detect_reports_unsupported_monitor(catalog: DeviceCatalog) -> None:
    service, _ = _service(catalog, hiddev0=FakeDevice(product=0x1115))

    [outcome] = service.run(BrightnessRequest(mode=BrightnessMode.DETECT, paths=(MONITOR,)))

    assert outcome.status is OutcomeStatus.DETECTED
    assert not outcome.supported


def test_unsupported_device_aborts_without_writing(catalog: DeviceCatalog) -> None:
    unknown = FakeDevice(product=0x1115)
    later = FakeDevice()
    service, channel = _service(catalog, hiddev0=unknown, hiddev1=later)

    with pytest.raises(UnsupportedDeviceError) as exc:
        list(service.run(build_request([MONITOR, "/dev/usb/hiddev1", "30000"])))

    assert exc.value.exit_code == 2
    assert "Product=0x1115" in str(exc.value)
    assert unknown.writes == []
    assert later.writes == []
    assert channel.closed == [MONITOR]


def test_forced_unsupported_device_allows_absolute_write(catalog: DeviceCatalog) -> None:
    unknown = FakeDevice(product=0x1115)
    service, _ = _service(catalog, hiddev0=unknown)

    [outcome] = service.run(build_request([MONITOR, "30000"]), force=True)

    assert unknown.writes == [30000]
    assert outcome.warnings and outcome.warnings[0].startswith("Unsupported device:")


@pytest.mark.parametrize("token", ["+1000", "50%", "-5%"])
def test_forced_unsupported_device_rejects_range_math(catalog: DeviceCatalog, token: str) -> None:
    unknown = FakeDevice(product=0x1115)
    service, _ = _service(catalog, hiddev0=unknown)

    with pytest.raises(UnknownRangeError):
        list(service.run(build_request([MONITOR, token]), force=True))

    assert unknown.writes == []


def test_forced_unsupported_device_can_be_read(catalog: DeviceCatalog) -> None:
    service, _ = _service(catalog, hiddev0=FakeDevice(product=0x1115, brightness=777))

    [outcome] = service.run(build_request([MONITOR]), force=True)

    assert outcome.brightness == 777


def test_non_monitor_is_skipped_and_processing_continues(catalog: DeviceCatalog) -> None:
    odd = FakeDevice(applications=(KEYBOARD_APPLICATION,))
    monitor = FakeDevice(brightness=1500)
    service, channel = _service(catalog, hiddev0=odd, hiddev1=monitor)

    outcomes = list(service.run(build_request([MONITOR, "/dev/usb/hiddev1"])))

    assert outcomes[0].status is OutcomeStatus.SKIPPED
    assert "not a USB monitor" in (outcomes[0].message or "")
    assert outcomes[1].brightness == 1500
    assert channel.closed == [MONITOR, "/dev/usb/hiddev1"]


def test_open_failure_is_skipped(catalog: DeviceCatalog) -> None:
    service, _ = _service(catalog, hiddev1=FakeDevice(brightness=900))

    outcomes = list(service.run(build_request(["/dev/usb/missing", "/dev/usb/hiddev1"])))

    assert outcomes[0].status is OutcomeStatus.OPEN_FAILED
    assert outcomes[1].brightness == 900


def test_read_only_node_fails_open_for_set(catalog: DeviceCatalog) -> None:
    service, _ = _service(catalog, hiddev0=FakeDevice(writable=False))

    [outcome] = service.run(build_request([MONITOR, "1000"]))

    assert outcome.status is OutcomeStatus.OPEN_FAILED
    assert "Permission denied" in (outcome.message or "")


def test_report_init_failure_is_fatal(catalog: DeviceCatalog) -> None:
    service, channel = _service(catalog, hiddev0=FakeDevice(fail_init=True), hiddev1=FakeDevice())

    with pytest.raises(ReportInitError) as exc:
        list(service.run(build_request([MONITOR, "/dev/usb/hiddev1"])))

    assert exc.value.exit_code == 1
    assert channel.opened == [(MONITOR, False)]


def test_usage_and_report_failures_carry_exit_codes(catalog: DeviceCatalog) -> None:
    service, _ = _service(catalog, hiddev0=FakeDevice(fail_get_usage=True))
    with pytest.raises(UsageExchangeError) as usage_exc:
        list(service.run(build_request([MONITOR])))
    assert usage_exc.value.exit_code == 2

    service, _ = _service(catalog, hiddev0=FakeDevice(fail_set_report=True))
    with pytest.raises(ReportExchangeError) as report_exc:
        list(service.run(build_request([MONITOR, "1000"])))
    assert report_exc.value.exit_code == 3


def test_list_devices_uses_catalog(catalog: DeviceCatalog) -> None:
    service, _ = _service(catalog)
    assert [d.product for d in service.list_devices()] == [0x1114]


def test_detect_continues_past_node_without_hiddev_ioctls(catalog: DeviceCatalog) -> None:
    service, channel = _service(catalog, null=FakeDevice(fail_version=True), hiddev0=FakeDevice())

    outcomes = list(service.run(build_request(["/dev/usb/null", MONITOR], detect=True)))

    assert [o.status for o in outcomes] == [OutcomeStatus.QUERY_FAILED, OutcomeStatus.DETECTED]
    assert (outcomes[0].message or "").startswith("/dev/usb/null: Cannot read hiddev driver version")
    assert channel.closed == ["/dev/usb/null", MONITOR]


@pytest.mark.parametrize("failure", ["fail_version", "fail_info", "fail_application"])
def test_get_continues_past_query_failure(catalog: DeviceCatalog, failure: str) -> None:
    broken = FakeDevice(**{failure: True})
    service, channel = _service(catalog, hiddev1=broken, hiddev0=FakeDevice(brightness=4242))

    outcomes = list(service.run(build_request(["/dev/usb/hiddev1", MONITOR])))

    assert outcomes[0].status is OutcomeStatus.QUERY_FAILED
    assert outcomes[1].brightness == 4242
    assert broken.writes == []
    assert channel.closed == ["/dev/usb/hiddev1", MONITOR]
