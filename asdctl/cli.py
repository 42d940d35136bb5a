"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from asdctl import __version__
from asdctl.core.catalog_loader import load_catalog
from asdctl.core.errors import AsdctlError
from asdctl.core.model import DeviceOutcome, OutcomeStatus
from asdctl.core.request import build_request
from asdctl.core.service import BrightnessService
from asdctl.transports.hiddev import HiddevChannel

app = typer.Typer(
    help="Read and set the brightness of USB monitors through their HID feature report.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

NOTICE = f"asdctl {__version__} -- Apple Studio Display Brightness Control"

ABOUT = f"""{NOTICE}

This program is free software; you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation; either version 2 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

CREDITS:
  Based on asdcontrol by Nicholas K. Dionysopoulos and acdcontrol by Pavel Gurevich.
"""

EPILOG = """Examples (your device may be a different /dev/usb/hiddevX or /dev/hiddevX):

  asdctl --detect /dev/usb/hiddev*    find the HID device of your monitor

  asdctl /dev/usb/hiddev0             read the current brightness

  asdctl /dev/usb/hiddev0 20000       set brightness to 20000 (400..60000 on the 2022 Studio Display)

  asdctl /dev/usb/hiddev0 50%         set brightness to half of the monitor's range

  asdctl /dev/usb/hiddev0 +1000       increase brightness by 1000

  asdctl /dev/usb/hiddev0 -- -10%     decrease brightness by 10% of the range; note the '--'
"""


def _build_service() -> BrightnessService:
    loaded = load_catalog()
    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return BrightnessService(loaded.catalog, HiddevChannel())


def _report(outcome: DeviceOutcome, *, brief: bool) -> None:
    for warning in outcome.warnings:
        typer.echo(warning, err=True)

    if outcome.status in (OutcomeStatus.OPEN_FAILED, OutcomeStatus.QUERY_FAILED, OutcomeStatus.SKIPPED):
        typer.echo(outcome.message, err=True)
    elif outcome.status is OutcomeStatus.DETECTED:
        support = "SUPPORTED" if outcome.supported else "UNSUPPORTED"
        typer.echo(f"{outcome.path}: USB Monitor - {support}.\t{outcome.message}")
    elif outcome.status is OutcomeStatus.BRIGHTNESS:
        if brief:
            typer.echo(str(outcome.brightness))
        else:
            typer.echo(f"{outcome.path}: BRIGHTNESS={outcome.brightness}")


@app.command(epilog=EPILOG)
def main(
    ctx: typer.Context,
    targets: list[str] | None = typer.Argument(
        None,
        metavar="HID_DEVICE... [BRIGHTNESS]",
        help=(
            "HID device paths plus an optional brightness: N sets it, +N/-N adjusts it, "
            "and a trailing % makes the value relative to the monitor's range."
        ),
    ),
    silent: bool = typer.Option(False, "--silent", "-s", help="Suppress non-functional output."),
    brief: bool = typer.Option(False, "--brief", "-b", help="Print only the brightness value."),
    detect: bool = typer.Option(False, "--detect", "-d", help="Detect which HID devices are monitors."),
    list_all: bool = typer.Option(False, "--list-all", "-l", help="List supported devices and exit."),
    about: bool = typer.Option(False, "--about", "-a", help="Show copyright and license information."),
    force: bool = typer.Option(False, "--force", "-f", help="Proceed on devices missing from the catalog."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log device exchanges to stderr."),
) -> None:
    """Read or set the brightness of a USB HID monitor such as the Apple Studio Display."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if about:
        typer.echo(ABOUT)
        raise typer.Exit()

    try:
        service = _build_service()
        if list_all:
            for device in service.list_devices():
                typer.echo(service.catalog.format_entry(device))
            raise typer.Exit()

        request = build_request(targets or (), detect=detect)
        if not request.paths:
            typer.echo(ctx.get_help())
            raise typer.Exit(code=1)

        if not silent:
            typer.echo(f"{NOTICE}\n")

        version_shown = silent
        for outcome in service.run(request, force=force):
            if not version_shown and outcome.driver_version is not None:
                typer.echo(f"hiddev driver version is {outcome.driver_version}")
                version_shown = True
            _report(outcome, brief=brief)
    except AsdctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
