"""Turn positional command-line tokens into a brightness request."""

from __future__ import annotations

from collections.abc import Iterable

from asdctl.core.model import BrightnessMode, BrightnessRequest
from asdctl.core.value_parser import is_numeric, parse_token


def build_request(tokens: Iterable[str], *, detect: bool = False) -> BrightnessRequest:
    """Split tokens into device paths and at most one brightness value.

    In detect mode every token is a path. Otherwise each numeric-looking
    token replaces whatever an earlier one selected, so the last one wins.
    """
    if detect:
        return BrightnessRequest(mode=BrightnessMode.DETECT, paths=tuple(tokens))

    paths: list[str] = []
    mode = BrightnessMode.GET
    value: int | None = None
    percent = False
    for token in tokens:
        if not is_numeric(token):
            paths.append(token)
            continue

        parsed = parse_token(token)
        mode = BrightnessMode.SET_RELATIVE if parsed.relative else BrightnessMode.SET_ABSOLUTE
        value = parsed.amount
        percent = parsed.percent

    return BrightnessRequest(mode=mode, paths=tuple(paths), value=value, percent=percent)
