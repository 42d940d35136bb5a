"""Classification of user-supplied brightness tokens."""

from __future__ import annotations

from asdctl.core.errors import InvalidBrightnessToken
from asdctl.core.model import BrightnessToken

# The usage slot carries a signed 32-bit value.
_VALUE_MIN = -(2**31)
_VALUE_MAX = 2**31 - 1


def is_numeric(token: str) -> bool:
    """Does the token look like an absolute, relative, or percentage brightness?

    Anything else is treated by callers as a device path.
    """
    if not token:
        return False

    first, rest = token[0], token[1:]
    if not ("0" <= first <= "9" or first in "+-"):
        return False

    if rest.endswith("%"):
        rest = rest[:-1]
    return all("0" <= c <= "9" for c in rest)


def is_percent(token: str) -> bool:
    return token.endswith("%")


def is_relative(token: str) -> bool:
    return token[:1] in ("+", "-")


def parse_token(token: str) -> BrightnessToken:
    if not is_numeric(token):
        raise InvalidBrightnessToken(f"'{token}' is not a brightness value")

    digits = token.rstrip("%").lstrip("+-")
    if not digits:
        raise InvalidBrightnessToken(f"'{token}' has no digits")

    amount = int(token.rstrip("%"))
    if not _VALUE_MIN <= amount <= _VALUE_MAX:
        raise InvalidBrightnessToken(f"'{token}' is outside the range a monitor can accept")

    return BrightnessToken(relative=is_relative(token), amount=amount, percent=is_percent(token))
