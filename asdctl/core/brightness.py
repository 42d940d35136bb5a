"""Brightness value translation between percentages and device units."""

from __future__ import annotations


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def percent_to_absolute(percent: int, lo: int, hi: int) -> int:
    """Map ``0..100`` onto the device range ``[lo, hi]``; out-of-range input is clamped."""
    return clamp(percent, 0, 100) * (hi - lo) // 100 + lo


def scale_delta(delta_percent: int, lo: int, hi: int) -> int:
    """Convert a signed percentage step into device units, truncating toward zero."""
    scaled = abs(delta_percent) * (hi - lo) // 100
    return -scaled if delta_percent < 0 else scaled


def adjusted(current: int, delta: int, lo: int, hi: int) -> int:
    return clamp(current + delta, lo, hi)
