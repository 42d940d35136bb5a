"""Brightness control for USB HID monitors."""

__version__ = "0.5.0"
