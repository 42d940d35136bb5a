"""Domain-specific errors for asdctl.

Every error carries the process exit code the CLI reports for it.
"""


class AsdctlError(Exception):
    """Base error for asdctl."""

    exit_code = 1


class CatalogValidationError(AsdctlError):
    """Raised when a device catalog file does not conform to schema or semantics."""


class CatalogLoadError(AsdctlError):
    """Raised when reading device catalog sources fails."""


class InvalidBrightnessToken(AsdctlError):
    """Raised when a numeric-looking brightness argument has no usable value."""

    exit_code = 2


class SessionStateError(AsdctlError):
    """Raised when a HID session operation is called out of order."""


class DeviceOpenError(AsdctlError):
    """Raised when a device path cannot be opened with the requested access."""


class DeviceQueryError(AsdctlError):
    """Raised when driver or device metadata cannot be read."""


class UnsupportedDeviceError(AsdctlError):
    """Raised when the device vendor/product pair is not in the catalog."""

    exit_code = 2


class UnknownRangeError(AsdctlError):
    """Raised when range-relative math is requested for a device without a known range."""

    exit_code = 2


class NotAMonitorError(AsdctlError):
    """Raised when a device lacks the Monitor Control application collection."""


class ReportInitError(AsdctlError):
    """Raised when the driver cannot initialise its internal report structures."""


class UsageExchangeError(AsdctlError):
    """Raised when reading or loading the brightness usage slot fails."""

    exit_code = 2


class ReportExchangeError(AsdctlError):
    """Raised when fetching or committing the brightness feature report fails."""

    exit_code = 3
