"""
Exceptions raised inside the gamepad hotkey listener.

None of these escape the service's public methods; the listener loop catches
them and recovers by reacquiring the device.
"""


class HotkeyServiceError(Exception):
    """Base exception for hotkey service errors."""
    pass


class DeviceOpenError(HotkeyServiceError):
    """Raised when a found device cannot be opened for reading."""

    def __init__(self, message: str, vendor_id: int = None, product_id: int = None):
        super().__init__(message)
        self.vendor_id = vendor_id
        self.product_id = product_id


class ReportReadTimeout(HotkeyServiceError, TimeoutError):
    """Raised when no input report arrived within the configured read timeout."""
    pass


class ReadCancelled(HotkeyServiceError):
    """Raised when a blocking read is abandoned because the listener is stopping or pausing."""
    pass
