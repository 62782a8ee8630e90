"""
Device Acquisition - finds, profiles and opens the target gamepad.

The acquirer retries forever until it has a readable HidStream or the run
state is stopping:

    not found            -> wait NOT_FOUND_DELAY, search again
    found, unknown model -> do not open, wait NOT_FOUND_DELAY, search again
    found, open fails    -> wait OPEN_RETRY_DELAY, search again

Failures from hidapi never escape this module; they become "not found" or
"no stream". All waits are cancellable through RunState.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import hid

from hid_constants import (
    ControllerProfile, MAX_INPUT_REPORT_LENGTH, determine_profile,
    NINTENDO_VID, PRO_CONTROLLER_PID_USB, XBOX_VID, XBOX_PID,
)
from hotkey_core.actions import TargetDevice
from hotkey_core.exceptions import DeviceOpenError, ReadCancelled, ReportReadTimeout
from retry_logger import SmartRetryLogger, KEY_DEVICE_FIND, KEY_DEVICE_OPEN
from run_state import RunState

logger = logging.getLogger(__name__)

# Parameters
NOT_FOUND_DELAY = 1.5   # seconds - between searches while the pad is absent
OPEN_RETRY_DELAY = 2.5  # seconds - after a found device refused to open
ERROR_DELAY = 3.0       # seconds - after an unexpected error in the listener loop
READ_SLICE_MS = 100     # milliseconds - hidapi poll slice, bounds stop latency
DRAIN_SLICE_MS = 1      # milliseconds - per-read wait when discarding buffered reports
DRAIN_MAX_REPORTS = 256  # a streaming pad never empties its buffer; stop after this many


@dataclass(frozen=True)
class DeviceInfo:
    """One entry of the platform HID device list."""
    vendor_id: int
    product_id: int
    path: bytes
    product_string: str = ""
    manufacturer_string: str = ""
    interface_number: int = -1

    @classmethod
    def from_hid(cls, info: dict) -> "DeviceInfo":
        return cls(
            vendor_id=info.get('vendor_id', 0),
            product_id=info.get('product_id', 0),
            path=info.get('path', b""),
            product_string=info.get('product_string') or "",
            manufacturer_string=info.get('manufacturer_string') or "",
            interface_number=info.get('interface_number', -1),
        )

    @property
    def name(self) -> str:
        return self.product_string or f"HID {self.vendor_id:04X}:{self.product_id:04X}"


@dataclass
class AcquisitionPolicy:
    """Backoff timing for the acquisition loop."""
    not_found_delay: float = NOT_FOUND_DELAY
    open_retry_delay: float = OPEN_RETRY_DELAY
    error_delay: float = ERROR_DELAY
    read_timeout: Optional[float] = None  # None = wait forever for a report
    read_slice_ms: int = READ_SLICE_MS


class HidStream:
    """
    An opened HID device, readable one input report at a time.

    read() blocks until a report arrives. hidapi reads are issued in short
    slices so that a stop request is noticed within one slice.
    """

    def __init__(self, device, info: DeviceInfo, read_timeout: Optional[float] = None,
                 read_slice_ms: int = READ_SLICE_MS,
                 max_input_report_length: int = MAX_INPUT_REPORT_LENGTH):
        self._device = device
        self.info = info
        self.read_timeout = read_timeout
        self.read_slice_ms = read_slice_ms
        self.max_input_report_length = max_input_report_length
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, cancelled: Callable[[], bool] = lambda: False) -> bytes:
        """
        Read one input report.

        Returns:
            Report bytes. An empty result means the device went away.

        Raises:
            ReadCancelled: ``cancelled()`` became true while waiting
            ReportReadTimeout: read_timeout elapsed without a report
            OSError: hidapi read failure (usually a disconnect)
        """
        if self._closed:
            return b""
        started = time.monotonic()
        while True:
            data = self._device.read(self.max_input_report_length, self.read_slice_ms)
            if data:
                return bytes(data[:self.max_input_report_length])
            if cancelled():
                raise ReadCancelled("read abandoned, listener not running")
            if self.read_timeout is not None and time.monotonic() - started >= self.read_timeout:
                raise ReportReadTimeout(f"no input report within {self.read_timeout}s")

    def drain(self) -> int:
        """Discard reports the OS buffered while nobody was reading. Returns how many."""
        if self._closed:
            return 0
        dropped = 0
        while dropped < DRAIN_MAX_REPORTS and self._device.read(self.max_input_report_length, DRAIN_SLICE_MS):
            dropped += 1
        return dropped

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self._device.close()
        except (OSError, IOError, ValueError) as e:
            logger.debug(f"Error closing HID device {self.info.name}: {e}")


def list_hid_devices(vendor_id: int = 0, product_id: int = 0, hid_api=hid) -> List[DeviceInfo]:
    """Enumerate HID devices (0 = any VID/PID). Errors yield an empty list."""
    try:
        return [DeviceInfo.from_hid(info) for info in hid_api.enumerate(vendor_id, product_id)]
    except (OSError, IOError, ValueError) as e:
        logger.warning(f"Error enumerating HID devices: {e}")
        return []


def detect_supported_gamepad(hid_api=hid) -> Optional[DeviceInfo]:
    """
    Find an attached supported controller.

    Pro Controllers are preferred over Xbox pads when both are attached.
    """
    for vid, pid in ((NINTENDO_VID, PRO_CONTROLLER_PID_USB), (XBOX_VID, XBOX_PID)):
        devices = list_hid_devices(vid, pid, hid_api=hid_api)
        if devices:
            logger.info(f"Detected gamepad: {devices[0].name} ({vid:04X}/{pid:04X})")
            return devices[0]
    logger.info("No supported gamepad detected")
    return None


class DeviceAcquirer:
    """Produces a live HidStream for one TargetDevice."""

    def __init__(self, target: TargetDevice, policy: AcquisitionPolicy = None, hid_api=hid,
                 retry_logger: SmartRetryLogger = None):
        self.target = target
        self.policy = policy or AcquisitionPolicy()
        self._hid = hid_api
        self._retry = retry_logger or SmartRetryLogger()

    def find_device(self) -> Optional[DeviceInfo]:
        """First device in the platform list matching the target VID/PID."""
        try:
            for info in self._hid.enumerate(self.target.vendor_id, self.target.product_id):
                device = DeviceInfo.from_hid(info)
                if (device.vendor_id == self.target.vendor_id
                        and device.product_id == self.target.product_id):
                    logger.debug(f"Found device: {device.name} (VID={device.vendor_id:04X}, PID={device.product_id:04X})")
                    return device
        except (OSError, IOError, ValueError) as e:
            logger.warning(f"Error enumerating HID devices: {e}")
        return None

    @staticmethod
    def determine_profile(device: DeviceInfo) -> ControllerProfile:
        return determine_profile(device.vendor_id, device.product_id)

    def _open(self, device: DeviceInfo):
        handle = self._hid.device()
        try:
            handle.open_path(device.path)
        except (OSError, IOError, ValueError) as e:
            raise DeviceOpenError(str(e), device.vendor_id, device.product_id) from e
        return handle

    def open_stream(self, device: DeviceInfo) -> Optional[HidStream]:
        """Open the device for reading. Returns None on any failure."""
        try:
            handle = self._open(device)
        except DeviceOpenError as e:
            if self._retry.should_log(KEY_DEVICE_OPEN):
                info = self._retry.format_retry_info(KEY_DEVICE_OPEN)
                logger.warning(f"Failed to open HID stream for {device.name}: {e} {info}")
            return None
        self._retry.reset(KEY_DEVICE_OPEN)
        return HidStream(handle, device,
                         read_timeout=self.policy.read_timeout,
                         read_slice_ms=self.policy.read_slice_ms)

    def acquire(self, run_state: RunState):
        """
        Retry until the target is open.

        Returns:
            (HidStream, ControllerProfile), or None once the run state is stopping.
        """
        while not run_state.stopping:
            device = self.find_device()
            if device is None:
                if self._retry.should_log(KEY_DEVICE_FIND):
                    info = self._retry.format_retry_info(KEY_DEVICE_FIND)
                    logger.debug(f"Target device {self.target} not found. Waiting... {info}")
                if not run_state.sleep(self.policy.not_found_delay):
                    return None
                continue

            profile = self.determine_profile(device)
            if profile == ControllerProfile.UNKNOWN:
                if self._retry.should_log(KEY_DEVICE_FIND):
                    logger.warning(f"Device {device.name} is not a supported controller, not opening it")
                if not run_state.sleep(self.policy.not_found_delay):
                    return None
                continue

            self._retry.reset(KEY_DEVICE_FIND)
            logger.info(f"Found device: {device.name}. Type determined as: {profile.value}")
            stream = self.open_stream(device)
            if stream is None:
                if not run_state.sleep(self.policy.open_retry_delay):
                    return None
                continue

            logger.info(f"HID stream opened for {device.name}")
            return stream, profile
        return None
