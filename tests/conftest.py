"""Fakes for the hidapi backend and the host execution context."""
import time
from collections import deque

import pytest

from device_acquisition import AcquisitionPolicy


class FakeHidDevice:
    """Stands in for hid.device(). Queued items are report lists or exceptions."""

    def __init__(self, reports=(), fail_open=False):
        self.reports = deque(reports)
        self.fail_open = fail_open
        self.opened_path = None
        self.close_calls = 0

    def open_path(self, path):
        if self.fail_open:
            raise OSError("open failed")
        self.opened_path = path

    def read(self, max_length, timeout_ms=0):
        if self.close_calls:
            raise ValueError("not open")
        if self.reports:
            item = self.reports.popleft()
            if isinstance(item, Exception):
                raise item
            return list(item)[:max_length]
        time.sleep(timeout_ms / 1000.0)
        return []

    def close(self):
        self.close_calls += 1


class FakeHidApi:
    """Stands in for the hid module: enumerate() and device()."""

    def __init__(self):
        self.devices = []
        self.handles = deque()
        self.opened = []
        self.enumerate_calls = 0
        self.handle_factory = FakeHidDevice  # used once the queued handles run out

    def plug(self, vendor_id, product_id, path=b"/dev/hidraw0", product="Pro Controller"):
        self.devices.append({
            'vendor_id': vendor_id,
            'product_id': product_id,
            'path': path,
            'product_string': product,
            'manufacturer_string': "Test",
            'interface_number': 0,
        })

    def enumerate(self, vendor_id=0, product_id=0):
        self.enumerate_calls += 1
        return [d for d in self.devices
                if (not vendor_id or d['vendor_id'] == vendor_id)
                and (not product_id or d['product_id'] == product_id)]

    def device(self):
        handle = self.handles.popleft() if self.handles else self.handle_factory()
        self.opened.append(handle)
        return handle


class RecordingContext:
    """Execution context that records callbacks instead of running them."""

    def __init__(self, accept=True):
        self.accept = accept
        self.callbacks = []

    def try_enqueue(self, callback):
        if not self.accept:
            return False
        self.callbacks.append(callback)
        return True

    def run_all(self):
        pending, self.callbacks = self.callbacks, []
        for callback in pending:
            callback()
        return len(pending)


@pytest.fixture
def hid_api():
    return FakeHidApi()


@pytest.fixture
def make_device():
    return FakeHidDevice


@pytest.fixture
def context():
    return RecordingContext()


@pytest.fixture
def refusing_context():
    return RecordingContext(accept=False)


@pytest.fixture
def fast_policy():
    return AcquisitionPolicy(not_found_delay=0.01, open_retry_delay=0.01, error_delay=0.01, read_slice_ms=5)


@pytest.fixture
def wait_until():
    def _wait_until(predicate, timeout=2.0, interval=0.005):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()
    return _wait_until
