"""
Run state shared between the host thread and the HID listener thread.

Pause gate and cancellation are one tri-state value guarded by a single
Condition, so a resume racing a stop can never reopen a stopping listener.
Every wait the listener performs goes through this object and returns as soon
as a stop is requested.
"""

import threading
from enum import Enum


class RunMode(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    STOPPING = "stopping"


class RunState:

    def __init__(self, paused: bool = False):
        self._cond = threading.Condition()
        self._mode = RunMode.PAUSED if paused else RunMode.RUNNING
        self._edge_reset_pending = False

    @property
    def mode(self) -> RunMode:
        with self._cond:
            return self._mode

    @property
    def stopping(self) -> bool:
        with self._cond:
            return self._mode == RunMode.STOPPING

    @property
    def paused(self) -> bool:
        with self._cond:
            return self._mode == RunMode.PAUSED

    def pause(self) -> bool:
        """Close the gate. Returns True if the state changed."""
        with self._cond:
            if self._mode != RunMode.RUNNING:
                return False
            self._mode = RunMode.PAUSED
            self._cond.notify_all()
            return True

    def resume(self) -> bool:
        """Reopen the gate and ask the listener to forget held buttons."""
        with self._cond:
            if self._mode != RunMode.PAUSED:
                return False
            self._mode = RunMode.RUNNING
            self._edge_reset_pending = True
            self._cond.notify_all()
            return True

    def stop(self) -> bool:
        """Request cancellation. Also releases a listener blocked in the pause gate."""
        with self._cond:
            if self._mode == RunMode.STOPPING:
                return False
            self._mode = RunMode.STOPPING
            self._cond.notify_all()
            return True

    def rearm(self, paused: bool = False):
        """Leave STOPPING before a new listener thread is started."""
        with self._cond:
            if self._mode == RunMode.STOPPING:
                self._mode = RunMode.PAUSED if paused else RunMode.RUNNING
            self._edge_reset_pending = False

    def wait_while_paused(self, timeout: float = None) -> bool:
        """
        Block while paused.

        Returns:
            True if the listener may proceed, False if a stop was requested
            (or the timeout elapsed while still paused).
        """
        with self._cond:
            self._cond.wait_for(lambda: self._mode != RunMode.PAUSED, timeout=timeout)
            return self._mode == RunMode.RUNNING

    def sleep(self, seconds: float) -> bool:
        """
        Cancellable delay.

        Returns:
            True if the full delay elapsed, False if a stop cut it short.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._mode == RunMode.STOPPING, timeout=seconds)
            return self._mode != RunMode.STOPPING

    def consume_edge_reset(self) -> bool:
        """Return True once after each resume(); the listener resets its edge state then."""
        with self._cond:
            pending = self._edge_reset_pending
            self._edge_reset_pending = False
            return pending
