"""
Action dispatch from the HID listener thread to the host's action context.

The listener never runs an action inline. It hands a callback to an
ExecutionContext (anything with ``try_enqueue(callable) -> bool``); a failed
enqueue drops that one hotkey fire and is only logged.

ActionQueue is the execution context used by the command-line agent: a
bounded queue drained by a single consumer thread, so actions run strictly in
order and one at a time.
"""
import logging
import queue
import threading
import time
from typing import Callable, Optional, Protocol

from .actions import HotkeyAction, QueuedAction

logger = logging.getLogger(__name__)

MAX_EVENT_AGE = 2.0  # seconds - actions older than this are discarded
QUEUE_MAX_SIZE = 32  # Maximum queued actions before try_enqueue refuses


class ExecutionContext(Protocol):
    def try_enqueue(self, callback: Callable[[], None]) -> bool:
        ...


class ActionDispatcher:
    """Pushes released-hotkey actions onto the host execution context."""

    def __init__(self, context: Optional[ExecutionContext]):
        self._context = context

    def dispatch(self, action: HotkeyAction, button_code: Optional[str],
                 callback: Optional[Callable[[], None]]) -> bool:
        """
        Enqueue ``callback`` for ``action`` on the host context.

        Returns:
            True if the context accepted the callback, False if it was dropped.
        """
        if callback is None or not button_code:
            return False

        if self._context is None:
            logger.error(f"No execution context, cannot trigger {action.value} for '{button_code}'")
            return False

        def run_action():
            logger.debug(f"Executing {action.value} action for '{button_code}' (on release)")
            try:
                callback()
                logger.debug(f"{action.value} action for '{button_code}' completed")
            except Exception as e:
                logger.error(f"Exception during {action.value} action for '{button_code}': {e}", exc_info=True)

        try:
            accepted = self._context.try_enqueue(run_action)
        except Exception as e:
            logger.warning(f"Enqueue of {action.value} for '{button_code}' raised: {e}")
            return False

        if not accepted:
            logger.warning(f"Enqueue of {action.value} for '{button_code}' FAILED, hotkey dropped")
        return bool(accepted)


class ActionQueue:
    """Single-threaded action context backed by a bounded queue."""

    def __init__(self, max_size: int = QUEUE_MAX_SIZE, max_event_age: float = MAX_EVENT_AGE):
        self.queue = queue.Queue(maxsize=max_size)
        self.max_event_age = max_event_age
        self._closed = threading.Event()
        self.consumer_thread = threading.Thread(target=self.consumer, daemon=True, name="ActionConsumerThread")

    def start(self):
        self.consumer_thread.start()

    def try_enqueue(self, callback: Callable[[], None]) -> bool:
        if self._closed.is_set():
            return False
        queued = QueuedAction(callback=callback, timestamp=time.time())
        try:
            self.queue.put_nowait(queued)
            return True
        except queue.Full:
            logger.warning(f"Action queue full ({self.queue.maxsize}), dropping action")
            return False

    def consumer(self):
        """Runs queued callbacks in arrival order."""
        while True:
            queued = self.queue.get()
            if queued is None:  # Sentinel for consumer shutdown
                logger.info("Action consumer thread exiting...")
                break

            event_age = time.time() - queued.timestamp
            if event_age > self.max_event_age:
                logger.warning(f"Discarded stale action (age {event_age:.1f}s)")
                continue

            try:
                queued.callback()
            except Exception as e:
                logger.error(f"Error running queued action: {e}", exc_info=True)

    def stop(self, timeout: float = 1.0):
        """Refuses new actions, lets queued ones drain and joins the consumer."""
        self._closed.set()
        try:
            self.queue.put(None, timeout=timeout)  # Sentinel to unblock the consumer
        except queue.Full:
            logger.warning("Action queue still full at shutdown, consumer may not exit cleanly")
        if self.consumer_thread.is_alive():
            self.consumer_thread.join(timeout=timeout)
