"""
Global Hotkey Service - gamepad buttons as application-wide hotkeys.

One background thread owns the whole HID pipeline for a service instance:

    acquire device -> read report -> decode -> edge detect -> dispatch

Actions fire on button release and are handed to the host's execution
context; they never run on the listener thread. Every failure (unplugged pad,
busy device, I/O error, unexpected exception) is logged and recovered inside
the loop, so once started the service never raises into the host.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

import hid

from device_acquisition import AcquisitionPolicy, DeviceAcquirer, HidStream
from edge_tracker import ButtonStateTracker, EdgeEvents
from hid_constants import ControllerProfile
from hotkey_core.actions import HotkeyAction, TargetDevice
from hotkey_core.dispatcher import ActionDispatcher, ExecutionContext
from hotkey_core.exceptions import ReadCancelled, ReportReadTimeout
from priority import set_current_thread_priority, THREAD_PRIORITY_HIGHEST
from report_decoder import format_report, is_button_pressed
from retry_logger import SmartRetryLogger, KEY_DEVICE_READ
from run_state import RunMode, RunState

logger = logging.getLogger(__name__)

DISPOSE_JOIN_TIMEOUT = 0.5  # seconds - how long dispose() waits for the listener
RESTART_JOIN_TIMEOUT = 2.0  # seconds - how long start() waits for a listener still stopping


class ListenerState(Enum):
    IDLE = "Idle"
    ACQUIRING_DEVICE = "AcquiringDevice"
    STREAM_OPEN = "StreamOpen"
    READING = "Reading"
    REPORT_PROCESSING = "ReportProcessing"
    PAUSED = "Paused"
    STOPPED = "Stopped"


class GlobalHotkeyService:
    """
    Listens to one gamepad and turns button releases into host actions.

    A service is bound to a single TargetDevice for its lifetime. To change
    the device or bindings, dispose() it and build a new one.
    """

    def __init__(self, context: Optional[ExecutionContext],
                 vendor_id: int, product_id: int,
                 toggle_button: Optional[str] = None,
                 menu_button: Optional[str] = None,
                 on_toggle: Optional[Callable[[], None]] = None,
                 on_menu: Optional[Callable[[], None]] = None,
                 policy: AcquisitionPolicy = None,
                 hid_api=hid,
                 start_paused: bool = False):
        """
        Args:
            context: Host execution context the actions are enqueued on
            vendor_id: Target gamepad VID (0-0xFFFF)
            product_id: Target gamepad PID (0-0xFFFF)
            toggle_button: Logical code bound to the toggle action (None = unbound)
            menu_button: Logical code bound to the menu action (None = unbound)
            on_toggle: Called on the host context when the toggle button is released
            on_menu: Called on the host context when the menu button is released
            policy: Backoff and read timing
            hid_api: hidapi module (or a stand-in with enumerate()/device())
            start_paused: Begin with the pause gate closed
        """
        self.target = TargetDevice(vendor_id, product_id, toggle_button, menu_button)
        self.policy = policy or AcquisitionPolicy()
        self._dispatcher = ActionDispatcher(context)
        self._actions: Dict[HotkeyAction, Optional[Callable[[], None]]] = {
            HotkeyAction.TOGGLE: on_toggle,
            HotkeyAction.MENU: on_menu,
        }
        self._retry = SmartRetryLogger()
        self._acquirer = DeviceAcquirer(self.target, self.policy, hid_api=hid_api, retry_logger=self._retry)
        self._start_paused = start_paused
        self._run_state = RunState(paused=start_paused)
        self._tracker = ButtonStateTracker()
        self._lock = threading.Lock()  # Protects thread start and disposal
        self._thread: Optional[threading.Thread] = None
        self._disposed = False
        self._state = ListenerState.IDLE
        self._last_report: Optional[bytes] = None
        self.profile = ControllerProfile.UNKNOWN

        logger.info(f"GlobalHotkeyService initialized. Target {self.target}")
        logger.info(f"Toggle button: '{toggle_button or 'None'}', Menu button: '{menu_button or 'None'}'")

    # =========================================================================
    # Public control surface (host thread)
    # =========================================================================

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_paused(self) -> bool:
        return self._run_state.paused

    def start(self):
        with self._lock:
            if self._disposed:
                logger.warning("start() called on a disposed service, ignoring")
                return
            if self.is_running and self._run_state.stopping:
                logger.info("Previous listener still stopping, waiting for it...")
                self._thread.join(RESTART_JOIN_TIMEOUT)
                if self._thread.is_alive():
                    logger.warning(f"Previous listener did not stop within {RESTART_JOIN_TIMEOUT}s, not starting")
                    return
            if self.is_running:
                logger.info("Listener already running.")
                return
            self._run_state.rearm(paused=self._start_paused)
            self._thread = threading.Thread(target=self.listener_loop, daemon=True, name="HIDHotkeyListener")
            self._thread.start()
        logger.info("Listener thread started.")

    def stop(self):
        """Request the listener to stop. Does not wait for it."""
        if self._run_state.stop():
            logger.info("Requesting listener stop...")

    def pause(self):
        if self._run_state.pause():
            logger.info("Listener paused.")

    def resume(self):
        if self._run_state.resume():
            logger.info("Listener resumed and state reset.")

    def join(self, timeout: float = None) -> bool:
        """Wait for the listener thread. Returns True if it has finished."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def dispose(self, timeout: float = DISPOSE_JOIN_TIMEOUT):
        """Stop the listener, wait briefly for it, then drop the action callbacks."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
        self.stop()  # Also releases a listener waiting in the pause gate
        if not self.join(timeout):
            logger.warning(f"Listener did not finish within {timeout}s of dispose")
        self._actions = {action: None for action in self._actions}
        logger.info("GlobalHotkeyService disposed.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    # =========================================================================
    # Listener thread
    # =========================================================================

    def _set_state(self, state: ListenerState):
        if state != self._state:
            logger.debug(f"Listener state {self._state.value} -> {state.value}")
            self._state = state

    def _close_stream(self, stream: Optional[HidStream]) -> None:
        if stream is not None and not stream.closed:
            logger.info(f"Closing HID stream for {stream.info.name}...")
            stream.close()
        self.profile = ControllerProfile.UNKNOWN
        self._last_report = None
        return None

    def listener_loop(self):
        """Read/decode/dispatch cycle. Runs until stop() or dispose()."""
        set_current_thread_priority(THREAD_PRIORITY_HIGHEST)
        logger.info("Listener loop running...")
        stream: Optional[HidStream] = None
        try:
            while True:
                was_paused = self._run_state.mode == RunMode.PAUSED
                if was_paused:
                    self._set_state(ListenerState.PAUSED)
                if not self._run_state.wait_while_paused():
                    break

                try:
                    if was_paused and stream is not None:
                        dropped = stream.drain()
                        if dropped:
                            logger.debug(f"Discarded {dropped} report(s) buffered while paused")

                    if stream is None:
                        self._set_state(ListenerState.ACQUIRING_DEVICE)
                        acquired = self._acquirer.acquire(self._run_state)
                        if acquired is None:
                            break
                        stream, self.profile = acquired
                        self._set_state(ListenerState.STREAM_OPEN)
                        self._last_report = None
                        continue

                    self._set_state(ListenerState.READING)
                    report = stream.read(cancelled=lambda: self._run_state.mode != RunMode.RUNNING)
                    if not report:
                        logger.info("HID read returned 0 bytes. Assuming disconnection.")
                        stream = self._close_stream(stream)
                        if not self._run_state.sleep(self.policy.not_found_delay):
                            break
                        continue
                    self._retry.reset(KEY_DEVICE_READ)

                    if self._run_state.mode != RunMode.RUNNING:
                        continue  # Read completed after pause/stop; drop it

                    self._set_state(ListenerState.REPORT_PROCESSING)
                    self.process_report(report)

                except ReadCancelled:
                    if self._run_state.stopping:
                        logger.debug("Read cancelled. Exiting listener loop.")
                        break
                    # Paused mid-read; the stream stays open behind the pause gate
                except ReportReadTimeout as e:
                    logger.info(f"HID read timed out ({e}). Reacquiring device...")
                    stream = self._close_stream(stream)
                except (OSError, ValueError) as e:
                    # OSError: read failed (unplugged). ValueError: hidapi handle no longer open.
                    if self._retry.should_log(KEY_DEVICE_READ):
                        info = self._retry.format_retry_info(KEY_DEVICE_READ)
                        logger.warning(f"HID device error (likely disconnect): {e}. Reacquiring... {info}")
                    stream = self._close_stream(stream)
                    if not self._run_state.sleep(self.policy.not_found_delay):
                        break
                except Exception as e:
                    logger.error(f"Unexpected error in listener loop: {type(e).__name__} - {e}", exc_info=True)
                    stream = self._close_stream(stream)
                    if not self._run_state.sleep(self.policy.error_delay):
                        break
        finally:
            self._close_stream(stream)
            self._set_state(ListenerState.STOPPED)
            logger.info("Listener loop finished.")

    def process_report(self, report: Sequence[int]) -> EdgeEvents:
        """
        Decode one report and dispatch actions for released hotkey buttons.

        Returns:
            The edge events found in this report.
        """
        if self._run_state.consume_edge_reset():
            self._tracker.reset()
            self._last_report = None
            logger.debug("Edge state reset after resume")

        report = bytes(report)
        if report == self._last_report:
            return EdgeEvents(False, False)
        self._last_report = report
        logger.debug(f"Report ({len(report)} bytes): {format_report(report)}")

        toggle_pressed = is_button_pressed(report, self.target.toggle_button, self.profile)
        menu_pressed = is_button_pressed(report, self.target.menu_button, self.profile)
        events = self._tracker.update(toggle_pressed, menu_pressed)

        for action, released in ((HotkeyAction.TOGGLE, events.toggle_released),
                                  (HotkeyAction.MENU, events.menu_released)):
            if released:
                button_code = self.target.button_for(action)
                logger.info(f"Hotkey '{button_code}' RELEASED.")
                self._dispatcher.dispatch(action, button_code, self._actions[action])
        return events
