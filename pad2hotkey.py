"""
pad2hotkey - Gamepad buttons as global hotkeys.

Listens to a Nintendo Pro Controller or Xbox pad over HID and runs a toggle
and a menu action when the bound buttons are released, whether or not any
window has focus. Actions run on a dedicated action thread, never on the HID
listener thread.

Signals (POSIX): SIGUSR1 pauses hotkeys, SIGUSR2 resumes them, SIGHUP reloads
the gamepad (re-detecting it when no --device was given), SIGINT/SIGTERM quit.
"""

__version__ = "1.0.0"

import logging
import os
import shlex
import signal
import subprocess
import sys
import threading
from typing import Optional

import hid

from config import parse_arguments
from device_acquisition import AcquisitionPolicy, detect_supported_gamepad, list_hid_devices
from hotkey_core import ActionQueue, HotkeyAction
from hotkey_service import GlobalHotkeyService
from logging_setup import setup_logging
from priority import set_higher_priority, set_current_thread_priority, THREAD_PRIORITY_IDLE

logger = logging.getLogger(__name__)


def run_command(command: Optional[str], action: HotkeyAction):
    """Start the shell command bound to a hotkey, without waiting for it."""
    logger.info(f"{action.value} hotkey fired")
    if not command:
        return
    try:
        subprocess.Popen(shlex.split(command), stdin=subprocess.DEVNULL)
        logger.debug(f"Started {action.value} command: {command}")
    except (OSError, ValueError) as e:
        logger.error(f"Failed to run {action.value} command '{command}': {e}")


class HotkeyAgent:
    """
    Owns the action queue and the current GlobalHotkeyService.

    A service is immutable in its target, so reload() disposes the running one
    and builds a fresh service from the new settings.
    """

    def __init__(self, args, hid_api=hid):
        self.args = args
        self._hid_api = hid_api
        self.action_queue = ActionQueue()
        self.service: Optional[GlobalHotkeyService] = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()

    def _resolve_device(self):
        if self.args.vid is not None:
            return self.args.vid, self.args.pid
        device = detect_supported_gamepad(hid_api=self._hid_api)
        if device is None:
            return None
        return device.vendor_id, device.product_id

    def _build_service(self) -> Optional[GlobalHotkeyService]:
        target = self._resolve_device()
        if target is None:
            logger.info("No gamepad configured or detected. GlobalHotkeyService not started.")
            return None
        vid, pid = target
        return GlobalHotkeyService(
            self.action_queue, vid, pid,
            toggle_button=self.args.toggle_button,
            menu_button=self.args.menu_button,
            on_toggle=lambda: run_command(self.args.toggle_command, HotkeyAction.TOGGLE),
            on_menu=lambda: run_command(self.args.menu_command, HotkeyAction.MENU),
            policy=AcquisitionPolicy(read_timeout=self.args.read_timeout),
            start_paused=self.args.start_paused,
            hid_api=self._hid_api,
        )

    def start(self):
        self.action_queue.start()
        with self._lock:
            self.service = self._build_service()
            if self.service:
                self.service.start()

    def reload(self, args=None):
        """Dispose the running service and start one built from ``args``."""
        logger.info("Reloading global hotkey service...")
        with self._lock:
            if args is not None:
                self.args = args
            if self.service:
                self.service.dispose()
                self.service = None
            self.service = self._build_service()
            if self.service:
                self.service.start()
        logger.info("Finished reloading global hotkey service.")

    def pause(self):
        with self._lock:
            if self.service:
                self.service.pause()
            else:
                logger.debug("Pause skipped: service not running.")

    def resume(self):
        with self._lock:
            if self.service:
                self.service.resume()
            else:
                logger.debug("Resume skipped: service not running.")

    def stop(self):
        """Stops the service and the action thread."""
        logger.info("Stopping agent...")
        with self._lock:
            if self.service:
                self.service.dispose()
                self.service = None
        self.action_queue.stop()
        self._stop_event.set()
        logger.info("Agent stopped.")

    def wait(self, timeout: float = None) -> bool:
        return self._stop_event.wait(timeout)


def install_signal_handlers(agent: HotkeyAgent):
    """Map signals to agent calls. Handlers only spawn a thread; the agent lock is never taken in a handler frame."""
    def handler(func, name):
        def handle(sig, frame):
            logger.info(f"Signal {sig} received -> {name}")
            threading.Thread(target=func, name=name).start()
        return handle

    signal.signal(signal.SIGINT, handler(agent.stop, "ShutdownThread"))
    signal.signal(signal.SIGTERM, handler(agent.stop, "ShutdownThread"))

    if hasattr(signal, "SIGUSR1"):
        signal.signal(signal.SIGUSR1, handler(agent.pause, "PauseThread"))
        signal.signal(signal.SIGUSR2, handler(agent.resume, "ResumeThread"))
        signal.signal(signal.SIGHUP, handler(agent.reload, "ReloadThread"))


def print_devices():
    devices = list_hid_devices()
    if not devices:
        print("No HID devices found.")
    for device in devices:
        print(f"{device.vendor_id:04X}:{device.product_id:04X}  "
              f"if={device.interface_number:<2}  {device.manufacturer_string} {device.name}")


def main(argv=None):
    args = parse_arguments(__file__, argv)
    if args.list_devices:
        print_devices()
        return 0

    script_dir = os.path.dirname(os.path.abspath(__file__))
    _, stop_logging = setup_logging(args.log_level, args.log_file_name, script_dir,
                                    version=__version__, script_name="pad2hotkey",
                                    set_thread_priority_func=set_current_thread_priority,
                                    thread_priority_idle=THREAD_PRIORITY_IDLE)
    set_higher_priority()

    agent = HotkeyAgent(args)
    install_signal_handlers(agent)
    try:
        agent.start()
        logger.info("pad2hotkey running - press Ctrl+C to stop")
        while not agent.wait(timeout=1.0):
            pass
    except KeyboardInterrupt:
        agent.stop()
    finally:
        stop_logging()
    return 0


if __name__ == "__main__":
    sys.exit(main())
