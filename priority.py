"""
Process and thread priority helpers.

The HID listener thread gets a raised priority on Windows so hotkeys stay
responsive while the machine is busy. Elsewhere only the process niceness is
adjusted (best effort).
"""

import logging
import os
import sys
import threading

import psutil

logger = logging.getLogger(__name__)

# Platform-specific imports (Windows thread priority)
IS_WINDOWS = sys.platform == 'win32'
if IS_WINDOWS:
    try:
        import ctypes
        import win32process
        HAS_WIN32 = True
        THREAD_PRIORITY_IDLE = win32process.THREAD_PRIORITY_IDLE
        THREAD_PRIORITY_HIGHEST = win32process.THREAD_PRIORITY_HIGHEST
    except ImportError:
        HAS_WIN32 = False
        THREAD_PRIORITY_IDLE = THREAD_PRIORITY_HIGHEST = 0
else:
    HAS_WIN32 = False
    THREAD_PRIORITY_IDLE = THREAD_PRIORITY_HIGHEST = 0

POSIX_NICE = -5


def set_higher_priority():
    try:
        p = psutil.Process(os.getpid())
        if IS_WINDOWS:
            p.nice(psutil.ABOVE_NORMAL_PRIORITY_CLASS)
        else:
            p.nice(POSIX_NICE)  # Needs privileges, usually fails for normal users
        logger.debug("Main process priority raised.")
    except (psutil.Error, OSError) as e:
        logger.warning(f"Failed to set higher priority: {e}")


def set_current_thread_priority(priority_level):
    """Set the priority of the current thread (Windows only)."""
    if not HAS_WIN32:
        return

    thread_name = threading.current_thread().name
    try:
        thread_handle = ctypes.windll.kernel32.GetCurrentThread()
        success = win32process.SetThreadPriority(thread_handle, priority_level)
        if not success:
            last_error = ctypes.windll.kernel32.GetLastError()
            if last_error != 0:
                raise ctypes.WinError(last_error)
        logger.debug(f"Set priority of thread '{thread_name}' to {priority_level}.")
    except Exception as e:
        logger.warning(f"Failed to set priority for thread '{thread_name}': {e}")
