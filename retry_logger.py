"""
Smart Retry Logger - throttles log lines from endless reconnect loops.

The HID listener retries forever while the gamepad is unplugged or busy.
Retries keep their normal pace, but the log only gets a line at absolute
milestones measured from the first failure, so a pad left unplugged overnight
does not flood the log file.
"""

import threading
import time
from typing import Callable, Dict, List, Optional

# Absolute milestones (seconds since first failure). If a value is not past
# the previous milestone it is added to it instead. Last value repeats.
# Example: [2, 10, 60, 600, 3600] logs at t=2s, 10s, 1min, 10min, 1hr, 2hr...
RETRY_LOG_INTERVALS = [2, 10, 60, 600, 3600]

# Tracker keys used by the hotkey listener
KEY_DEVICE_FIND = "hid_find"
KEY_DEVICE_OPEN = "hid_open"
KEY_DEVICE_READ = "hid_read"


class SmartRetryLogger:
    """
    Decides whether a retry attempt deserves a log line.

    Each key tracks one retry context independently. Call reset(key) when the
    operation finally succeeds.
    """

    def __init__(self, intervals: Optional[List[float]] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            intervals: Milestone list (see module docstring). Defaults to RETRY_LOG_INTERVALS.
            clock: Time source, monotonic seconds
        """
        self.intervals = intervals or RETRY_LOG_INTERVALS
        self._clock = clock
        self._trackers: Dict[str, dict] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _next_milestone(prev: float, interval: float) -> float:
        return interval if interval > prev else prev + interval

    def should_log(self, key: str) -> bool:
        """
        Count one retry for ``key`` and say whether to log it.

        The first failure is always logged.
        """
        now = self._clock()

        with self._lock:
            tracker = self._trackers.get(key)
            if tracker is None:
                self._trackers[key] = {
                    'first_event_time': now,
                    'next_log_time': self.intervals[0],
                    'interval_index': 0,
                    'retry_count': 1,
                }
                return True

            tracker['retry_count'] += 1
            if now - tracker['first_event_time'] < tracker['next_log_time']:
                return False

            tracker['interval_index'] += 1
            idx = min(tracker['interval_index'], len(self.intervals) - 1)
            tracker['next_log_time'] = self._next_milestone(tracker['next_log_time'], self.intervals[idx])
            return True

    def get_retry_count(self, key: str) -> int:
        with self._lock:
            tracker = self._trackers.get(key)
            return tracker['retry_count'] if tracker else 0

    def reset(self, key: str):
        """Forget a retry context (call when the operation succeeds)."""
        with self._lock:
            self._trackers.pop(key, None)

    def format_retry_info(self, key: str) -> str:
        """Returns "(retry #5)" or "(retry #100, next log at ~10m)"."""
        with self._lock:
            tracker = self._trackers.get(key)
            if tracker is None:
                return ""
            count = tracker['retry_count']
            if tracker['interval_index'] == 0:
                return f"(retry #{count})"
            return f"(retry #{count}, next log at ~{format_duration(tracker['next_log_time'])})"


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{int(seconds)}s"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m"
    elif seconds < 86400:
        return f"{int(seconds // 3600)}h"
    return f"{int(seconds // 86400)}d"
