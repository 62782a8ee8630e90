"""Hotkey Core - domain types, errors and action dispatch for gamepad hotkeys."""
from .actions import (
    HotkeyAction,
    TargetDevice,
    QueuedAction,
)
from .exceptions import (
    HotkeyServiceError,
    DeviceOpenError,
    ReportReadTimeout,
    ReadCancelled,
)
from .dispatcher import ActionDispatcher, ActionQueue, ExecutionContext

__all__ = [
    'HotkeyAction',
    'TargetDevice',
    'QueuedAction',
    'HotkeyServiceError',
    'DeviceOpenError',
    'ReportReadTimeout',
    'ReadCancelled',
    'ActionDispatcher',
    'ActionQueue',
    'ExecutionContext',
]
