"""
Hotkey domain types.

TargetDevice is the immutable configuration a listener is built from.
HotkeyAction names the two global actions a gamepad can trigger; the host
decides what they do. QueuedAction is what travels through the action queue.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class HotkeyAction(Enum):
    TOGGLE = "Toggle"
    MENU = "Menu"


@dataclass(frozen=True)
class TargetDevice:
    """Gamepad to listen to and the logical buttons bound to each action."""
    vendor_id: int
    product_id: int
    toggle_button: Optional[str] = None
    menu_button: Optional[str] = None

    def __post_init__(self):
        for name in ("vendor_id", "product_id"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"{name} must be an unsigned 16-bit value, got {value!r}")

    def button_for(self, action: HotkeyAction) -> Optional[str]:
        if action == HotkeyAction.TOGGLE:
            return self.toggle_button
        return self.menu_button

    def __str__(self):
        return f"VID={self.vendor_id:04X} PID={self.product_id:04X}"


@dataclass
class QueuedAction:
    """
    Wrapper for callbacks in the action queue, carrying a timestamp for stale
    event filtering.
    """
    callback: Callable[[], None]
    timestamp: float
