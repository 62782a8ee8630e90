"""
HID Constants and Report Layouts for supported gamepads.

Contains the known controller identifiers, the controller profiles they
resolve to, and the byte/bit layout of each input report format keyed by
(profile, report id). The offsets were captured from real devices and are
fixed protocol constants.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


# ==============================================================================
# 1) KNOWN DEVICES - VID/PID of supported controllers
# ==============================================================================

XBOX_VID = 0x045E
XBOX_PID = 0x028E  # 360 Controller / virtual XInput

NINTENDO_VID = 0x057E
PRO_CONTROLLER_PID_USB = 0x2009

MAX_INPUT_REPORT_LENGTH = 64  # Full-speed USB interrupt packet


class ControllerProfile(Enum):
    UNKNOWN = "Unknown"
    XBOX = "Xbox"
    PRO_CONTROLLER = "ProController"


KNOWN_DEVICES: Dict[Tuple[int, int], ControllerProfile] = {
    (XBOX_VID, XBOX_PID): ControllerProfile.XBOX,
    (NINTENDO_VID, PRO_CONTROLLER_PID_USB): ControllerProfile.PRO_CONTROLLER,
}


def determine_profile(vendor_id: int, product_id: int) -> ControllerProfile:
    """Resolve a device's VID/PID to its decode profile."""
    return KNOWN_DEVICES.get((vendor_id, product_id), ControllerProfile.UNKNOWN)


# ==============================================================================
# 2) REPORT LAYOUTS - How each report format packs buttons
# ==============================================================================

@dataclass(frozen=True)
class ReportLayout:
    label: str                                  # Human-readable format name
    buttons: Dict[str, Tuple[int, int]]         # code -> (byte index, bit mask)
    dpad_index: Optional[int] = None            # Hat byte, if the D-pad is a hat
    dpad_values: Dict[str, int] = field(default_factory=dict)  # code -> hat value
    dpad_neutral: Optional[int] = None


# Xbox 360 / virtual XInput. Report id is not checked for this profile.
XBOX_LAYOUT = ReportLayout(
    label="Xbox",
    buttons={
        "DPAD_UP":    (2, 0x01), "DPAD_DOWN":  (2, 0x02),
        "DPAD_LEFT":  (2, 0x04), "DPAD_RIGHT": (2, 0x08),
        "BTN_START":  (2, 0x10), "BTN_SELECT": (2, 0x20),
        "BTN_THUMBL": (2, 0x40), "BTN_THUMBR": (2, 0x80),
        "BTN_TL":     (3, 0x01), "BTN_TR":     (3, 0x02),
        "BTN_MODE":   (3, 0x04),
        "BTN_SOUTH":  (3, 0x10),  # A
        "BTN_EAST":   (3, 0x20),  # B
        "BTN_WEST":   (3, 0x40),  # X
        "BTN_NORTH":  (3, 0x80),  # Y
    },
)

# Pro Controller, simple HID mode (report 0x3F). D-pad is a hat, not bits.
PRO_REPORT_SIMPLE = 0x3F
PRO_SIMPLE_LAYOUT = ReportLayout(
    label="ProController 0x3F",
    buttons={
        # Byte 1
        "BTN_B":  (1, 0x01), "BTN_A":  (1, 0x02), "BTN_Y":  (1, 0x04), "BTN_X":  (1, 0x08),
        "BTN_TL": (1, 0x10), "BTN_TR": (1, 0x20), "BTN_ZL": (1, 0x40), "BTN_ZR": (1, 0x80),
        # Byte 2
        "BTN_SELECT":  (2, 0x01),  # Minus
        "BTN_START":   (2, 0x02),  # Plus
        "BTN_THUMBL":  (2, 0x04),  # L3
        "BTN_THUMBR":  (2, 0x08),  # R3
        "BTN_MODE":    (2, 0x10),  # Home
        "BTN_CAPTURE": (2, 0x20),
    },
    dpad_index=3,
    dpad_values={
        "DPAD_UP": 0x00, "DPAD_UP_RIGHT": 0x01, "DPAD_RIGHT": 0x02, "DPAD_DOWN_RIGHT": 0x03,
        "DPAD_DOWN": 0x04, "DPAD_DOWN_LEFT": 0x05, "DPAD_LEFT": 0x06, "DPAD_UP_LEFT": 0x07,
    },
    dpad_neutral=0x08,
)

# Pro Controller, full report mode (report 0x30). D-pad is a bitmask here.
PRO_REPORT_FULL = 0x30
PRO_FULL_LAYOUT = ReportLayout(
    label="ProController 0x30",
    buttons={
        # Byte 3 - right side
        "BTN_Y":  (3, 0x01), "BTN_X":  (3, 0x02), "BTN_B":  (3, 0x04), "BTN_A":  (3, 0x08),
        "BTN_TR": (3, 0x40), "BTN_ZR": (3, 0x80),
        # Byte 4 - shared
        "BTN_SELECT":  (4, 0x01),  # Minus
        "BTN_START":   (4, 0x02),  # Plus
        "BTN_THUMBR":  (4, 0x04),  # R3
        "BTN_THUMBL":  (4, 0x08),  # L3
        "BTN_MODE":    (4, 0x10),  # Home
        "BTN_CAPTURE": (4, 0x20),
        # Byte 5 - left side
        "DPAD_DOWN":  (5, 0x01), "DPAD_UP":   (5, 0x02),
        "DPAD_RIGHT": (5, 0x04), "DPAD_LEFT": (5, 0x08),
        "BTN_TL": (5, 0x40), "BTN_ZL": (5, 0x80),
    },
)

ANY_REPORT = None

# (profile, report id) -> layout. ANY_REPORT matches every report id.
REPORT_LAYOUTS: Dict[Tuple[ControllerProfile, Optional[int]], ReportLayout] = {
    (ControllerProfile.XBOX, ANY_REPORT): XBOX_LAYOUT,
    (ControllerProfile.PRO_CONTROLLER, PRO_REPORT_SIMPLE): PRO_SIMPLE_LAYOUT,
    (ControllerProfile.PRO_CONTROLLER, PRO_REPORT_FULL): PRO_FULL_LAYOUT,
}


def layout_for(profile: ControllerProfile, report_id: int) -> Optional[ReportLayout]:
    """Return the layout for a report, or None if the format is unknown."""
    layout = REPORT_LAYOUTS.get((profile, report_id))
    if layout is None:
        layout = REPORT_LAYOUTS.get((profile, ANY_REPORT))
    return layout


# All logical button codes any layout understands (for config validation)
KNOWN_BUTTON_CODES: FrozenSet[str] = frozenset(
    code
    for layout in REPORT_LAYOUTS.values()
    for code in list(layout.buttons) + list(layout.dpad_values)
)
