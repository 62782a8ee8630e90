"""
Report decoding - turns a raw HID input report into button states.
"""

from typing import Optional, Sequence

from hid_constants import ControllerProfile, layout_for


def is_button_pressed(report: Sequence[int], button_code: Optional[str],
                      profile: ControllerProfile) -> bool:
    """
    Check whether a logical button is held in one input report.

    Args:
        report: Raw report bytes; report[0] is the report id
        button_code: Logical code such as "BTN_A" or "DPAD_UP" (None/"" = unbound)
        profile: Profile of the device the report came from

    Returns:
        True if the button is pressed. Unknown profiles, unknown report
        formats, unbound codes and out-of-range offsets all read as False.
    """
    if not button_code or profile == ControllerProfile.UNKNOWN or not report:
        return False

    layout = layout_for(profile, report[0])
    if layout is None:
        return False

    # Hat-style D-pad: one byte enumerates 8 directions + neutral
    if button_code in layout.dpad_values:
        if layout.dpad_index < len(report):
            return report[layout.dpad_index] == layout.dpad_values[button_code]
        return False

    binding = layout.buttons.get(button_code)
    if binding is None:
        return False
    byte_index, bit_mask = binding
    if byte_index < len(report):
        return (report[byte_index] & bit_mask) != 0
    return False


def format_report(report: Sequence[int]) -> str:
    """Hex dump for debug logs."""
    return " ".join(f"{b:02X}" for b in report)
