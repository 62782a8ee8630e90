"""
Configuration and Argument Parsing for the gamepad hotkey agent.

Handles CLI argument parsing and validation.
"""

import argparse
import os
from typing import Optional, Tuple

from hid_constants import KNOWN_BUTTON_CODES
from logging_setup import LOG_LEVELS

UNBOUND = "none"


def validate_device(value: str) -> Tuple[int, int]:
    """
    Validate and parse VID/PID device identifier.

    Args:
        value: Comma-separated hex values (e.g., "0x057E,0x2009")

    Returns:
        Tuple of (vid, pid)

    Raises:
        argparse.ArgumentTypeError: If validation fails
    """
    try:
        vid, pid = map(lambda x: int(x, 16), value.split(","))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid VID/PID format: {e}")
    if not (0x0000 <= vid <= 0xFFFF and 0x0000 <= pid <= 0xFFFF):
        raise argparse.ArgumentTypeError("VID and PID must be valid 16-bit hexadecimal values.")
    return vid, pid


def validate_button_code(value: str) -> Optional[str]:
    """
    Validate a logical button code such as BTN_A or DPAD_UP.

    Returns:
        The upper-cased code, or None for "none" (unbound)

    Raises:
        argparse.ArgumentTypeError: If the code is not in any report layout
    """
    if value.strip().lower() == UNBOUND:
        return None
    code = value.strip().upper()
    if code not in KNOWN_BUTTON_CODES:
        known = ", ".join(sorted(KNOWN_BUTTON_CODES))
        raise argparse.ArgumentTypeError(f"Unknown button code '{value}'. Known codes: {known}")
    return code


def validate_read_timeout(value: str) -> Optional[float]:
    """Seconds to wait for a report before reacquiring; 0 means wait forever."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Read timeout must be a number of seconds, got '{value}'")
    if seconds < 0:
        raise argparse.ArgumentTypeError("Read timeout must be >= 0.")
    return seconds or None


def build_parser(script_file: str = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="pad2hotkey - gamepad buttons as global hotkeys.")

    if script_file:
        default_log_file = os.path.splitext(os.path.basename(script_file))[0] + ".log"
    else:
        default_log_file = "pad2hotkey.log"

    parser.add_argument("--log_level", choices=LOG_LEVELS, default="INFO",
                        help="Set logging level. Default is INFO.")

    parser.add_argument("--log_file_name", type=str, default=default_log_file,
                        help=f"Name of the log file. Default is '{default_log_file}'.")

    parser.add_argument("--device", type=validate_device, default=None,
                        help="VID and PID of the gamepad, in the format 'VID,PID' (hex). "
                             "If not set, an attached Pro Controller or Xbox pad is detected.")

    parser.add_argument("--toggle_button", type=validate_button_code, default="BTN_SELECT",
                        help="Button that triggers the toggle action on release, or 'none'. Default is BTN_SELECT.")

    parser.add_argument("--menu_button", type=validate_button_code, default=None,
                        help="Button that triggers the menu action on release, or 'none'. Default is none.")

    parser.add_argument("--toggle_command", type=str, default=None,
                        help="Shell command run when the toggle hotkey fires.")

    parser.add_argument("--menu_command", type=str, default=None,
                        help="Shell command run when the menu hotkey fires.")

    parser.add_argument("--read_timeout", type=validate_read_timeout, default=None,
                        help="Seconds without a report before the device is reopened. Default waits forever.")

    parser.add_argument("--start_paused", action="store_true", default=False,
                        help="Start with hotkeys paused (resume with SIGUSR2).")

    parser.add_argument("--list_devices", action="store_true", default=False,
                        help="List attached HID devices and exit.")
    return parser


def parse_arguments(script_file: str = None, argv=None):
    """
    Parse command-line arguments.

    Args:
        script_file: Path to the main script file (for default log file name)
        argv: Argument list, defaults to sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    args = build_parser(script_file).parse_args(argv)
    args.vid, args.pid = args.device if args.device else (None, None)
    return args
