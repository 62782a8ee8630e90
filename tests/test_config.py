import argparse

import pytest

from config import parse_arguments, validate_button_code, validate_device, validate_read_timeout


def test_validate_device():
    assert validate_device("0x057E,0x2009") == (0x057E, 0x2009)
    assert validate_device("45e,28e") == (0x045E, 0x028E)


@pytest.mark.parametrize("value", ["057E", "zz,01", "0x10000,0x01", "1,2,3"])
def test_validate_device_rejects(value):
    with pytest.raises(argparse.ArgumentTypeError):
        validate_device(value)


def test_validate_button_code():
    assert validate_button_code("btn_a") == "BTN_A"
    assert validate_button_code(" DPAD_UP ") == "DPAD_UP"
    assert validate_button_code("None") is None
    with pytest.raises(argparse.ArgumentTypeError):
        validate_button_code("BTN_TURBO")


def test_validate_read_timeout():
    assert validate_read_timeout("2.5") == 2.5
    assert validate_read_timeout("0") is None
    for value in ("-1", "soon"):
        with pytest.raises(argparse.ArgumentTypeError):
            validate_read_timeout(value)


def test_defaults():
    args = parse_arguments(argv=[])
    assert (args.vid, args.pid) == (None, None)
    assert args.toggle_button == "BTN_SELECT"
    assert args.menu_button is None
    assert args.read_timeout is None
    assert args.log_level == "INFO"
    assert args.log_file_name == "pad2hotkey.log"
    assert not args.start_paused and not args.list_devices


def test_full_command_line():
    args = parse_arguments("/opt/tools/hotkeys.py", [
        "--device", "0x057E,0x2009", "--toggle_button", "BTN_A", "--menu_button", "btn_mode",
        "--toggle_command", "echo toggle", "--read_timeout", "5", "--start_paused", "--log_level", "DEBUG",
    ])
    assert (args.vid, args.pid) == (0x057E, 0x2009)
    assert args.toggle_button == "BTN_A"
    assert args.menu_button == "BTN_MODE"
    assert args.toggle_command == "echo toggle"
    assert args.read_timeout == 5.0
    assert args.start_paused
    assert args.log_file_name == "hotkeys.log"


def test_invalid_button_exits():
    with pytest.raises(SystemExit):
        parse_arguments(argv=["--toggle_button", "BTN_TURBO"])
