import pytest

from hid_constants import (
    ControllerProfile, KNOWN_BUTTON_CODES, PRO_FULL_LAYOUT, PRO_SIMPLE_LAYOUT, XBOX_LAYOUT,
    determine_profile, layout_for,
)
from report_decoder import format_report, is_button_pressed

PRO = ControllerProfile.PRO_CONTROLLER
XBOX = ControllerProfile.XBOX


def make_report(report_id, length=12, **bytes_at):
    report = [0] * length
    report[0] = report_id
    for index, value in bytes_at.items():
        report[int(index.lstrip("b"))] = value
    return report


def test_determine_profile():
    assert determine_profile(0x057E, 0x2009) == PRO
    assert determine_profile(0x045E, 0x028E) == XBOX
    assert determine_profile(0x057E, 0x2006) == ControllerProfile.UNKNOWN


def test_layout_selected_by_report_id():
    assert layout_for(PRO, 0x3F) is PRO_SIMPLE_LAYOUT
    assert layout_for(PRO, 0x30) is PRO_FULL_LAYOUT
    assert layout_for(PRO, 0x21) is None
    # Xbox reports are decoded regardless of the leading byte
    assert layout_for(XBOX, 0x00) is XBOX_LAYOUT
    assert layout_for(XBOX, 0x14) is XBOX_LAYOUT


@pytest.mark.parametrize("layout,profile,report_id", [
    (PRO_SIMPLE_LAYOUT, PRO, 0x3F),
    (PRO_FULL_LAYOUT, PRO, 0x30),
    (XBOX_LAYOUT, XBOX, 0x00),
])
def test_bit_mask_decides_pressed(layout, profile, report_id):
    for code, (byte_index, mask) in layout.buttons.items():
        for value in range(256):
            report = make_report(report_id)
            report[byte_index] = value
            assert is_button_pressed(report, code, profile) == bool(value & mask), (code, value)


def test_pro_full_report_button_a():
    assert is_button_pressed(make_report(0x30, b3=0x08), "BTN_A", PRO)
    assert not is_button_pressed(make_report(0x30, b3=0x00), "BTN_A", PRO)
    assert not is_button_pressed(make_report(0x30, b3=0xF7), "BTN_A", PRO)


def test_same_code_uses_different_offsets_per_report_format():
    # BTN_A is byte 1/0x02 in the simple report but byte 3/0x08 in the full report
    assert is_button_pressed(make_report(0x3F, b1=0x02), "BTN_A", PRO)
    assert not is_button_pressed(make_report(0x30, b1=0x02), "BTN_A", PRO)


def test_dpad_hat_is_exact_value_match():
    report = make_report(0x3F, b3=0x00)
    assert is_button_pressed(report, "DPAD_UP", PRO)
    for code in PRO_SIMPLE_LAYOUT.dpad_values:
        if code != "DPAD_UP":
            assert not is_button_pressed(report, code, PRO), code


def test_dpad_neutral_presses_nothing():
    report = make_report(0x3F, b3=PRO_SIMPLE_LAYOUT.dpad_neutral)
    assert not any(is_button_pressed(report, code, PRO) for code in PRO_SIMPLE_LAYOUT.dpad_values)


def test_dpad_in_full_report_is_bitmask():
    report = make_report(0x30, b5=0x02 | 0x04)
    assert is_button_pressed(report, "DPAD_UP", PRO)
    assert is_button_pressed(report, "DPAD_RIGHT", PRO)
    assert not is_button_pressed(report, "DPAD_DOWN", PRO)
    assert not is_button_pressed(report, "DPAD_UP_RIGHT", PRO)


def test_unbound_unknown_and_empty_read_as_released():
    report = make_report(0x3F, b1=0xFF)
    assert not is_button_pressed(report, None, PRO)
    assert not is_button_pressed(report, "", PRO)
    assert not is_button_pressed(report, "BTN_A", ControllerProfile.UNKNOWN)
    assert not is_button_pressed([], "BTN_A", PRO)
    assert not is_button_pressed(report, "BTN_NOT_A_BUTTON", PRO)


def test_out_of_range_index_is_not_an_error():
    assert not is_button_pressed([0x3F, 0xFF], "BTN_SELECT", PRO)
    assert not is_button_pressed([0x3F, 0xFF, 0xFF], "DPAD_UP", PRO)
    assert not is_button_pressed([0x00, 0x00, 0xFF], "BTN_SOUTH", XBOX)


def test_unknown_report_id_for_pro_controller():
    assert not is_button_pressed(make_report(0x21, b1=0xFF, b3=0xFF), "BTN_A", PRO)


def test_known_button_codes_cover_all_layouts():
    assert {"BTN_A", "BTN_SOUTH", "DPAD_UP_LEFT", "BTN_CAPTURE"} <= KNOWN_BUTTON_CODES


def test_format_report():
    assert format_report(bytes([0x30, 0x0A, 0xFF])) == "30 0A FF"
