"""
Button State Tracker.

Remembers whether each hotkey button was held in the previous report and
reports falling edges, so an action fires once per press-release cycle no
matter how many reports arrive while the button is held.
"""

from typing import NamedTuple


class EdgeEvents(NamedTuple):
    toggle_released: bool
    menu_released: bool


class ButtonStateTracker:
    """
    Edge detector for the toggle and menu buttons.

    Only the listener thread calls update()/reset(); it is not locked.
    """

    def __init__(self):
        self.was_toggle_pressed = False
        self.was_menu_pressed = False

    def update(self, toggle_pressed: bool, menu_pressed: bool) -> EdgeEvents:
        """
        Record the current report's button states.

        Args:
            toggle_pressed: Toggle button held in this report
            menu_pressed: Menu button held in this report

        Returns:
            Which buttons went from pressed to released since the last report
        """
        events = EdgeEvents(
            toggle_released=self.was_toggle_pressed and not toggle_pressed,
            menu_released=self.was_menu_pressed and not menu_pressed,
        )
        self.was_toggle_pressed = toggle_pressed
        self.was_menu_pressed = menu_pressed
        return events

    def reset(self):
        self.was_toggle_pressed = False
        self.was_menu_pressed = False
