"""
Input adapters.

Keyboard events, on-screen keypad buttons and touch gestures all end up
as the same logical Key. Nothing here knows about buffers or evaluation.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict

from splitcalc.config import get_settings
from splitcalc.models.calculator import Key

_KEYBOARD_ALIASES = {
    "Enter": Key.EQUALS,
    "=": Key.EQUALS,
    "Backspace": Key.DELETE,
    "Delete": Key.DELETE,
    "Escape": Key.CLEAR,
    "c": Key.CLEAR,
    "C": Key.CLEAR,
    "x": Key.MULTIPLY,
    "X": Key.MULTIPLY,
    "×": Key.MULTIPLY,
    "÷": Key.DIVIDE,
    ",": Key.POINT,
}

_BUTTON_ALIASES = {
    "⌫": Key.DELETE,
    "DEL": Key.DELETE,
    "C": Key.CLEAR,
    "×": Key.MULTIPLY,
    "÷": Key.DIVIDE,
    "−": Key.SUBTRACT,
}


def key_from_keyboard(name: str) -> Optional[Key]:
    """
    Map a keyboard event key name to a logical key.

    Returns None for keys the calculator does not use (Shift, Tab, ...).
    """
    if name in _KEYBOARD_ALIASES:
        return _KEYBOARD_ALIASES[name]
    try:
        return Key(name)
    except ValueError:
        return None


def key_from_button(label) -> Optional[Key]:
    """Map a keypad button label (digits may arrive as ints) to a logical key."""
    label = str(label)
    if label in _BUTTON_ALIASES:
        return _BUTTON_ALIASES[label]
    try:
        return Key(label)
    except ValueError:
        return None


class TouchPoint(BaseModel):
    """A pointer position in CSS pixels."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class TapClassifier:
    """
    Tells a tap on a keypad button apart from a drag that scrolls the page.

    A touch that ends further than threshold_px from where it started is a
    scroll and produces no key.
    """

    def __init__(self, threshold_px: Optional[float] = None):
        if threshold_px is None:
            threshold_px = get_settings().calculator.touch_threshold_px
        self.threshold_px = threshold_px
        self._start: Optional[TouchPoint] = None
        self._label = None

    def touch_start(self, label, x: float, y: float) -> None:
        self._start = TouchPoint(x=x, y=y)
        self._label = label

    def touch_end(self, x: float, y: float) -> Optional[Key]:
        """Finish the gesture; returns the key for a tap, None for a scroll."""
        if self._start is None:
            return None
        start, label = self._start, self._label
        self._start, self._label = None, None
        if math.hypot(x - start.x, y - start.y) > self.threshold_px:
            return None
        return key_from_button(label)

    def touch_cancel(self) -> None:
        self._start, self._label = None, None
