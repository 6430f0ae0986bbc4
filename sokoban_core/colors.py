from __future__ import annotations

from enum import Enum
from typing import Dict


class Color(Enum):
    """Colors shared by boxes and targets."""
    ORANGE = "orange"
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    GREY = "grey"

    @property
    def code(self) -> str:
        """One-letter code used in level text (lowercase)."""
        return _CODES[self]

    @classmethod
    def from_code(cls, code: str) -> "Color":
        for color, c in _CODES.items():
            if c == code.lower():
                return color
        raise ValueError(f"unknown color code: {code!r}")

    @classmethod
    def parse(cls, text: str) -> "Color":
        """Accepts a color name ('blue') or its one-letter code ('b')."""
        t = text.strip().lower()
        for color in cls:
            if color.value == t:
                return color
        return cls.from_code(t)


_CODES: Dict[Color, str] = {
    Color.ORANGE: "o",
    Color.RED: "r",
    Color.BLUE: "b",
    Color.GREEN: "g",
    Color.GREY: "y",
}

_TARGET_FOR_BOX: Dict[Color, Color] = {
    Color.ORANGE: Color.ORANGE,
    Color.RED: Color.RED,
    Color.BLUE: Color.BLUE,
    Color.GREEN: Color.GREEN,
    Color.GREY: Color.GREY,
}

assert set(_CODES) == set(Color), "every color needs a level code"
assert set(_TARGET_FOR_BOX) == set(Color), "box->target mapping must be total"


def box_color_to_target_color(box_color: Color) -> Color:
    """Returns the target color that a box of the given color is scored on."""
    return _TARGET_FOR_BOX[box_color]
