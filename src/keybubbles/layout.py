"""Keyboard layout and screen geometry.

The layout maps a key to a logical ``(row, column)`` cell on a fixed QWERTY
grid.  Row 0 is the lowest physical row, so it is painted at the bottom of
the keyboard band (the canvas y axis grows upwards).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

# Lowest physical row first.
QWERTY_ROWS: tuple[str, ...] = (
    "zxcvbnm",
    "asdfghjkl",
    "qwertyuiop",
    "1234567890",
)


class KeyboardLayout:
    """Immutable key -> (row, column) mapping built from literal key rows."""

    def __init__(self, rows: Sequence[str] = QWERTY_ROWS) -> None:
        if not rows or not any(rows):
            raise ValueError("Keyboard layout needs at least one key")

        positions: dict[str, tuple[int, int]] = {}
        for row_index, row in enumerate(rows):
            for column_index, key in enumerate(row):
                if key in positions:
                    raise ValueError(f"Key {key!r} appears twice in the layout")
                positions[key] = (row_index, column_index)
        self._positions = positions

    def position_of(self, key: str) -> tuple[int, int] | None:
        """Return the grid cell of *key*, or ``None`` if the key is not laid out."""
        return self._positions.get(key)

    @property
    def extent(self) -> tuple[int, int]:
        """``(row_count, column_count)`` of the grid."""
        rows = max(row for row, _ in self._positions.values()) + 1
        columns = max(column for _, column in self._positions.values()) + 1
        return rows, columns

    def keys(self) -> list[str]:
        return list(self._positions)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __len__(self) -> int:
        return len(self._positions)


@dataclass(frozen=True)
class Geometry:
    """Integer screen geometry derived once from the terminal size.

    ``empty_space_height`` is the whole remainder left over by the keyboard
    band; it is not halved, and is requested by both the band above and the
    band below the keyboard.  :meth:`bands` clamps the requests to the
    drawable area.
    """

    button_width: int
    button_height: int
    keyboard_height: int
    empty_space_height: int

    @classmethod
    def from_terminal(cls, width: int, height: int, layout: KeyboardLayout) -> Geometry:
        rows, columns = layout.extent
        button_width = width // columns
        button_height = height // rows
        keyboard_height = rows * button_height
        return cls(
            button_width=button_width,
            button_height=button_height,
            keyboard_height=keyboard_height,
            empty_space_height=height - keyboard_height,
        )

    @property
    def button_size(self) -> tuple[int, int]:
        return self.button_width, self.button_height

    def bands(self, area_height: int) -> tuple[int, int, int]:
        """Split *area_height* rows into (top, keyboard, bottom) band heights."""
        remaining = max(area_height, 0)
        top = min(self.empty_space_height, remaining)
        remaining -= top
        keyboard = min(self.keyboard_height, remaining)
        remaining -= keyboard
        bottom = min(self.empty_space_height, remaining)
        return top, keyboard, bottom

    def cell_center(self, row: int, column: int) -> tuple[float, float]:
        """Canvas coordinates of the centre of grid cell (*row*, *column*)."""
        x = column * self.button_width + self.button_width / 2.0
        y = row * self.button_height + self.button_height / 2.0
        return x, y
