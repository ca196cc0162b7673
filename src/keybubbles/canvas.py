"""Character-cell canvas that rasterizes circles into a rich ``Text``."""

from __future__ import annotations

import math
from typing import Iterable

from rich.style import Style
from rich.text import Text

from keybubbles.bubble import Circle, Color

DOT = "•"

# One sample per degree of circumference.
_CIRCLE_SAMPLES = 360


class Canvas:
    """Fixed-size grid of cells addressed in floating-point world coordinates.

    *x_bounds* and *y_bounds* give the world rectangle mapped onto the
    ``width`` x ``height`` cells.  The y axis grows upwards: ``y_bounds[0]``
    lands on the bottom row.  Points outside the bounds are dropped.
    """

    def __init__(
        self,
        width: int,
        height: int,
        x_bounds: tuple[float, float],
        y_bounds: tuple[float, float],
        marker: str = DOT,
    ) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)
        self.x_bounds = x_bounds
        self.y_bounds = y_bounds
        self.marker = marker
        self._cells: list[list[Color | None]] = [
            [None] * self.width for _ in range(self.height)
        ]

    def cell_for(self, x: float, y: float) -> tuple[int, int] | None:
        """Return ``(column, row)`` of the cell holding world point (*x*, *y*)."""
        left, right = self.x_bounds
        bottom, top = self.y_bounds
        if self.width == 0 or self.height == 0:
            return None
        if x < left or x > right or y < bottom or y > top:
            return None
        span_x = right - left
        span_y = top - bottom
        if span_x <= 0 or span_y <= 0:
            return None
        column = int((x - left) * (self.width - 1) / span_x)
        row = int((top - y) * (self.height - 1) / span_y)
        return column, row

    def point(self, x: float, y: float, color: Color) -> None:
        cell = self.cell_for(x, y)
        if cell is not None:
            column, row = cell
            self._cells[row][column] = color

    def circle(self, circle: Circle) -> None:
        for step in range(_CIRCLE_SAMPLES):
            angle = math.radians(step * 360 / _CIRCLE_SAMPLES)
            self.point(
                circle.x + circle.radius * math.cos(angle),
                circle.y + circle.radius * math.sin(angle),
                circle.color,
            )

    def paint(self, circles: Iterable[Circle]) -> None:
        for circle in circles:
            self.circle(circle)

    def color_at(self, column: int, row: int) -> Color | None:
        return self._cells[row][column]

    def painted_cells(self) -> int:
        return sum(1 for line in self._cells for cell in line if cell is not None)

    def render(self) -> Text:
        """Build ``height`` lines of ``width`` cells, one style run per colour."""
        text = Text(no_wrap=True, overflow="crop")
        for row_index, line in enumerate(self._cells):
            if row_index:
                text.append("\n")
            run_color: Color | None = None
            run_length = 0
            for cell in line:
                if cell == run_color:
                    run_length += 1
                    continue
                self._append_run(text, run_color, run_length)
                run_color, run_length = cell, 1
            self._append_run(text, run_color, run_length)
        return text

    def _append_run(self, text: Text, color: Color | None, length: int) -> None:
        if length == 0:
            return
        if color is None:
            text.append(" " * length)
        else:
            text.append(self.marker * length, style=Style(color=_rgb(color)))


def _rgb(color: Color) -> str:
    r, g, b = color
    return f"rgb({r},{g},{b})"
