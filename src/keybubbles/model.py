"""Shared animation state: bubbles, layout, geometry and the run flag.

The model is not thread-safe on its own.  :class:`keybubbles.app.App` holds
one lock around every call to :meth:`Model.update` and :meth:`Model.draw`.
"""

from __future__ import annotations

import colorsys
import enum
import logging
import random
from dataclasses import dataclass
from typing import Protocol, Union

from rich.text import Text

from keybubbles.bubble import Bubble, Circle, Color
from keybubbles.canvas import Canvas
from keybubbles.layout import Geometry, KeyboardLayout

logger = logging.getLogger(__name__)

MIN_BUBBLE_SIZE = 0.0

COLOR_POLICIES = ("random", "per_key")


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Quit:
    pass


Message = Union[KeyPressed, Quit]


class RunningState(enum.Enum):
    RUNNING = "running"
    QUITTING = "quitting"


class Surface(Protocol):
    """Anything the model can draw a frame onto."""

    @property
    def size(self) -> tuple[int, int]: ...

    def present(self, top: int, keyboard: Text, bottom: int) -> None: ...


class Model:
    """Owns the live bubbles and applies key events to them.

    Parameters
    ----------
    width, height:
        Terminal size in cells, read once at startup.  Resizing the terminal
        afterwards is not tracked.
    max_size:
        Radius past which a bubble finishes.
    speed:
        Radius added per render tick.
    color_policy:
        ``"random"`` for a fresh random colour on every press, ``"per_key"``
        for a fixed colour per key.
    """

    def __init__(
        self,
        width: int,
        height: int,
        max_size: float,
        speed: float,
        layout: KeyboardLayout | None = None,
        color_policy: str = "random",
        rng: random.Random | None = None,
    ) -> None:
        if color_policy not in COLOR_POLICIES:
            raise ValueError(
                f"Unknown colour policy {color_policy!r}; expected one of {COLOR_POLICIES}"
            )

        self.state = RunningState.RUNNING
        self.bubbles: list[Bubble] = []
        self.min_bubble_size = MIN_BUBBLE_SIZE
        self.max_bubble_size = max_size
        self.speed = speed
        self.layout = layout or KeyboardLayout()
        self.geometry = Geometry.from_terminal(width, height, self.layout)
        self.color_policy = color_policy
        # Unseeded: draws from OS entropy so every run and press differs.
        self._rng = rng or random.Random()

        logger.debug(
            "Model ready: terminal=%dx%d button=%s keyboard_height=%d empty=%d",
            width,
            height,
            self.geometry.button_size,
            self.geometry.keyboard_height,
            self.geometry.empty_space_height,
        )

    @property
    def running(self) -> bool:
        return self.state is RunningState.RUNNING

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, message: Message) -> None:
        """Apply one event.  Never raises and never renders."""
        if isinstance(message, Quit):
            if self.state is not RunningState.QUITTING:
                logger.info("Quit requested")
            self.state = RunningState.QUITTING
        elif isinstance(message, KeyPressed):
            self._add_bubble(message.key)

    def _add_bubble(self, key: str) -> None:
        bubble = self._create_bubble(key)
        if bubble is None:
            return
        self.bubbles.append(bubble)
        logger.debug("Key %r -> %r", key, bubble)

    def _create_bubble(self, key: str) -> Bubble | None:
        position = self.position_for(key)
        if position is None:
            return None
        x, y = position
        return Bubble(
            x,
            y,
            self._color_for(key),
            self.min_bubble_size,
            self.max_bubble_size,
            self.speed,
        )

    def position_for(self, key: str) -> tuple[float, float] | None:
        """Canvas coordinates of the centre of *key*'s button, if it has one."""
        cell = self.layout.position_of(key)
        if cell is None:
            return None
        row, column = cell
        return self.geometry.cell_center(row, column)

    def _color_for(self, key: str) -> Color:
        if self.color_policy == "per_key":
            return self._key_color(key)
        rng = self._rng
        return rng.randrange(256), rng.randrange(256), rng.randrange(256)

    def _key_color(self, key: str) -> Color:
        row, column = self.layout.position_of(key)  # type: ignore[misc]
        rows, columns = self.layout.extent
        hue = (row * columns + column) / (rows * columns)
        r, g, b = colorsys.hsv_to_rgb(hue, 0.75, 1.0)
        return round(r * 255), round(g * 255), round(b * 255)

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    def draw(self, surface: Surface) -> list[Circle]:
        """Advance every bubble one tick, drop finished ones and paint a frame.

        Returns the circles painted on this frame.
        """
        width, height = surface.size
        top, keyboard, bottom = self.geometry.bands(height)

        circles = self.tick()

        canvas = Canvas(
            width,
            keyboard,
            x_bounds=(0.0, float(width)),
            y_bounds=(0.0, float(keyboard)),
        )
        canvas.paint(circles)
        surface.present(top, canvas.render(), bottom)
        return circles

    def tick(self) -> list[Circle]:
        """Advance all bubbles, then collect the finished ones.

        Collection runs after sampling so a bubble's final frame is still
        returned.
        """
        circles = [
            circle
            for circle in (bubble.advance() for bubble in self.bubbles)
            if circle is not None
        ]
        self._clean_finished_bubbles()
        return circles

    def _clean_finished_bubbles(self) -> None:
        self.bubbles = [bubble for bubble in self.bubbles if not bubble.finished]
