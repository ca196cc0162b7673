"""A single growing bubble and its two-state lifecycle."""

from __future__ import annotations

import enum
from dataclasses import dataclass

Color = tuple[int, int, int]


@dataclass(frozen=True)
class Circle:
    """Snapshot of a bubble as painted on one frame."""

    x: float
    y: float
    radius: float
    color: Color


class BubbleState(enum.Enum):
    ANIMATING = "animating"
    FINISHED = "finished"


class Bubble:
    """Circle that grows by a fixed step on every tick until it passes *max_size*.

    The simulation is fixed-step: one call to :meth:`advance` is one tick, so
    the frame rate sets how fast a bubble grows on screen.  A *speed* of zero
    or less is accepted but the bubble never finishes.
    """

    def __init__(
        self,
        x: float,
        y: float,
        color: Color,
        min_size: float,
        max_size: float,
        speed: float,
    ) -> None:
        self.x = x
        self.y = y
        self.color = color
        self.radius = min_size
        self.max_size = max_size
        self.speed = speed
        self.state = BubbleState.ANIMATING

    @property
    def finished(self) -> bool:
        return self.state is BubbleState.FINISHED

    def advance(self) -> Circle | None:
        """Grow one tick and return the shape to paint.

        A finished bubble returns ``None`` and is left untouched.  The tick
        that pushes the radius past the maximum still returns its circle, so
        the last frame of the animation is painted.
        """
        if self.finished:
            return None

        self.radius += self.speed
        if self.radius > self.max_size:
            self.state = BubbleState.FINISHED

        return Circle(self.x, self.y, self.radius, self.color)

    def __repr__(self) -> str:
        return (
            f"<Bubble at ({self.x:.1f}, {self.y:.1f}) r={self.radius:.2f}"
            f"/{self.max_size:.2f} {self.state.value}>"
        )
