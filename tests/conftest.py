"""Shared fakes for engine tests."""

from __future__ import annotations

import queue
import threading

import pytest
from rich.text import Text

from keybubbles.keys import KeyPress

_CLOSED = object()


class FakeKeys:
    """In-memory key source: tests push presses, the input loop pulls them."""

    def __init__(self, presses: list[KeyPress] | None = None) -> None:
        self._queue: queue.Queue[object] = queue.Queue()
        self.closed = False
        for press in presses or []:
            self.push(press)

    def push(self, press: KeyPress) -> None:
        self._queue.put(press)

    def get(self) -> KeyPress | None:
        item = self._queue.get(timeout=5.0)
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def close(self) -> None:
        self.closed = True
        self._queue.put(_CLOSED)


class RecordingSurface:
    """Surface that keeps every presented frame."""

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.width = width
        self.height = height
        self.frames: list[tuple[int, Text, int]] = []
        self.presented = threading.Event()

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def present(self, top: int, keyboard: Text, bottom: int) -> None:
        self.frames.append((top, keyboard, bottom))
        self.presented.set()


class RecordingTonePlayer:
    def __init__(self) -> None:
        self.played: list[tuple[float, int]] = []

    def play(self, frequency: float, duration_ms: int) -> None:
        self.played.append((frequency, duration_ms))


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def keys() -> FakeKeys:
    return FakeKeys()
