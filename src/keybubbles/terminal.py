"""Terminal render surface: a rich ``Live`` display on the alternate screen."""

from __future__ import annotations

import logging
import sys
import termios

from rich.console import Console
from rich.live import Live
from rich.text import Text

logger = logging.getLogger(__name__)


class TerminalSurface:
    """Full-screen drawing target for :meth:`keybubbles.model.Model.draw`.

    While entered, terminal echo, line buffering, flow control and signal
    keys are turned off on stdin so key presses neither print over the
    animation nor raise ``KeyboardInterrupt``: Ctrl+C and Ctrl+Q reach
    :class:`keybubbles.keysource.KeySource` as plain bytes instead.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._live: Live | None = None
        self._saved_tty: list | None = None

    @property
    def size(self) -> tuple[int, int]:
        width, height = self.console.size
        return width, height

    def check(self) -> None:
        """Raise if there is no interactive terminal to draw on."""
        if not self.console.is_terminal:
            raise RuntimeError("stdout is not a terminal")
        if not sys.stdin.isatty():
            raise RuntimeError("stdin is not a terminal")
        width, height = self.size
        if width <= 0 or height <= 0:
            raise RuntimeError(f"Cannot determine terminal size (got {width}x{height})")

    def present(self, top: int, keyboard: Text, bottom: int) -> None:
        if self._live is None:
            return
        frame = Text(no_wrap=True, overflow="crop")
        frame.append("\n" * top)
        frame.append_text(keyboard)
        frame.append("\n" * bottom)
        self._live.update(frame, refresh=True)

    def __enter__(self) -> TerminalSurface:
        self._disable_echo()
        self._live = Live(
            console=self.console,
            screen=True,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()
        logger.info("Terminal surface opened (%dx%d)", *self.size)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
        self._restore_echo()
        logger.info("Terminal surface closed")

    # -- internals ------------------------------------------------------------

    def _disable_echo(self) -> None:
        fd = sys.stdin.fileno()
        self._saved_tty = termios.tcgetattr(fd)
        attrs = termios.tcgetattr(fd)
        # IXON would swallow Ctrl+Q and Ctrl+S as flow control.
        attrs[0] &= ~termios.IXON
        attrs[3] &= ~(termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN)
        attrs[6][termios.VMIN] = 1
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)

    def _restore_echo(self) -> None:
        if self._saved_tty is None:
            return
        fd = sys.stdin.fileno()
        # Drop the keystrokes typed during the session so the shell doesn't see them.
        termios.tcflush(fd, termios.TCIFLUSH)
        termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_tty)
        self._saved_tty = None
