"""Input loop and render loop sharing one Model behind one lock.

The input loop runs on the thread that calls :meth:`App.run` and blocks on
the key source; the render loop runs on a daemon thread and wakes once per
frame.  They meet only through ``App.lock``: neither loop holds it while
waiting (for a key or for the next frame).
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from keybubbles.keys import KeyPress, QuitMatcher
from keybubbles.model import KeyPressed, Message, Model, Quit, Surface
from keybubbles.tone import frequency_for_key

logger = logging.getLogger(__name__)


class KeyStream(Protocol):
    def get(self) -> KeyPress | None: ...

    def close(self) -> None: ...


class ToneOutput(Protocol):
    def play(self, frequency: float, duration_ms: int) -> None: ...


class App:
    """Runs the two engine loops over a shared :class:`Model`.

    Parameters
    ----------
    model:
        The shared state.  Only touched with ``lock`` held.
    keys:
        Blocking source of key presses.  ``get()`` returning ``None`` means
        the source is closed.
    surface:
        Where frames are drawn.
    fps:
        Target frames per second for the render loop.
    quit_matcher:
        Decides which presses end the session.  Checked before the layout.
    tone_player, tone_duration_ms:
        Optional sound for keys that have a pitch.
    """

    def __init__(
        self,
        model: Model,
        keys: KeyStream,
        surface: Surface,
        fps: int = 60,
        quit_matcher: QuitMatcher | None = None,
        tone_player: ToneOutput | None = None,
        tone_duration_ms: int = 150,
    ) -> None:
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps!r}")
        self.model = model
        self.lock = threading.Lock()
        self.frame_interval = 1.0 / fps
        self._keys = keys
        self._surface = surface
        self._quit_matcher = quit_matcher or QuitMatcher()
        self._tone_player = tone_player
        self._tone_duration_ms = tone_duration_ms

        self._render_thread: threading.Thread | None = None
        self._render_stop = threading.Event()
        self.render_error: BaseException | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Start the render loop, then run the input loop until quit."""
        self.start_render_loop()
        logger.info("Engine running at %.1f fps", 1.0 / self.frame_interval)
        try:
            self.input_loop()
        finally:
            self.stop_render_loop()
        logger.info("Engine stopped")

    def start_render_loop(self) -> None:
        if self._render_thread is not None:
            return
        self._render_stop.clear()
        self._render_thread = threading.Thread(
            target=self.render_loop,
            name="keybubbles-render",
            daemon=True,
        )
        self._render_thread.start()

    def stop_render_loop(self, timeout: float = 1.0) -> None:
        self._render_stop.set()
        if self._render_thread is not None:
            self._render_thread.join(timeout=timeout)
            self._render_thread = None

    # ------------------------------------------------------------------
    # Input loop
    # ------------------------------------------------------------------

    def input_loop(self) -> None:
        while True:
            with self.lock:
                if not self.model.running:
                    break

            # Blocks without the lock so the render loop keeps ticking.
            press = self._keys.get()
            if press is None:
                logger.info("Key source closed")
                break
            self.handle_key_press(press)

    def handle_key_press(self, press: KeyPress) -> None:
        """Apply one press to the model, then trigger its tone, if any."""
        message = self.message_for(press)
        with self.lock:
            self.model.update(message)

        if isinstance(message, KeyPressed):
            self._play_tone(message.key)

    def message_for(self, press: KeyPress) -> Message:
        if self._quit_matcher.matches(press):
            return Quit()
        return KeyPressed(press.key)

    def _play_tone(self, key: str) -> None:
        if self._tone_player is None:
            return
        frequency = frequency_for_key(key)
        if frequency is None:
            return
        self._tone_player.play(frequency, self._tone_duration_ms)

    # ------------------------------------------------------------------
    # Render loop
    # ------------------------------------------------------------------

    def render_loop(self) -> None:
        # Event.wait doubles as the frame sleep and the stop signal.
        while not self._render_stop.wait(self.frame_interval):
            try:
                self.render_frame()
            except Exception as exc:
                logger.exception("Rendering failed; shutting down")
                self.render_error = exc
                with self.lock:
                    self.model.update(Quit())
                self._keys.close()
                return

    def render_frame(self) -> None:
        with self.lock:
            self.model.draw(self._surface)
