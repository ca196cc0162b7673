"""Main entry point — wires config, key source, terminal and audio to the engine."""

from __future__ import annotations

import logging
import sys

from keybubbles.app import App, ToneOutput
from keybubbles.config import AppConfig, get_log_path, load_config, validate_config
from keybubbles.keys import QuitMatcher
from keybubbles.keysource import KeySource
from keybubbles.model import Model
from keybubbles.terminal import TerminalSurface

logger = logging.getLogger(__name__)


class KeyBubbles:
    """Application orchestrator.

    Builds every collaborator from the config up front so that setup
    failures surface before the terminal is taken over.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config

        logger.info("Checking terminal...")
        self._surface = TerminalSurface()
        self._surface.check()
        width, height = self._surface.size

        logger.info("Building model for a %dx%d terminal...", width, height)
        self._model = Model(
            width,
            height,
            max_size=config.bubble.max_size,
            speed=config.bubble.speed,
            color_policy=config.bubble.color_policy,
        )
        if config.bubble.speed <= 0:
            logger.warning("bubble.speed=%r: bubbles will never finish", config.bubble.speed)

        logger.info("Initialising audio...")
        self._tone_player = self._init_tone_player()

        logger.info("Initialising key source...")
        self._keys = KeySource()

        self._app = App(
            self._model,
            self._keys,
            self._surface,
            fps=config.render.fps,
            quit_matcher=QuitMatcher(config.input.quit_hotkeys),
            tone_player=self._tone_player,
            tone_duration_ms=config.audio.duration_ms,
        )

    def run(self) -> None:
        """Take over the terminal and run until a quit combo is pressed."""
        logger.info(
            "KeyBubbles is ready.  Press %s to quit.",
            " or ".join(self._config.input.quit_hotkeys),
        )
        try:
            with self._surface:
                self._app.run()
        finally:
            self._keys.close()
        if self._app.render_error is not None:
            raise RuntimeError("Rendering failed") from self._app.render_error
        logger.info("Goodbye.")

    # ------------------------------------------------------------------
    # Module initialisation helpers
    # ------------------------------------------------------------------

    def _init_tone_player(self) -> ToneOutput | None:
        cfg = self._config.audio
        if not cfg.enabled:
            logger.info("Audio disabled")
            return None

        try:
            from keybubbles.audio import TonePlayer
        except OSError as exc:
            raise RuntimeError(f"Audio backend unavailable: {exc}") from exc

        player = TonePlayer(
            sample_rate=cfg.sample_rate,
            device=cfg.device or None,  # "" -> None (system default)
            volume=cfg.volume,
        )
        player.check_device()
        return player


# ======================================================================
# Entry point
# ======================================================================


def main() -> None:
    """Entry point for the KeyBubbles application."""
    try:
        config = load_config()
        validate_config(config)
    except (OSError, ValueError) as exc:
        print(f"keybubbles: invalid configuration: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    log_path = get_log_path(config)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_path,
        level=config.logging.level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        KeyBubbles(config).run()
    except RuntimeError as exc:
        logger.exception("Fatal error")
        print(f"keybubbles: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
