"""Fire-and-forget tone playback via sounddevice.

Every tone gets its own daemon thread that opens an output stream, lets it
run for the tone's duration and closes it again, so neither engine loop ever
waits on the audio device.
"""

from __future__ import annotations

import logging
import threading
import time

import numpy as np
import sounddevice as sd

from keybubbles.tone import sine_block

logger = logging.getLogger(__name__)


class TonePlayer:
    """Plays short sine tones on the default (or a chosen) output device.

    Parameters
    ----------
    sample_rate:
        Output samples per second.
    device:
        PortAudio device index or name.  ``None`` uses the system default
        output device.
    volume:
        Peak amplitude in ``[0.0, 1.0]``.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        device: int | str | None = None,
        volume: float = 0.3,
    ) -> None:
        self.sample_rate = sample_rate
        self.device = device
        self.volume = volume

    def check_device(self) -> None:
        """Raise if no usable output device is available."""
        try:
            sd.check_output_settings(
                device=self.device,
                channels=1,
                dtype="float32",
                samplerate=self.sample_rate,
            )
        except (sd.PortAudioError, ValueError) as exc:
            raise RuntimeError(f"No usable audio output device: {exc}") from exc

    def play(self, frequency: float, duration_ms: int) -> None:
        """Start a tone and return immediately."""
        threading.Thread(
            target=self._play_blocking,
            args=(frequency, duration_ms),
            name="keybubbles-tone",
            daemon=True,
        ).start()

    # -- internals ------------------------------------------------------------

    def _play_blocking(self, frequency: float, duration_ms: int) -> None:
        clock = 0

        def callback(
            outdata: np.ndarray,
            frames: int,
            time_info: object,  # noqa: ARG001
            status: sd.CallbackFlags,
        ) -> None:
            nonlocal clock
            if status:
                logger.debug("Output stream status: %s", status)
            outdata[:, 0] = sine_block(frequency, self.sample_rate, clock, frames, self.volume)
            clock += frames

        try:
            with sd.OutputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                device=self.device,
                callback=callback,
            ):
                time.sleep(duration_ms / 1000.0)
        except sd.PortAudioError:
            logger.warning("Failed to play %.1f Hz tone", frequency, exc_info=True)
