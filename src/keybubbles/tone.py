"""Key -> pitch mapping and sine synthesis."""

from __future__ import annotations

import numpy as np

A4_FREQUENCY = 440.0

# Semitone offsets from A4, laid out like a piano: the qwerty row carries
# the naturals and the digit row the sharps.  The remaining keys double
# notes from those rows (z sits one step below).
KEY_SEMITONES: dict[str, int] = {
    "q": -9,  # C4
    "2": -8,  # C#4/Db4
    "w": -7,  # D4
    "3": -6,  # D#4/Eb4
    "e": -5,  # E4
    "r": -4,  # F4
    "5": -3,  # F#4/Gb4
    "t": -2,  # G4
    "6": -1,  # G#4/Ab4
    "y": 0,  # A4
    "7": 1,  # A#4/Bb4
    "u": 2,  # B4
    "i": 3,  # C5
    "9": 4,  # C#5/Db5
    "o": 5,  # D5
    "0": 6,  # D#5/Eb5
    "p": 7,  # E5
    "[": 8,  # F5
    "=": 9,  # F#5/Gb5
    "z": -10,  # B3
    "s": -8,  # C#4/Db4
    "d": -6,  # D#4/Eb4
    "g": -4,  # F4
    "h": -2,  # G4
}


def frequency_for_key(key: str) -> float | None:
    """Return the tone frequency in Hz for *key*, or ``None`` if it is silent."""
    offset = KEY_SEMITONES.get(key)
    if offset is None:
        return None
    return A4_FREQUENCY * 2 ** (offset / 12)


def sine_block(
    frequency: float,
    sample_rate: int,
    start: int,
    frames: int,
    volume: float = 1.0,
) -> np.ndarray:
    """Generate *frames* float32 samples of a sine wave.

    *start* is the absolute index of the first sample, so consecutive blocks
    join without a phase jump.
    """
    t = (start + np.arange(frames)) / sample_rate
    return (volume * np.sin(2 * np.pi * frequency * t)).astype(np.float32)
