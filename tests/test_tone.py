import numpy as np
import pytest

from keybubbles.tone import KEY_SEMITONES, frequency_for_key, sine_block


def test_reference_pitches():
    assert frequency_for_key("y") == pytest.approx(440.0)
    assert frequency_for_key("p") == pytest.approx(880.0 * 2 ** (-5 / 12))
    assert frequency_for_key("e") == pytest.approx(440.0 * 2 ** (-5 / 12))
    assert frequency_for_key("z") == pytest.approx(246.94, abs=0.01)


def test_every_table_key_has_a_positive_pitch():
    for key, offset in KEY_SEMITONES.items():
        assert frequency_for_key(key) == pytest.approx(440.0 * 2 ** (offset / 12))


@pytest.mark.parametrize("key", ["a", "1", "m", "space", "Q"])
def test_keys_outside_table_are_silent(key):
    assert frequency_for_key(key) is None


def test_sine_blocks_join_without_phase_jump():
    whole = sine_block(440.0, 8000, 0, 200, volume=0.5)
    parts = np.concatenate([
        sine_block(440.0, 8000, 0, 73, volume=0.5),
        sine_block(440.0, 8000, 73, 127, volume=0.5),
    ])
    assert whole.dtype == np.float32
    np.testing.assert_allclose(parts, whole, atol=1e-6)
    assert np.max(np.abs(whole)) <= 0.5 + 1e-6
