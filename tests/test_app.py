import threading

import pytest
from conftest import FakeKeys, RecordingSurface, RecordingTonePlayer

from keybubbles.app import App
from keybubbles.keys import KeyPress
from keybubbles.model import KeyPressed, Model, Quit, RunningState
from keybubbles.tone import frequency_for_key

CTRL = frozenset({"ctrl"})


def make_app(keys, surface, fps=1000, **kwargs):
    model = Model(surface.width, surface.height, max_size=10.0, speed=1.0)
    return App(model, keys, surface, fps=fps, **kwargs)


def test_ctrl_q_at_startup_quits_without_bubble(surface):
    keys = FakeKeys([KeyPress("q", CTRL), KeyPress("a")])
    app = make_app(keys, surface)

    app.input_loop()

    assert app.model.state is RunningState.QUITTING
    assert app.model.bubbles == []


def test_ctrl_c_quits(surface):
    keys = FakeKeys([KeyPress("s"), KeyPress("c", CTRL)])
    app = make_app(keys, surface)
    app.input_loop()
    assert app.model.state is RunningState.QUITTING
    assert len(app.model.bubbles) == 1


def test_closed_source_ends_input_loop(surface):
    keys = FakeKeys([KeyPress("a")])
    keys.close()
    app = make_app(keys, surface)
    app.input_loop()
    assert app.model.running
    assert len(app.model.bubbles) == 1


def test_message_for_checks_quit_before_layout(surface):
    app = make_app(FakeKeys(), surface)
    assert app.message_for(KeyPress("q", CTRL)) == Quit()
    assert app.message_for(KeyPress("q")) == KeyPressed("q")
    assert app.message_for(KeyPress("space")) == KeyPressed("space")


def test_burst_between_frames_is_fully_visible(surface):
    app = make_app(FakeKeys(), surface)
    keys = "qwertyuiopasdfghjklzxcvbnm1234567890"
    presses = [KeyPress(keys[i % len(keys)]) for i in range(100)]

    for press in presses:
        app.handle_key_press(press)
    app.render_frame()

    assert len(app.model.bubbles) == 100
    assert all(bubble.radius == 1.0 for bubble in app.model.bubbles)


def test_tones_only_for_pitched_keys(surface):
    player = RecordingTonePlayer()
    app = make_app(FakeKeys(), surface, tone_player=player, tone_duration_ms=90)

    app.handle_key_press(KeyPress("y"))
    app.handle_key_press(KeyPress("a"))
    app.handle_key_press(KeyPress("c", CTRL))

    assert player.played == [(frequency_for_key("y"), 90)]


def test_run_renders_until_quit():
    surface = RecordingSurface()
    keys = FakeKeys()
    app = make_app(keys, surface, fps=200)

    runner = threading.Thread(target=app.run)
    runner.start()

    keys.push(KeyPress("g"))
    assert surface.presented.wait(timeout=5.0)
    keys.push(KeyPress("q", CTRL))
    runner.join(timeout=5.0)

    assert not runner.is_alive()
    assert app.model.state is RunningState.QUITTING
    assert surface.frames


def test_render_failure_stops_the_engine():
    class BrokenSurface(RecordingSurface):
        def present(self, top, keyboard, bottom):
            raise OSError("terminal went away")

    surface = BrokenSurface()
    keys = FakeKeys()
    app = make_app(keys, surface, fps=200)

    app.run()

    assert isinstance(app.render_error, OSError)
    assert app.model.state is RunningState.QUITTING
    assert keys.closed


def test_fps_must_be_positive(surface):
    with pytest.raises(ValueError):
        make_app(FakeKeys(), surface, fps=0)


def test_input_loop_does_not_hold_lock_while_waiting(surface):
    keys = FakeKeys()
    app = make_app(keys, surface)
    runner = threading.Thread(target=app.input_loop)
    runner.start()

    # The input loop is now blocked in keys.get(); the lock must be free.
    acquired = app.lock.acquire(timeout=1.0)
    assert acquired
    app.lock.release()

    keys.push(KeyPress("q", CTRL))
    runner.join(timeout=5.0)
    assert not runner.is_alive()


def test_burst_while_render_loop_is_running():
    surface = RecordingSurface()
    keys = FakeKeys()
    # Slow growth so no bubble finishes (and is collected) during the test.
    model = Model(surface.width, surface.height, max_size=10.0, speed=0.0001)
    app = App(model, keys, surface, fps=500)

    runner = threading.Thread(target=app.run)
    runner.start()
    assert surface.presented.wait(timeout=5.0)

    letters = "qwertyuiopasdfghjklzxcvbnm1234567890"
    for i in range(100):
        keys.push(KeyPress(letters[i % len(letters)]))
    keys.push(KeyPress("q", CTRL))
    runner.join(timeout=5.0)

    assert not runner.is_alive()
    assert len(app.model.bubbles) == 100
    circles = app.model.draw(surface)
    assert len(circles) == 100
