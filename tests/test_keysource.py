import os
import threading

import pytest

from keybubbles.keys import KeyPress
from keybubbles.keysource import KeySource


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


def test_reads_presses_in_order(pipe):
    read_fd, write_fd = pipe
    source = KeySource(read_fd)
    os.write(write_fd, b"ab\x11")

    assert source.get() == KeyPress("a")
    assert source.get() == KeyPress("b")
    assert source.get() == KeyPress("q", frozenset({"ctrl"}))
    source.close()
    assert source.get() is None


def test_multibyte_character_split_across_reads(pipe):
    read_fd, write_fd = pipe
    source = KeySource(read_fd)
    encoded = "é".encode()

    os.write(write_fd, encoded[:1])
    result = []
    reader = threading.Thread(target=lambda: result.append(source.get()))
    reader.start()
    os.write(write_fd, encoded[1:])
    reader.join(timeout=5.0)

    assert result == [KeyPress("é")]
    source.close()


def test_close_wakes_blocked_reader(pipe):
    read_fd, _ = pipe
    source = KeySource(read_fd)
    result = []
    reader = threading.Thread(target=lambda: result.append(source.get()))
    reader.start()

    source.close()
    reader.join(timeout=5.0)

    assert not reader.is_alive()
    assert result == [None]
    assert source.closed


def test_close_is_idempotent(pipe):
    source = KeySource(pipe[0])
    source.close()
    source.close()
    assert source.get() is None
    assert source.get() is None


def test_end_of_input_closes_the_source(pipe):
    read_fd, write_fd = pipe
    source = KeySource(read_fd)
    os.write(write_fd, b"z")
    os.close(write_fd)

    assert source.get() == KeyPress("z")
    assert source.get() is None
    assert source.closed
