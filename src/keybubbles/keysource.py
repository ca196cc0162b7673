"""Blocking key-press source reading the controlling terminal.

:class:`KeySource` reads raw bytes from a file descriptor (stdin by default)
that :class:`keybubbles.terminal.TerminalSurface` has switched to
non-canonical, non-echoing mode, and decodes them with
:func:`keybubbles.keys.parse_keys`.  A self-pipe lets :meth:`KeySource.close`
wake a reader blocked in :meth:`KeySource.get` from another thread.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import threading
from collections import deque

from keybubbles.keys import KeyPress, parse_keys

logger = logging.getLogger(__name__)

_READ_SIZE = 1024


class KeySource:
    """Blocking stream of :class:`KeyPress` values from a terminal.

    Parameters
    ----------
    fd:
        File descriptor to read from.  Defaults to ``sys.stdin``.
    """

    def __init__(self, fd: int | None = None) -> None:
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending: deque[KeyPress] = deque()
        self._lock = threading.Lock()
        self._closed = False
        self._wake_r, self._wake_w = os.pipe()

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self) -> KeyPress | None:
        """Block until the next key press; ``None`` once the source is closed."""
        while not self._pending:
            with self._lock:
                if self._closed:
                    self._release_pipe()
                    return None
                wake_r = self._wake_r

            readable, _, _ = select.select([self._fd, wake_r], [], [])
            if wake_r in readable:
                continue  # close() was called; handled at the top of the loop

            data = os.read(self._fd, _READ_SIZE)
            if not data:
                logger.info("Terminal input reached end of file")
                self.close()
                continue
            presses = parse_keys(self._decoder.decode(data))
            logger.debug("Read %d byte(s) -> %s", len(data), presses)
            self._pending.extend(presses)
        return self._pending.popleft()

    def close(self) -> None:
        """Wake up any thread blocked in :meth:`get`; later calls return ``None``."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            os.write(self._wake_w, b"\0")
        logger.info("Key source closed")

    def __enter__(self) -> KeySource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _release_pipe(self) -> None:
        # Called with the lock held, by the reader only, once it has seen
        # the close, so no select() is still watching these descriptors.
        if self._wake_r < 0:
            return
        os.close(self._wake_r)
        os.close(self._wake_w)
        self._wake_r = self._wake_w = -1
