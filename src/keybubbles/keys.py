"""Key-press values, terminal input decoding and quit-combo matching.

Everything here is plain Python working on strings, so it can be tested
without a terminal; the file-descriptor side lives in
:mod:`keybubbles.keysource`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

MODIFIERS: frozenset[str] = frozenset({"alt", "ctrl", "shift", "cmd"})

# Named special keys accepted as hotkey triggers.
SPECIAL_KEYS: frozenset[str] = frozenset({
    "space",
    "enter",
    "tab",
    "backspace",
    "delete",
    "esc",
    "up",
    "down",
    "left",
    "right",
    "home",
    "end",
    "page_up",
    "page_down",
    "insert",
    *(f"f{n}" for n in range(1, 13)),
})

_ALIASES = {"win": "cmd", "escape": "esc", "control": "ctrl"}

DEFAULT_QUIT_HOTKEYS = ("ctrl+q", "ctrl+c")

ESC = "\x1b"

# Single characters with a name of their own.
_NAMED_CHARS = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    " ": "space",
    ESC: "esc",
}

# Final byte of ``ESC [`` / ``ESC O`` sequences without a numeric code.
_CSI_LETTERS = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# ``ESC [ <code> ~`` sequences (vt220 style).
_CSI_TILDE_CODES = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "page_up",
    6: "page_down",
    7: "home",
    8: "end",
    11: "f1",
    12: "f2",
    13: "f3",
    14: "f4",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

# xterm modifier parameter: value - 1 is a bit mask.
_MODIFIER_BITS = ((1, "shift"), (2, "alt"), (4, "ctrl"), (8, "cmd"))


@dataclass(frozen=True)
class KeyPress:
    """One key-down transition.

    *key* is the character produced (``"a"``, ``"1"``, ``"["``) or the name of
    a special key (``"space"``, ``"esc"``).  *modifiers* holds the canonical
    names of the modifiers held at the time of the press.
    """

    key: str
    modifiers: frozenset[str] = field(default_factory=frozenset)


def parse_hotkey(hotkey_str: str) -> tuple[frozenset[str], str]:
    """Parse a hotkey string like "ctrl+q" into (modifier_names, trigger_key).

    The last component is always the trigger key. All preceding components
    must be recognized modifiers.

    Raises:
        ValueError: If the string is empty, has an unknown modifier, or has
            no trigger key.
    """
    parts = [p.strip().lower() for p in hotkey_str.split("+")]
    if not parts or parts == [""]:
        raise ValueError(f"Empty hotkey string: {hotkey_str!r}")

    *modifier_parts, trigger_part = [_ALIASES.get(p, p) for p in parts]

    modifiers: set[str] = set()
    for mod in modifier_parts:
        if mod not in MODIFIERS:
            raise ValueError(
                f"Unknown modifier {mod!r} in hotkey {hotkey_str!r}. "
                f"Supported modifiers: alt, ctrl, shift, cmd/win"
            )
        modifiers.add(mod)

    if trigger_part in MODIFIERS:
        raise ValueError(
            f"Trigger key {trigger_part!r} is a modifier. "
            f"The last component of {hotkey_str!r} must be a non-modifier key."
        )
    if trigger_part not in SPECIAL_KEYS and len(trigger_part) != 1:
        raise ValueError(f"Unknown trigger key {trigger_part!r} in hotkey {hotkey_str!r}")

    return frozenset(modifiers), trigger_part


# ---------------------------------------------------------------------------
# Terminal input decoding
# ---------------------------------------------------------------------------


def parse_keys(text: str) -> list[KeyPress]:
    """Split a chunk of raw terminal input into key presses.

    *text* is what one read of a non-canonical, non-echoing terminal returns
    (already decoded from UTF-8).  A terminal only reports presses, so every
    character or escape sequence becomes one :class:`KeyPress`; auto-repeat
    arrives as repeated presses.  Unrecognised escape sequences are dropped.
    """
    presses: list[KeyPress] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != ESC:
            presses.append(_char_press(char))
            i += 1
            continue

        nxt = text[i + 1] if i + 1 < len(text) else ""
        if nxt in ("[", "O"):
            press, i = _parse_sequence(text, i + 2, ss3=nxt == "O")
            if press is not None:
                presses.append(press)
        elif nxt and nxt != ESC:
            # ESC + key is how terminals send Alt+key.
            inner = _char_press(nxt)
            presses.append(KeyPress(inner.key, inner.modifiers | {"alt"}))
            i += 2
        else:
            presses.append(KeyPress("esc"))
            i += 1
    return presses


def _char_press(char: str) -> KeyPress:
    name = _NAMED_CHARS.get(char)
    if name is not None:
        return KeyPress(name)
    code = ord(char)
    if code == 0:
        return KeyPress("space", frozenset({"ctrl"}))
    if code < 32:
        # Ctrl+letter arrives as the letter's control code (Ctrl+Q is 0x11).
        return KeyPress(chr(code + 96) if code <= 26 else chr(code + 64), frozenset({"ctrl"}))
    if char.isupper():
        return KeyPress(char, frozenset({"shift"}))
    return KeyPress(char)


def _parse_sequence(text: str, start: int, ss3: bool) -> tuple[KeyPress | None, int]:
    """Decode the CSI/SS3 sequence whose parameters begin at *start*.

    Returns the press (``None`` if unknown) and the index just past the
    sequence's final byte.
    """
    end = start
    while end < len(text) and not "\x40" <= text[end] <= "\x7e":
        end += 1
    if end >= len(text):
        return None, len(text)

    final = text[end]
    params = text[start:end].split(";")
    modifiers = frozenset()
    if len(params) > 1 and params[1].isdigit():
        modifiers = _decode_modifiers(int(params[1]))

    if final == "~" and not ss3:
        code = int(params[0]) if params[0].isdigit() else None
        name = _CSI_TILDE_CODES.get(code) if code is not None else None
    else:
        name = _CSI_LETTERS.get(final)
    if name is None:
        return None, end + 1
    return KeyPress(name, modifiers), end + 1


def _decode_modifiers(value: int) -> frozenset[str]:
    mask = value - 1
    return frozenset(name for bit, name in _MODIFIER_BITS if mask & bit)


# ---------------------------------------------------------------------------
# Quit detection
# ---------------------------------------------------------------------------


class QuitMatcher:
    """Recognises the key combos that end the session.

    The trigger key compares case-insensitively; the held modifiers must be
    exactly the combo's modifiers, so Ctrl+Alt+C is not Ctrl+C.
    """

    def __init__(self, hotkeys: Iterable[str] = DEFAULT_QUIT_HOTKEYS) -> None:
        self._combos = [parse_hotkey(h) for h in hotkeys]

    def matches(self, press: KeyPress) -> bool:
        key = press.key.lower()
        return any(
            key == trigger and modifiers == press.modifiers
            for modifiers, trigger in self._combos
        )
