"""Keyboard event decoding.

Turns the raw bytes a terminal sends in raw mode into Key events. Escape
sequences are read with a short timeout so a lone Escape press is not
mistaken for the start of an arrow key.
"""

from dataclasses import dataclass

ESC_SEQUENCE_TIMEOUT = 0.025

# Key names
CHAR = "char"
ENTER = "enter"
BACKSPACE = "backspace"
TAB = "tab"
UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
ESCAPE = "escape"
INTERRUPT = "interrupt"
EOF = "eof"
CLEAR_LINE = "clear_line"
UNKNOWN = "unknown"

_ARROWS = {b"A": UP, b"B": DOWN, b"C": RIGHT, b"D": LEFT}

_CONTROL_BYTES = {
    b"\r": ENTER,
    b"\n": ENTER,
    b"\x7f": BACKSPACE,
    b"\x08": BACKSPACE,
    b"\t": TAB,
    b"\x03": INTERRUPT,
    b"\x04": EOF,
    b"\x15": CLEAR_LINE,
}


@dataclass(frozen=True)
class Key:
    """One decoded key press."""

    name: str
    char: str = ""
    shift: bool = False

    @property
    def is_printable(self) -> bool:
        return self.name == CHAR and self.char.isprintable()


def is_next_key(key: Key) -> bool:
    """Down arrow, or Tab without shift."""
    return key.name == DOWN or (key.name == TAB and not key.shift)


def is_prev_key(key: Key) -> bool:
    """Up arrow, or Shift+Tab."""
    return key.name == UP or (key.name == TAB and key.shift)


def is_back_key(key: Key) -> bool:
    """Keys that leave the action menu."""
    return key.name in (BACKSPACE, LEFT, ESCAPE)


def is_cancel_key(key: Key) -> bool:
    return key.name in (ESCAPE, INTERRUPT, EOF)


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def decode_key(reader) -> Key:
    """
    Read and decode one key press.

    Args:
        reader: Object with ``read_byte(timeout=None) -> bytes | None`` and
            ``push_back(byte)``. read_byte returns None on timeout or end
            of input.

    Returns:
        The decoded Key
    """
    ch = reader.read_byte()
    if ch is None:
        return Key(EOF)

    if ch in _CONTROL_BYTES:
        return Key(_CONTROL_BYTES[ch])

    if ch == b"\x1b":
        return _decode_escape(reader)

    lead = ch[0]
    if lead < 0x20:
        return Key(UNKNOWN)

    raw = ch
    for _ in range(_utf8_length(lead) - 1):
        nxt = reader.read_byte(timeout=ESC_SEQUENCE_TIMEOUT)
        if nxt is None:
            break
        raw += nxt
    return Key(CHAR, char=raw.decode("utf-8", errors="replace"))


def _decode_escape(reader) -> Key:
    seq = reader.read_byte(timeout=ESC_SEQUENCE_TIMEOUT)
    if seq is None:
        return Key(ESCAPE)
    if seq not in (b"[", b"O"):
        # Escape followed by an ordinary key: keep the key for the next read
        reader.push_back(seq)
        return Key(ESCAPE)

    final = reader.read_byte(timeout=ESC_SEQUENCE_TIMEOUT)
    if final is None:
        return Key(ESCAPE)
    if final in _ARROWS:
        return Key(_ARROWS[final])
    if final == b"Z" and seq == b"[":
        return Key(TAB, shift=True)

    # CSI with parameters, e.g. ESC [ 1 ; 2 A or ESC [ 3 ~
    params = b""
    while final is not None and not (0x40 <= final[0] <= 0x7E):
        params += final
        if len(params) > 16:
            return Key(UNKNOWN)
        final = reader.read_byte(timeout=ESC_SEQUENCE_TIMEOUT)
    if final is None:
        return Key(ESCAPE)
    if final in _ARROWS:
        return Key(_ARROWS[final], shift=params.endswith(b";2"))
    return Key(UNKNOWN)
