"""Terminal control for the interactive prompts.

Owns the input device handle, the raw-mode lifecycle and frame redraws.
The process entry point builds one TerminalContext and passes it to every
prompt, so the TTY is opened once and reused until exit.
"""

import contextlib
import os
import select
import shutil
import sys
import termios
import tty
from typing import List, Optional, TextIO

from wt.constants import CLEAR_TO_END, HIDE_CURSOR, SHOW_CURSOR
from wt.exceptions import WtError
from wt.logging_config import get_logger
from wt.ui.keys import Key, decode_key

logger = get_logger(__name__)

TTY_DEVICE = "/dev/tty"


class TerminalError(WtError):
    """Raised when no usable terminal is available for a prompt."""


class TerminalContext:
    """Keyboard input and frame output for one process."""

    def __init__(self, input_fd: Optional[int], output: Optional[TextIO] = None):
        self.input_fd = input_fd
        self.output = output or sys.stderr
        self._pending: List[bytes] = []
        self._rendered_rows = 0

    @classmethod
    def open(cls, output: Optional[TextIO] = None) -> "TerminalContext":
        """Attach to stdin when it is a TTY, otherwise to the controlling TTY.

        stdin is often a pipe when wt runs inside the shell wrapper's command
        substitution, hence the /dev/tty fallback.
        """
        input_fd: Optional[int] = None
        try:
            if sys.stdin is not None and sys.stdin.isatty():
                input_fd = sys.stdin.fileno()
            else:
                input_fd = os.open(TTY_DEVICE, os.O_RDONLY)
        except (OSError, ValueError) as e:
            logger.debug(f"No terminal available for prompts: {e}")
        return cls(input_fd, output)

    @property
    def is_interactive(self) -> bool:
        return self.input_fd is not None

    def columns(self) -> int:
        return shutil.get_terminal_size((80, 24)).columns

    @contextlib.contextmanager
    def raw_mode(self):
        """Put the terminal in raw mode for the duration of the block.

        On every exit path the transient UI is cleared, the saved terminal
        attributes are restored and the cursor is shown again.

        Raises:
            TerminalError: If there is no terminal or it cannot be switched
        """
        if self.input_fd is None:
            raise TerminalError("no terminal available")
        try:
            saved = termios.tcgetattr(self.input_fd)
            tty.setraw(self.input_fd, termios.TCSADRAIN)
        except (termios.error, OSError) as e:
            raise TerminalError(f"cannot enter raw mode: {e}") from e

        self._pending.clear()
        self._rendered_rows = 0
        self.write(HIDE_CURSOR)
        try:
            yield self
        finally:
            self.clear()
            termios.tcsetattr(self.input_fd, termios.TCSADRAIN, saved)
            self.write(SHOW_CURSOR)

    def read_byte(self, timeout: Optional[float] = None) -> Optional[bytes]:
        """Read one byte; None on timeout or end of input."""
        if self._pending:
            return self._pending.pop(0)
        if self.input_fd is None:
            return None
        if timeout is not None:
            ready, _, _ = select.select([self.input_fd], [], [], max(0.0, timeout))
            if not ready:
                return None
        ch = os.read(self.input_fd, 1)
        return ch or None

    def push_back(self, byte: bytes) -> None:
        self._pending.append(byte)

    def read_key(self) -> Key:
        """Block until the next key press."""
        return decode_key(self)

    def render(self, lines: List[str]) -> None:
        """Replace the previously drawn frame with lines.

        Lines must already fit the terminal width, otherwise wrapping
        throws off the row count used to move back up.
        """
        parts = [self._rewind(), CLEAR_TO_END, "\r\n".join(lines)]
        self._rendered_rows = len(lines)
        self.write("".join(parts))

    def clear(self) -> None:
        """Erase the current frame, leaving the cursor where it started."""
        if self._rendered_rows:
            self.write(self._rewind() + CLEAR_TO_END)
        self._rendered_rows = 0

    def _rewind(self) -> str:
        if self._rendered_rows <= 1:
            return "\r"
        return f"\r\x1b[{self._rendered_rows - 1}A"

    def write(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()
