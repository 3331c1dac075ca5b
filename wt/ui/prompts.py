"""Single-key confirmation and one-line text prompts."""

from dataclasses import dataclass, replace
from typing import List, Optional

from rich.cells import cell_len

from wt.constants import BOLD, DIM, GREEN, RED, RESET, SYMBOL_PROMPT
from wt.formatters.text import fit_cells_tail, styled_line
from wt.logging_config import get_logger
from wt.ui import keys
from wt.ui.keys import Key, is_cancel_key
from wt.ui.terminal import TerminalContext, TerminalError

logger = get_logger(__name__)

NAME_REQUIRED = "Name required"


def confirm(terminal: TerminalContext, message: str) -> bool:
    """
    Ask a yes/no question answered by a single key press.

    Only y or Y answers yes. Any other key, a missing terminal, closed
    input or an interrupt answers no. Never raises.
    """
    prompt = f"{GREEN}{SYMBOL_PROMPT}{RESET} {BOLD}{message}{RESET} {DIM}[y/N]{RESET}"
    try:
        with terminal.raw_mode():
            terminal.render([render_confirm(message, terminal.columns())])
            key = terminal.read_key()
    except (TerminalError, OSError, KeyboardInterrupt) as e:
        logger.debug(f"Confirmation for {message!r} unavailable: {e!r}")
        return False

    answer = key.name == keys.CHAR and key.char in ("y", "Y")
    terminal.write(f"{prompt} {'yes' if answer else 'no'}\n")
    return answer


def render_confirm(message: str, width: int = 80) -> str:
    return styled_line(
        [(SYMBOL_PROMPT, GREEN), (" ", ""), (message, BOLD), (" ", ""), ("[y/N]", DIM), (" ", "")], width
    )


@dataclass(frozen=True)
class TextInputState:
    value: str = ""
    error: str = ""
    answer: Optional[str] = None
    cancelled: bool = False

    @property
    def done(self) -> bool:
        return self.cancelled or self.answer is not None


def text_input_transition(state: TextInputState, key: Key, default: str = "") -> TextInputState:
    """Apply one key to a text prompt. Enter on empty input takes the default."""
    if is_cancel_key(key):
        return replace(state, cancelled=True)
    if key.name == keys.ENTER:
        answer = state.value or default
        if not answer:
            return replace(state, error=NAME_REQUIRED)
        return replace(state, answer=answer)
    if key.name == keys.BACKSPACE:
        return replace(state, value=state.value[:-1], error="")
    if key.name == keys.CLEAR_LINE:
        return replace(state, value="", error="")
    if key.is_printable:
        return replace(state, value=state.value + key.char, error="")
    return state


def render_text_input(state: TextInputState, message: str, default: str = "",
                      width: int = 80) -> List[str]:
    hint = f" ({default})" if default else ""
    value = fit_cells_tail(state.value, width - cell_len(f"{SYMBOL_PROMPT} {message}{hint} "))
    lines = [styled_line(
        [(SYMBOL_PROMPT, GREEN), (" ", ""), (message, BOLD), (hint, DIM), (" ", ""), (value, "")], width
    )]
    if state.error:
        lines.append(styled_line([(f"> {state.error}", RED)], width))
    return lines


def text_input(terminal: TerminalContext, message: str, default: str = "") -> Optional[str]:
    """
    Read one line of text in raw mode.

    Returns:
        The entered text (or the default), or None when cancelled
    """
    state = TextInputState()
    try:
        with terminal.raw_mode():
            while not state.done:
                terminal.render(render_text_input(state, message, default, terminal.columns()))
                state = text_input_transition(state, terminal.read_key(), default)
    except (TerminalError, OSError, KeyboardInterrupt) as e:
        logger.debug(f"Text input cancelled: {e!r}")
        return None

    if state.cancelled:
        return None
    terminal.write(f"{GREEN}{SYMBOL_PROMPT}{RESET} {BOLD}{message}{RESET} {state.answer}\n")
    return state.answer
