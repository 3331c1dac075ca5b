"""Fitting prompt text into a terminal row.

Frames are redrawn by moving the cursor up one row per line, so every
line has to fit the terminal width without wrapping.
"""

from typing import Sequence, Tuple

from rich.cells import cell_len, set_cell_size

from wt.constants import RESET

ELLIPSIS = "…"


def fit_cells(text: str, width: int) -> str:
    """Cut text to at most width terminal cells, ending in an ellipsis."""
    if width <= 0:
        return ""
    if cell_len(text) <= width:
        return text
    if width == 1:
        return ELLIPSIS
    return set_cell_size(text, width - 1) + ELLIPSIS


def fit_cells_tail(text: str, width: int) -> str:
    """Like fit_cells but keeps the end of the text, for input being typed."""
    if width <= 0:
        return ""
    if cell_len(text) <= width:
        return text
    if width == 1:
        return ELLIPSIS
    kept = []
    used = 0
    for ch in reversed(text):
        used += cell_len(ch)
        if used > width - 1:
            break
        kept.append(ch)
    return ELLIPSIS + "".join(reversed(kept))


def styled_line(parts: Sequence[Tuple[str, str]], width: int) -> str:
    """
    Join (text, style) parts into one line of at most width cells.

    Parts are laid out left to right; the first part that does not fit is
    cut with an ellipsis and everything after it is dropped. Styles are
    ANSI prefixes applied after cutting so escapes never count as cells.
    """
    out = []
    remaining = width
    for text, style in parts:
        if not text:
            continue
        if remaining <= 0:
            break
        fitted = fit_cells(text, remaining)
        out.append(f"{style}{fitted}{RESET}" if style else fitted)
        remaining -= cell_len(fitted)
        if fitted != text:
            break
    return "".join(out)
