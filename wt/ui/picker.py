"""Interactive worktree picker.

The picker is an explicit state machine: a PickerState value, a pure
``transition(state, key, config)`` and a pure ``render(state, config)``,
driven by ``run_picker`` which reads one key at a time in raw mode.

Search mode filters the candidates as the query changes. Enter on a
candidate opens the action menu (Open / Delete); Enter on the create entry
resolves immediately. Backspace, Left or Escape in the action menu go back
to search with the query and highlighted row untouched.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence

from rich.cells import cell_len
from rich.console import Console

from wt.constants import (
    ACTION_DELETE,
    ACTION_LABELS,
    ACTION_OPEN,
    BOLD,
    CYAN,
    DIM,
    GREEN,
    RESET,
    SYMBOL_ARROW,
    SYMBOL_POINTER,
    SYMBOL_PROMPT,
    SYMBOL_SEPARATOR,
)
from wt.formatters import create_choice, fit_cells, fit_cells_tail, styled_line, worktree_choices
from wt.fuzzy import fuzzy_filter
from wt.logging_config import get_logger
from wt.models.picker import Cancel, Choice, Create, Delete, PickerResult, Select
from wt.models.worktree import Worktree
from wt.ui import keys
from wt.ui.keys import Key, is_back_key, is_next_key, is_prev_key
from wt.ui.prompts import confirm, text_input
from wt.ui.terminal import TerminalContext, TerminalError
from wt.utils.paths import contains_path

console = Console(stderr=True)
logger = get_logger(__name__)

DEFAULT_MAX_ROWS = 10


class Mode(Enum):
    SEARCH = "search"
    ACTION = "action"


@dataclass(frozen=True)
class PickerConfig:
    """What a picker run shows and how it resolves."""

    message: str
    source: Callable[[str], List[Choice]]
    seed: str = ""
    with_actions: bool = True  # False: Enter on a candidate selects it directly
    max_rows: int = DEFAULT_MAX_ROWS


@dataclass(frozen=True)
class PickerState:
    mode: Mode = Mode.SEARCH
    query: str = ""
    edited: bool = False
    active: int = 0
    selected: Optional[Choice] = None
    action_index: int = 0
    result: Optional[PickerResult] = None


def search_term(state: PickerState, config: PickerConfig) -> str:
    """The live query, or the seed until the user edits the query."""
    return state.query if state.edited else config.seed


def current_choices(state: PickerState, config: PickerConfig) -> List[Choice]:
    return config.source(search_term(state, config))


def action_choices(choice: Optional[Choice]) -> List[Choice]:
    """Open is always offered; Delete only for deletable worktrees."""
    actions = [Choice(label=ACTION_LABELS[ACTION_OPEN], value=ACTION_OPEN)]
    if choice is not None and choice.deletable:
        actions.append(Choice(label=ACTION_LABELS[ACTION_DELETE], value=ACTION_DELETE))
    return actions


def wrap_index(index: int, delta: int, length: int) -> int:
    if length <= 0:
        return 0
    return (index + delta + length) % length


def transition(state: PickerState, key: Key, config: PickerConfig) -> PickerState:
    """Apply one key press and return the next state.

    A state with ``result`` set is final.
    """
    if key.name in (keys.INTERRUPT, keys.EOF):
        return replace(state, result=Cancel())
    if state.mode is Mode.SEARCH:
        return _search_transition(state, key, config)
    return _action_transition(state, key)


def _search_transition(state: PickerState, key: Key, config: PickerConfig) -> PickerState:
    if key.name == keys.ESCAPE:
        return replace(state, result=Cancel())

    if key.name == keys.ENTER:
        choices = current_choices(state, config)
        if not choices:
            return state
        choice = choices[min(state.active, len(choices) - 1)]
        if choice.is_create:
            return replace(state, result=Create(name=search_term(state, config)))
        if not config.with_actions:
            return replace(state, result=Select(path=choice.value))
        return replace(state, mode=Mode.ACTION, selected=choice, action_index=0)

    if is_next_key(key) or is_prev_key(key):
        delta = 1 if is_next_key(key) else -1
        length = len(current_choices(state, config))
        return replace(state, active=wrap_index(state.active, delta, length))

    if key.name == keys.BACKSPACE:
        return replace(state, query=state.query[:-1], edited=True, active=0)
    if key.name == keys.CLEAR_LINE:
        return replace(state, query="", edited=True, active=0)
    if key.is_printable:
        return replace(state, query=state.query + key.char, edited=True, active=0)
    return state


def _action_transition(state: PickerState, key: Key) -> PickerState:
    actions = action_choices(state.selected)

    if key.name == keys.ENTER:
        path = state.selected.value
        if actions[state.action_index].value == ACTION_DELETE:
            return replace(state, result=Delete(path=path))
        return replace(state, result=Select(path=path))

    if is_back_key(key):
        return replace(state, mode=Mode.SEARCH, selected=None, action_index=0)

    if is_next_key(key):
        return replace(state, action_index=wrap_index(state.action_index, 1, len(actions)))
    if is_prev_key(key):
        return replace(state, action_index=wrap_index(state.action_index, -1, len(actions)))
    return state


BACK_HINT = "(←/backspace: back)"


def render_rows(choices: Sequence[Choice], active: int, width: int, max_rows: int,
                show_description: bool = True) -> List[str]:
    """Render the list rows, keeping the active row inside the window."""
    start = max(0, active - max_rows + 1)
    lines = []
    for index in range(start, min(len(choices), start + max_rows)):
        choice = choices[index]
        is_active = index == active
        label = fit_cells(choice.label, width - 2)
        room = width - 2 - cell_len(label) - 1
        pointer = f"{CYAN}{SYMBOL_POINTER}{RESET}" if is_active else " "
        name = f"{CYAN}{label}{RESET}" if is_active else label
        desc = ""
        if show_description and choice.description and room > 0:
            desc = f" {DIM}{fit_cells(choice.description, room)}{RESET}"
        lines.append(f"{pointer} {name}{desc}")
    return lines


def render(state: PickerState, config: PickerConfig, width: int = 80) -> List[str]:
    """Build the frame for a state: a prompt line followed by the list."""
    if state.mode is Mode.ACTION:
        label = state.selected.label if state.selected else ""
        label = fit_cells(label, max(1, width - 2 - cell_len("  " + BACK_HINT)))
        header = styled_line(
            [(SYMBOL_PROMPT, GREEN), (" ", ""), (label, ""), ("  ", ""), (BACK_HINT, DIM)], width
        )
        return [header] + render_rows(
            action_choices(state.selected), state.action_index, width,
            config.max_rows, show_description=False,
        )

    if state.edited or not config.seed:
        typed, typed_style = state.query, ""
    else:
        typed, typed_style = config.seed, DIM
    # The end of the query stays visible while typing
    typed = fit_cells_tail(typed, width - 2 - cell_len(config.message))
    header = styled_line(
        [(SYMBOL_PROMPT, GREEN), (" ", ""), (config.message, BOLD), (typed, typed_style)], width
    )

    choices = current_choices(state, config)
    if not choices:
        return [header, styled_line([("  ", ""), ("No matches", DIM)], width)]
    return [header] + render_rows(choices, state.active, width, config.max_rows)


def run_picker(terminal: TerminalContext, config: PickerConfig) -> PickerResult:
    """Drive the state machine until it resolves.

    Keys are handled strictly in arrival order and every state is rendered
    before the next key is read. Terminal failures resolve to Cancel.
    """
    state = PickerState()
    try:
        with terminal.raw_mode():
            while True:
                terminal.render(render(state, config, terminal.columns()))
                key = terminal.read_key()
                state = transition(state, key, config)
                if state.result is not None:
                    logger.debug(f"Picker resolved: {state.result}")
                    return state.result
    except (TerminalError, OSError, KeyboardInterrupt) as e:
        logger.debug(f"Picker cancelled: {e!r}")
        return Cancel()


def _header(*parts: str) -> str:
    return f" {SYMBOL_SEPARATOR} ".join(parts)


def picker(
    terminal: TerminalContext,
    repo_label: str,
    worktrees: Sequence[Worktree],
    seed_query: str = "",
    max_rows: int = DEFAULT_MAX_ROWS,
) -> PickerResult:
    """
    Let the user pick, create or delete a worktree.

    A seed query with exactly one match selects it without showing the
    picker. An empty worktree list goes straight to a name prompt.

    Args:
        terminal: Process-wide terminal context
        repo_label: Repository name shown in the prompt
        worktrees: Candidates; not modified
        seed_query: Initial filter, e.g. from the command line
        max_rows: Visible list rows

    Returns:
        Select, Create, Delete or Cancel
    """
    if seed_query:
        matches = fuzzy_filter(worktrees, seed_query)
        if len(matches) == 1:
            match = matches[0][0]
            console.print(f"{SYMBOL_ARROW} {match.name}", markup=False, highlight=False)
            return Select(path=match.path)

    if not worktrees:
        name = text_input(
            terminal,
            _header("wt", repo_label, "Create your first worktree"),
            default=seed_query,
        )
        return Create(name=name) if name else Cancel()

    def source(term: str) -> List[Choice]:
        matched = [wt for wt, _score in fuzzy_filter(worktrees, term)]
        return worktree_choices(matched) + [create_choice(term)]

    result = run_picker(
        terminal,
        PickerConfig(
            message=_header("wt", repo_label) + " / ",
            source=source,
            seed=seed_query,
            max_rows=max_rows,
        ),
    )

    if isinstance(result, Create) and not result.name:
        name = text_input(terminal, "Worktree name")
        return Create(name=name) if name else Cancel()
    return result


def delete_picker(
    terminal: TerminalContext,
    repo_label: str,
    worktrees: Sequence[Worktree],
    current_path: Optional[str] = None,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> Optional[Worktree]:
    """
    Pick a worktree to delete and confirm it.

    The main worktree is never offered. The worktree containing
    current_path, if any, seeds the search.

    Returns:
        The confirmed worktree, or None
    """
    deletable = [wt for wt in worktrees if not wt.is_main]
    if not deletable:
        console.print("No worktrees to delete")
        return None

    current = None
    if current_path:
        current = next((wt for wt in deletable if contains_path(wt.path, current_path)), None)

    def source(term: str) -> List[Choice]:
        return worktree_choices([wt for wt, _score in fuzzy_filter(deletable, term)])

    result = run_picker(
        terminal,
        PickerConfig(
            message=_header("wt rm", repo_label) + " / ",
            source=source,
            seed=current.name if current else "",
            with_actions=False,
            max_rows=max_rows,
        ),
    )
    if not isinstance(result, Select):
        return None

    selected = next((wt for wt in deletable if wt.path == result.path), None)
    if selected is None:
        return None
    if confirm(terminal, f"Delete {selected.name}?"):
        return selected
    return None
