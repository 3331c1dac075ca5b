"""Terminal user interface: picker, prompts and spinner."""

from .terminal import TerminalContext, TerminalError
from .prompts import confirm, text_input
from .picker import picker, delete_picker, run_picker, PickerConfig, PickerState
from .spinner import Spinner, spinner

__all__ = [
    "TerminalContext",
    "TerminalError",
    "confirm",
    "text_input",
    "picker",
    "delete_picker",
    "run_picker",
    "PickerConfig",
    "PickerState",
    "Spinner",
    "spinner",
]
