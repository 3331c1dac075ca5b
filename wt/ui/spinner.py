"""Progress spinner for slow side effects such as installs and fetches."""

from typing import Optional

from rich.console import Console
from rich.status import Status

from wt.constants import SPINNER_NAME


class Spinner:
    """Animated status line on stderr.

    update() swaps the message without restarting the animation; stop()
    clears the line and may print a final message. Calling stop() again
    does nothing.
    """

    def __init__(self, message: str, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.message = message
        self._status = Status(message, console=self.console, spinner=SPINNER_NAME, spinner_style="cyan")
        self._running = False
        self._stopped = False

    def start(self) -> "Spinner":
        if not self._running and not self._stopped:
            self._status.start()
            self._running = True
        return self

    def update(self, message: str) -> None:
        if self._stopped:
            return
        self.message = message
        self._status.update(message)

    def stop(self, final_message: Optional[str] = None) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._running:
            self._status.stop()
            self._running = False
        if final_message:
            self.console.print(final_message)

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


def spinner(message: str, console: Optional[Console] = None) -> Spinner:
    """Start a spinner and return its handle."""
    return Spinner(message, console).start()
