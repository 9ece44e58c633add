from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType

# Carriage return, then clear the whole line so a shorter render leaves no tail.
_REWIND = Control(ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 2))


class TerminalConsole(Console):
    """Console that lets a broken pipe propagate instead of exiting."""

    def on_broken_pipe(self) -> None:
        raise


class Terminal:
    """
    The one place alrm writes to. Wraps a rich Console so styles are
    dropped automatically when stdout is not a terminal.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or TerminalConsole(highlight=False)

    def write_line(self, text: str) -> None:
        self.console.print(text)

    def redraw(self, text: str) -> None:
        """Replace the current line with 'text' without ending it."""
        self.console.control(_REWIND)
        self.console.print(text, end="")

    def finish(self, text: str) -> None:
        """Replace the current line with 'text' and end it."""
        self.console.control(_REWIND)
        self.console.print(text)
