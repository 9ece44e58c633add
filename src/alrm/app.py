from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from . import __version__
from .countdown import ExitCode, Mode, run
from .errors import TerminalIOError, TimeParseError
from .terminal import Terminal
from .timeparse import resolve

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


# ---- Helpers ----
def _now() -> datetime:
    return datetime.now()


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


def _stderr() -> Console:
    return Console(stderr=True, highlight=False)


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    handler = RichHandler(console=_stderr(), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    pkg_logger = logging.getLogger("alrm")
    pkg_logger.setLevel(logging.DEBUG)
    pkg_logger.addHandler(handler)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"alrm {__version__}")
        raise typer.Exit()


@app.command()
def alrm(
    time_words: List[str] = typer.Argument(
        ...,
        metavar="TIME",
        help="Count down to TIME. If TIME has already passed today, count down to TIME tomorrow.",
    ),
    update: bool = typer.Option(
        False, "--update", "-u", help="Keep updating the countdown until the time has passed, then exit."
    ),
    human: bool = typer.Option(False, "--human", help="Show the remaining time in words."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    """A quick countdown timer

    Examples:
      alrm 9         # time until 9:00am
      alrm 9:30pm    # time until 9:30pm
      alrm 9:00 -u   # count down to 9:00am, then exit
    """
    _setup_logging(verbose)
    text = " ".join(time_words)

    try:
        target = resolve(text, _now())
    except TimeParseError as e:
        logger.debug("could not parse %r: %s", text, e)
        _stderr().print(Text(e.render(), style="red"))
        raise typer.Exit(code=int(ExitCode.PARSE_ERROR))

    mode = Mode.LIVE if update else Mode.PRINT_ONCE
    try:
        code = run(target, mode, now_source=_now, sleep_fn=_sleep, writer=Terminal(), human=human)
    except TerminalIOError as e:
        _stderr().print(Text(str(e), style="red"))
        raise typer.Exit(code=int(ExitCode.IO_ERROR))

    raise typer.Exit(code=int(code))


def main() -> None:
    app()
