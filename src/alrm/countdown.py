from __future__ import annotations

import logging
import math
import re
import time
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Callable, Optional

from .errors import TerminalIOError
from .terminal import Terminal
from .timeparse import Target

logger = logging.getLogger(__name__)


# ---- Config ----
TICK_SECONDS = 1.0
REMAINING_STYLE = "bold yellow"
DONE_STYLE = "bold green"


class Mode(Enum):
    PRINT_ONCE = "print-once"
    LIVE = "live"


class ExitCode(IntEnum):
    OK = 0
    PARSE_ERROR = 1
    IO_ERROR = 74  # sysexits EX_IOERR


def _whole_seconds(remaining: timedelta, round_up: bool = False) -> int:
    total = remaining.total_seconds()
    return max(0, math.ceil(total) if round_up else int(total))


def format_remaining(remaining: timedelta, round_up: bool = False) -> str:
    """HH:MM:SS, truncated to whole seconds unless round_up. Hours keep counting past 24."""
    seconds = _whole_seconds(remaining, round_up)
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


_HHMMSS_RE = re.compile(r"(\d{2,}):([0-5]\d):([0-5]\d)")


def parse_remaining(text: str) -> timedelta:
    match = _HHMMSS_RE.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"not an HH:MM:SS duration: {text!r}")
    h, m, s = (int(g) for g in match.groups())
    return timedelta(hours=h, minutes=m, seconds=s)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def describe_remaining(remaining: timedelta, round_up: bool = False) -> str:
    """
    Human label for a duration: '3 hours 12 minutes', '1 minute 5 seconds'.
    Seconds are dropped once the duration is an hour or more.
    """
    seconds = _whole_seconds(remaining, round_up)
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        parts = [_plural(h, "hour")]
        if m:
            parts.append(_plural(m, "minute"))
        return " ".join(parts)
    if m > 0:
        parts = [_plural(m, "minute")]
        if s:
            parts.append(_plural(s, "second"))
        return " ".join(parts)
    return _plural(s, "second")


def render_line(target: Target, now: datetime, human: bool = False, round_up: bool = False) -> str:
    remaining = target.remaining(now)
    if human:
        shown = describe_remaining(remaining, round_up)
    else:
        shown = format_remaining(remaining, round_up)
    return f"[{REMAINING_STYLE}]{shown}[/] until {target.wall.label()} {target.relative_day(now)}"


def render_done(target: Target) -> str:
    return f"[{DONE_STYLE}]Time's up![/] It is {target.wall.label()}."


def run(
    target: Target,
    mode: Mode,
    now_source: Callable[[], datetime] = datetime.now,
    sleep_fn: Callable[[float], None] = time.sleep,
    writer: Optional[Terminal] = None,
    human: bool = False,
) -> ExitCode:
    """
    Show the time left until 'target'.

    PRINT_ONCE writes a single line. LIVE redraws the same line every
    TICK_SECONDS until the target is reached, then writes the final line.
    Interrupting the loop is left to the caller's process.
    """
    writer = writer or Terminal()
    try:
        if mode is Mode.PRINT_ONCE:
            writer.write_line(render_line(target, now_source(), human))
            return ExitCode.OK

        while True:
            now = now_source()
            remaining = target.remaining(now)
            if remaining <= timedelta(0):
                writer.finish(render_done(target))
                logger.debug("countdown to %s finished", target.at.isoformat())
                return ExitCode.OK

            # Round up so the last render before "Time's up!" is 00:00:01.
            logger.debug("tick: %s left", format_remaining(remaining, round_up=True))
            writer.redraw(render_line(target, now, human, round_up=True))
            sleep_fn(TICK_SECONDS)
    except OSError as e:
        raise TerminalIOError(f"could not write to terminal: {e}") from e
