from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from .errors import (
    IncompleteFieldError,
    InvalidFormatError,
    OutOfRangeError,
    OverconstrainedError,
)

logger = logging.getLogger(__name__)


# ---- Config ----
HOURS = range(0, 24)
MINUTES = range(0, 60)
SECONDS = range(0, 60)

# H, H:MM or H:MM:SS with an optional am/pm marker ("9pm", "9:30 p.m.").
# Numeric groups are deliberately loose so bad fields can be reported
# individually instead of failing the whole match.
_TIME_RE = re.compile(
    r"""
    \s*
    (?P<hour>[-+]?\d+)
    (?::(?P<minute>[-+]?\d*))?
    (?::(?P<second>[-+]?\d*))?
    \s*
    (?P<marker>[a-z.]+)?
    \s*
    """,
    re.VERBOSE | re.IGNORECASE,
)


@dataclass(frozen=True)
class WallClockTime:
    hour: int
    minute: int
    second: int = 0

    def __post_init__(self) -> None:
        if not (self.hour in HOURS and self.minute in MINUTES and self.second in SECONDS):
            raise ValueError("hour/minute/second out of range")

    def as_time(self) -> time:
        return time(self.hour, self.minute, self.second)

    def label(self) -> str:
        """12-hour label such as '9:30pm' (seconds only shown when set)."""
        hour12 = self.hour % 12 or 12
        suffix = "am" if self.hour < 12 else "pm"
        if self.second:
            return f"{hour12}:{self.minute:02d}:{self.second:02d}{suffix}"
        return f"{hour12}:{self.minute:02d}{suffix}"


@dataclass(frozen=True)
class Target:
    at: datetime
    wall: WallClockTime

    def remaining(self, now: datetime) -> timedelta:
        return max(self.at - now, timedelta(0))

    def relative_day(self, now: datetime) -> str:
        return "today" if self.at.date() == now.date() else "tomorrow"


def _parse_field(text: str, match: re.Match, name: str, allowed: range) -> int:
    raw = match.group(name)
    span = match.span(name)
    if raw == "":
        raise IncompleteFieldError(text, name, span, f"{name} field is incomplete", f"{name} is missing")
    if not raw.isdigit():
        raise InvalidFormatError(text, name, span, "Invalid format", f"{name} has invalid format")
    value = int(raw)
    if value not in allowed:
        raise OutOfRangeError(text, name, span, allowed)
    return value


def _parse_marker(text: str, match: re.Match) -> Optional[str]:
    raw = match.group("marker")
    if raw is None:
        return None
    marker = raw.lower().replace(".", "")
    if marker not in ("am", "pm"):
        raise InvalidFormatError(
            text, "am/pm", match.span("marker"), "Invalid format", "am/pm has invalid format"
        )
    return marker


def parse_time(text: str) -> WallClockTime:
    """
    Parse a time of day.

    Without an am/pm marker the hour is read as 24-hour time. With one,
    12am is midnight and 12pm is noon.
    """
    if not text.strip():
        raise IncompleteFieldError(
            text, "time", (0, len(text)), "Expected time, instead got empty string"
        )

    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise InvalidFormatError(
            text, "time", (0, len(text)), "Invalid format", "could not make sense of this"
        )

    hour = _parse_field(text, match, "hour", HOURS)
    minute = _parse_field(text, match, "minute", MINUTES) if match.group("minute") is not None else 0
    second = _parse_field(text, match, "second", SECONDS) if match.group("second") is not None else 0
    marker = _parse_marker(text, match)

    if marker is not None:
        if hour > 12:
            raise OverconstrainedError(
                text,
                "am/pm",
                match.span("marker"),
                "Time is overconstrained",
                f"{match.group('hour')} is already 24-hour, so this is too much information",
            )
        hour = hour % 12 + (12 if marker == "pm" else 0)

    return WallClockTime(hour, minute, second)


def next_occurrence(wall: WallClockTime, now: datetime) -> Target:
    """First instant strictly after 'now' whose wall-clock time is 'wall'."""
    candidate = datetime.combine(now.date(), wall.as_time(), tzinfo=now.tzinfo)
    if candidate <= now:
        candidate = datetime.combine(now.date() + timedelta(days=1), wall.as_time(), tzinfo=now.tzinfo)
        logger.debug("%s already passed today, rolling over to %s", wall.label(), candidate.date())
    return Target(at=candidate, wall=wall)


def resolve(text: str, now: datetime) -> Target:
    target = next_occurrence(parse_time(text), now)
    logger.debug("resolved %r to %s", text, target.at.isoformat())
    return target
