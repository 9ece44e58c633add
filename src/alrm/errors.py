from __future__ import annotations

from typing import Optional


class AlrmError(Exception):
    """Base class for everything alrm raises on purpose."""


class TimeParseError(AlrmError, ValueError):
    """
    A time expression that could not be turned into a wall-clock time.

    Keeps the input verbatim plus the span that caused the failure so the
    CLI can point at it.
    """

    def __init__(
        self,
        text: str,
        field: str,
        span: tuple[int, int],
        message: str,
        label: Optional[str] = None,
    ) -> None:
        self.text = text
        self.field = field
        self.span = span
        self.message = message
        self.label = label
        super().__init__(f"{message}: {text!r}")

    def render(self) -> str:
        start, end = self.span
        lines = [f"Error: {self.message}", f"  {self.text}"]
        if self.label is not None:
            width = max(1, end - start)
            lines.append("  " + " " * start + "^" * width + " " + self.label)
        return "\n".join(lines)


class IncompleteFieldError(TimeParseError):
    pass


class InvalidFormatError(TimeParseError):
    pass


class OutOfRangeError(TimeParseError):
    def __init__(
        self,
        text: str,
        field: str,
        span: tuple[int, int],
        allowed: range,
    ) -> None:
        self.allowed = allowed
        bounds = f"{allowed.start}..{allowed.stop - 1}"
        super().__init__(
            text,
            field,
            span,
            f"{field} field is out of range",
            f"this is not in the proper range ({bounds}) for {field}",
        )


class OverconstrainedError(TimeParseError):
    pass


class TerminalIOError(AlrmError, OSError):
    """Writing the countdown to the terminal failed."""
