"""Command boundary: validate raw input before it reaches the controller."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

MIN_MINUTES = 1
MAX_MINUTES = 99
MAX_MINUTES_LENGTH = 2

_MINUTES_RE = re.compile(rf"\d{{1,{MAX_MINUTES_LENGTH}}}")


class InvalidCommandError(ValueError):
    """Raised for input that must not reach the lifecycle controller."""


class CommandKind(Enum):
    START = "start"
    RESUME = "resume"
    STOP = "stop"
    RESET = "reset"
    RECOVER = "recover"
    DISMISS = "dismiss"
    STATUS = "status"
    QUIT = "quit"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    minutes: int | None = None


def parse_minutes(text: str) -> int:
    """Whole minutes, one or two digits, 1-99."""
    text = text.strip()
    if not _MINUTES_RE.fullmatch(text):
        raise InvalidCommandError(
            f"duration must be a whole number of minutes "
            f"({MIN_MINUTES}-{MAX_MINUTES}), got {text!r}"
        )
    minutes = int(text)
    if not MIN_MINUTES <= minutes <= MAX_MINUTES:
        raise InvalidCommandError(
            f"duration must be between {MIN_MINUTES} and {MAX_MINUTES} minutes, "
            f"got {minutes}"
        )
    return minutes


def parse_command(line: str) -> Command:
    """Parse ``start 5``, ``stop``, ``resume`` ... into a ``Command``.

    ``start`` without minutes is allowed; the host turns it into a resume
    when there is time left.
    """
    words = line.split()
    if not words:
        raise InvalidCommandError("empty command")
    name, args = words[0].lower(), words[1:]
    try:
        kind = CommandKind(name)
    except ValueError:
        choices = ", ".join(k.value for k in CommandKind)
        raise InvalidCommandError(f"unknown command {name!r} (expected one of: {choices})") from None

    if kind == CommandKind.START:
        if len(args) > 1:
            raise InvalidCommandError("usage: start [MINUTES]")
        return Command(kind, parse_minutes(args[0]) if args else None)
    if args:
        raise InvalidCommandError(f"{kind.value} takes no arguments")
    return Command(kind)
