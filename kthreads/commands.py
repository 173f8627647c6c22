"""Line-oriented command dispatcher for interactive debugging prompts."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


class RunResult(enum.Enum):
    """What the prompt should do after a command has run."""

    STAY = "stay"
    """Stay at the prompt without advancing execution."""
    STEP = "step"
    """Advance execution while keeping the prompt active."""
    NORMALIZE = "normalize"
    """Return to normal execution and leave the prompt."""


CommandFunc = Callable[[List[str], Any], RunResult]
EmptyFunc = Callable[[], RunResult]
UnknownFunc = Callable[[str], RunResult]

_SEPARATOR = " "


def _tokens(line: str) -> List[str]:
    return [token for token in line.split(_SEPARATOR) if token]


@dataclass(frozen=True)
class _Command:
    name: str
    func: CommandFunc
    extra: Any


class CommandManager:
    """Maps command names to handlers and dispatches input lines to them.

    A handler receives the list of arguments that follow the command name
    (words separated by spaces) and the ``extra`` value it was registered
    with.  Lines with no words go to the empty-line handler, and lines
    naming no registered command go to the unknown-command handler.
    """

    CAPACITY = 20

    def __init__(self) -> None:
        self._commands: List[_Command] = []
        self._empty: Optional[EmptyFunc] = None
        self._unknown: Optional[UnknownFunc] = None

    def add_command(self, name: str, func: CommandFunc, extra: Any = None) -> bool:
        """Register ``func`` under ``name``; return False if the table is full."""
        if name is None:
            raise ValueError("command name must not be None")
        if not callable(func):
            raise TypeError("command handler must be callable")
        if len(self._commands) >= self.CAPACITY:
            return False
        self._commands.append(_Command(name, func, extra))
        return True

    def set_empty(self, func: EmptyFunc) -> None:
        """Set the handler for lines that hold no command."""
        self._empty = func

    def set_unknown(self, func: UnknownFunc) -> None:
        """Set the handler for lines naming an unregistered command."""
        self._unknown = func

    def run(self, line: str) -> RunResult:
        """Dispatch ``line`` to the matching handler and return its result."""
        tokens = _tokens(line)
        if not tokens:
            if self._empty is None:
                raise RuntimeError("no handler set for empty lines")
            return self._empty()

        name, args = tokens[0], tokens[1:]
        for command in self._commands:
            if command.name == name:
                return command.func(args, command.extra)

        if self._unknown is None:
            raise RuntimeError("no handler set for unknown commands")
        return self._unknown(name)

    def __len__(self) -> int:
        return len(self._commands)