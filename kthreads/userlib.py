"""Helpers used by the user-level shell: numbers, line input and arguments."""

from __future__ import annotations

from typing import List, NamedTuple, TextIO

MAX_LINE_SIZE = 60
MAX_ARG_COUNT = 32
ARG_SEPARATOR = " "
BACKGROUND_MARK = "&"


class PreparedCommand(NamedTuple):
    """A command line split into its arguments."""

    args: List[str]
    join: bool
    """Whether the shell waits for the command (no leading ``&``)."""


def itoa(n: int) -> str:
    """Return the decimal representation of ``n``."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError("itoa needs an integer")
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while True:
        n, digit = divmod(n, 10)
        digits.append(chr(ord("0") + digit))
        if n == 0:
            break
    return sign + "".join(reversed(digits))


def prepare_arguments(line: str, max_args: int = MAX_ARG_COUNT) -> PreparedCommand:
    """Split ``line`` into arguments at every single space.

    Consecutive spaces give empty arguments.  A leading ``&`` marks a
    background command: ``join`` is then False and the mark is dropped from
    the first argument.  At most ``max_args - 1`` arguments are allowed,
    leaving room for the terminating entry of an argument vector; more raise
    ValueError.
    """
    if max_args < 2:
        raise ValueError("max_args must leave room for at least one argument")
    args = line.split(ARG_SEPARATOR)
    if len(args) > max_args - 1:
        raise ValueError("too many arguments.")
    join = not line.startswith(BACKGROUND_MARK)
    if not join:
        args[0] = args[0][1:]
    return PreparedCommand(args, join)


def read_line(stream: TextIO, size: int = MAX_LINE_SIZE) -> str:
    """Read one line of at most ``size`` characters, without its newline.

    Reading stops at a newline, after ``size`` characters, or at the end of
    the stream.
    """
    chars: List[str] = []
    while len(chars) < size:
        ch = stream.read(1)
        if not ch or ch == "\n":
            break
        chars.append(ch)
    return "".join(chars)