"""Command-line entry point: kernel options and the thread test menu."""

from __future__ import annotations

import logging
import random
import re
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, TextIO

from kthreads import demos
from kthreads.kernel import Kernel

PROGRAM = "kthreads"
VERSION = "0.1.0"
NAME_MAX_LEN = 32

_NUMBER = re.compile(r"\s*([+-]?)([0-9]+)")
_ATOI = re.compile(r"\s*([+-]?[0-9]+)")


class UsageError(ValueError):
    """The command line could not be understood."""


@dataclass
class DebugOpts:
    """Options that change how debugging messages are shown."""

    location: bool = False
    function: bool = False
    sleep: bool = False
    interactive: bool = False


_OPTION_NAMES = {
    "location": "location",
    "l": "location",
    "function": "function",
    "f": "function",
    "sleep": "sleep",
    "s": "sleep",
    "interactive": "interactive",
    "i": "interactive",
}


def parse_debug_opts(text: str) -> DebugOpts:
    """Parse a comma-separated list of debug options.

    Raises ValueError on an unknown option.
    """
    opts = DebugOpts()
    for token in filter(None, text.split(",")):
        field = _OPTION_NAMES.get(token)
        if field is None:
            raise ValueError(f"invalid debug option {token!r}")
        setattr(opts, field, True)
    return opts


@dataclass(frozen=True)
class DemoTest:
    """An entry of the thread test menu."""

    name: str
    description: str
    func: Callable[[Kernel], Any]


TESTS = (
    DemoTest("simple", "Simple thread interleaving", demos.run_simple),
    DemoTest("garden", "Ornamental garden", demos.run_garden),
    DemoTest("prodcons", "Producer/Consumer", demos.run_prod_cons),
    DemoTest("gardenSem", "Ornamental garden with Semaphores", demos.run_garden_semaphore),
    DemoTest("channel", "Channel", demos.run_channel),
    DemoTest("Join", "Test to proof join", demos.run_join),
    DemoTest("SchedulerS", "Scheduler w/o locks", demos.run_scheduler_simple),
    DemoTest("SchedulerP", "Scheduler w/ locks", demos.run_scheduler_priority),
)


def parse_choice(choice: str) -> Optional[int]:
    """Turn a menu answer (an index or a test name) into a test index.

    Returns None when the answer names no test.
    """
    if choice.endswith("\n"):
        choice = choice[:-1]
    if not choice:
        return None

    match = _NUMBER.fullmatch(choice)
    if match:
        sign, digits = match.groups()
        n = int(digits)
        if sign == "-" and n != 0:
            return None
        return n if n < len(TESTS) else None

    for index, test in enumerate(TESTS):
        if test.name == choice:
            return index
    return None


def choose(input_stream: Optional[TextIO] = None, output: Optional[TextIO] = None) -> int:
    """List the tests and ask until a valid one is chosen; return its index."""
    input_stream = sys.stdin if input_stream is None else input_stream
    output = sys.stdout if output is None else output

    output.write("Available tests:\n")
    for index, test in enumerate(TESTS):
        output.write(f"({index}) {test.name}: {test.description}\n")

    while True:
        output.write("Choose a test to run: ")
        output.flush()
        line = input_stream.readline(NAME_MAX_LEN - 1)
        if not line:
            raise EOFError("no test was chosen")
        index = parse_choice(line)
        if index is not None:
            return index


def run_test(index: int) -> Any:
    """Run test ``index`` on a fresh kernel and return the demo's result."""
    if not 0 <= index < len(TESTS):
        raise ValueError(f"there is no thread test {index}")
    test = TESTS[index]
    print(f"\nRunning thread test {index}: {test.name} -- {test.description}.")
    kernel = Kernel()
    try:
        result = test.func(kernel)
    finally:
        kernel.shutdown()
    print()
    return result


class _DebugHandler(logging.StreamHandler):
    def __init__(self, opts: DebugOpts) -> None:
        super().__init__(sys.stderr)
        self._opts = opts

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        if self._opts.sleep:
            time.sleep(1)
        if self._opts.interactive:
            sys.stdin.readline()


def _configure_debug(flags: str, opts: DebugOpts) -> None:
    if not flags:
        return
    parts = []
    if opts.location:
        parts.append("%(filename)s:%(lineno)d")
    if opts.function:
        parts.append("%(funcName)s")
    parts.append("%(message)s")
    handler = _DebugHandler(opts)
    handler.setFormatter(logging.Formatter(": ".join(parts)))
    logger = logging.getLogger("kthreads")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _initialize(args: List[str]) -> None:
    """Handle the options that set up debugging and randomness."""
    debug_flags = ""
    opts = DebugOpts()
    i = 0
    while i < len(args):
        arg = args[i]
        step = 1
        if arg == "-d":
            if i + 1 == len(args):
                debug_flags = "+"
            else:
                debug_flags = args[i + 1]
                step = 2
        elif arg == "-do":
            if i + 1 == len(args):
                raise UsageError("-do needs a list of options")
            try:
                opts = parse_debug_opts(args[i + 1])
            except ValueError as exc:
                raise UsageError(str(exc)) from exc
            step = 2
        elif arg == "-rs":
            if i + 1 == len(args):
                raise UsageError("-rs needs a seed")
            random.seed(_atoi(args[i + 1]))
            step = 2
        i += step
    _configure_debug(debug_flags, opts)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the program with ``argv`` (without the program name)."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        _initialize(args)
        for arg in args:
            if arg == "-z":
                print(f"{PROGRAM} ({VERSION})")
                return 0
            if arg == "-tt":
                run_test(choose())
                return 0
            if arg.startswith("-t"):
                run_test(_atoi(arg[2:]))
                return 0
    except (ValueError, EOFError) as exc:
        print(f"{PROGRAM}: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())