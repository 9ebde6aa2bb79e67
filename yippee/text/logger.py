"""Console logger with prompts for user confirmation and input."""

from __future__ import annotations

import unicodedata
from typing import IO

from yippee.text.color import BOLD_CODE, RESET_CODE, bold, cyan, green, red, yellow
from yippee.text.i18n import tr

ARROW = "==>"
SMALL_ARROW = " ->"
OP_SYMBOL = "::"

Y_DEFAULT = "y"
N_DEFAULT = "n"

_MAX_LINE_BYTES = 4096


class InputOverflowError(Exception):
    """Raised when a line of user input is too long."""

    def __init__(self) -> None:
        super().__init__(tr("input too long"))


def _to_text(value: object) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sprint(*args: object) -> str:
    """Concatenate values, adding a space only between two non-strings."""
    parts: list[str] = []
    previous: object = None
    for index, arg in enumerate(args):
        if index > 0 and not isinstance(arg, str) and not isinstance(previous, str):
            parts.append(" ")
        parts.append(_to_text(arg))
        previous = arg
    return "".join(parts)


def _sprintln(*args: object) -> str:
    return " ".join(_to_text(arg) for arg in args) + "\n"


def _is_latin(char: str) -> bool:
    return "LATIN" in unicodedata.name(char, "")


class Logger:
    """Writes decorated messages to output streams and reads answers from input."""

    def __init__(self, stdout: IO[str], stderr: IO[str], stdin: IO[str],
                 debug: bool, name: str) -> None:
        self.stdout = stdout
        self.stderr = stderr
        self.stdin = stdin
        self.debug = debug
        self.name = name

    def child(self, name: str) -> Logger:
        """Return a logger sharing this one's streams under another name."""
        return Logger(self.stdout, self.stderr, self.stdin, self.debug, name)

    def debugln(self, *args: object) -> None:
        if not self.debug:
            return
        self.println(bold(yellow(f"[DEBUG:{self.name}]")), *args)

    def operation_infoln(self, *args: object) -> None:
        self.println(self.sprint_operation_info(*args))

    def operation_info(self, *args: object) -> None:
        self.print(self.sprint_operation_info(*args))

    def sprint_operation_info(self, *args: object) -> str:
        return _sprint(bold(cyan(OP_SYMBOL + " ")), BOLD_CODE, *args) + RESET_CODE

    def info(self, *args: object) -> None:
        self.print(bold(green(ARROW + " ")), *args)

    def infoln(self, *args: object) -> None:
        self.println(bold(green(ARROW)), *args)

    def warn(self, *args: object) -> None:
        self.print(self.sprint_warn(*args))

    def warnln(self, *args: object) -> None:
        self.println(self.sprint_warn(*args))

    def sprint_warn(self, *args: object) -> str:
        return _sprint(bold(yellow(SMALL_ARROW + " ")), *args)

    def error(self, *args: object) -> None:
        self.stderr.write(self.sprint_error(*args))

    def errorln(self, *args: object) -> None:
        self.stderr.write(_sprintln(self.sprint_error(*args)))

    def sprint_error(self, *args: object) -> str:
        return _sprint(bold(red(SMALL_ARROW + " ")), *args)

    def printf(self, fmt: str, *args: object) -> None:
        self.stdout.write(fmt % args if args else fmt)

    def println(self, *args: object) -> None:
        self.stdout.write(_sprintln(*args))

    def print(self, *args: object) -> None:
        self.stdout.write(_sprint(*args))

    def get_input(self, default_value: str, no_confirm: bool) -> str:
        """Read one line of input, or return ``default_value`` when set or not confirming.

        Raises EOFError when input is exhausted and InputOverflowError when
        the line is too long.
        """
        self.info()

        if default_value or no_confirm:
            self.println(default_value)
            return default_value

        line = self.stdin.readline()
        if line == "":
            raise EOFError("no input")

        line = line.rstrip("\n").rstrip("\r")
        if len(line.encode("utf-8")) >= _MAX_LINE_BYTES:
            raise InputOverflowError()

        return line

    def continue_task(self, prompt: str, preset: bool, no_confirm: bool) -> bool:
        """Ask a yes/no question; ``preset`` is the answer on empty or unusable input."""
        if no_confirm:
            return preset

        yes = tr("yes")
        no = tr("no")

        # Only use the localized initials when they are Latin letters.
        n = no[0] if no and _is_latin(no[0]) else N_DEFAULT
        y = yes[0] if yes and _is_latin(yes[0]) else Y_DEFAULT

        if preset:
            postfix = f" [{y.upper()}/{n}] "
        else:
            postfix = f" [{y}/{n.upper()}] "

        self.operation_info(bold(prompt), bold(postfix))

        line = self.stdin.readline()
        tokens = line.split()
        if len(tokens) != 1:
            return preset

        response = tokens[0].casefold()
        return (
            response == yes.casefold()
            or response == y.casefold()
            or (Y_DEFAULT.casefold() != n.casefold() and response == Y_DEFAULT.casefold())
        )