"""Commands to run and the runner that executes them."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yippee.text.logger import Logger


@dataclass
class Command:
    """A program invocation: its arguments, working directory, environment and user."""

    args: list[str] = field(default_factory=list)
    directory: str = ""
    env: dict[str, str] | None = None
    user: int | None = None
    group: int | None = None

    def __str__(self) -> str:
        return " ".join(self.args)


class OSRunner:
    """Runs commands as child processes of this one."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger

    def _popen_options(self, cmd: Command) -> dict[str, object]:
        return {
            "cwd": cmd.directory or None,
            "env": cmd.env,
            "user": cmd.user,
            "group": cmd.group,
        }

    def show(self, cmd: Command) -> None:
        """Run ``cmd`` attached to this process's terminal.

        Raises subprocess.CalledProcessError when it exits non-zero and
        OSError when it cannot be started.
        """
        self.logger.debugln("running", str(cmd))
        subprocess.run(cmd.args, check=True, **self._popen_options(cmd))

    def capture(self, cmd: Command) -> tuple[str, str]:
        """Run ``cmd`` and return its trimmed standard output and standard error.

        Raises subprocess.CalledProcessError, carrying the trimmed output and
        error text, when it exits non-zero.
        """
        self.logger.debugln("capturing", str(cmd))
        completed = subprocess.run(
            cmd.args,
            capture_output=True,
            text=True,
            **self._popen_options(cmd),
        )
        stdout = completed.stdout.strip()
        if completed.returncode != 0:
            raise subprocess.CalledProcessError(
                completed.returncode,
                cmd.args,
                output=stdout,
                stderr=completed.stderr.strip(),
            )
        return stdout, ""