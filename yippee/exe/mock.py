"""Recording stand-ins for the runner and the command builder."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from yippee.exe.runner import Command
from yippee.settings.modes import TargetMode
from yippee.settings.parser import Arguments


@dataclass
class Call:
    """One recorded call: its arguments, results and working directory."""

    res: list[Any] = field(default_factory=list)
    args: list[Any] = field(default_factory=list)
    directory: str = ""

    def __str__(self) -> str:
        return str(self.args)


@dataclass
class MockRunner:
    """Records the commands it is asked to run instead of running them."""

    show_fn: Callable[[Command], None] | None = None
    capture_fn: Callable[[Command], tuple[str, str]] | None = None
    show_calls: list[Call] = field(default_factory=list)
    capture_calls: list[Call] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def show(self, cmd: Command) -> None:
        try:
            if self.show_fn is not None:
                self.show_fn(cmd)
        finally:
            with self._lock:
                self.show_calls.append(Call(args=[cmd], directory=cmd.directory))

    def capture(self, cmd: Command) -> tuple[str, str]:
        with self._lock:
            self.capture_calls.append(Call(args=[cmd], directory=cmd.directory))
        if self.capture_fn is not None:
            return self.capture_fn(cmd)
        return "", ""


@dataclass
class MockBuilder:
    """A command builder that builds plain commands and records makepkg calls."""

    runner: Any = None
    build_makepkg_cmd_fn: Callable[..., Command] | None = None
    build_pacman_cmd_fn: Callable[[Arguments, TargetMode, bool], Command] | None = None
    build_makepkg_cmd_calls: list[Call] = field(default_factory=list)
    keep_src: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def build_gpg_cmd(self, *args: str) -> Command:
        return Command(["gpg", *args])

    def build_makepkg_cmd(self, directory: str, *args: str) -> Command:
        if self.build_makepkg_cmd_fn is not None:
            result = self.build_makepkg_cmd_fn(directory, *args)
        else:
            result = Command(["makepkg", *args])

        with self._lock:
            self.build_makepkg_cmd_calls.append(
                Call(res=[result], args=[directory, list(args)])
            )
        return result

    def add_makepkg_flag(self, flag: str) -> None:
        """Flags are ignored by the stand-in."""

    def build_git_cmd(self, directory: str, *args: str) -> Command:
        return Command(["git", *args])

    def build_pacman_cmd(self, args: Arguments, mode: TargetMode, no_confirm: bool) -> Command:
        if self.build_pacman_cmd_fn is not None:
            return self.build_pacman_cmd_fn(args, mode, no_confirm)
        return Command(["pacman"])

    def sudo_loop(self) -> None:
        """Credentials are never refreshed by the stand-in."""

    def show(self, cmd: Command) -> None:
        self.runner.show(cmd)

    def capture(self, cmd: Command) -> tuple[str, str]:
        return self.runner.capture(cmd)