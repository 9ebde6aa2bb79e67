"""Builds the git, gpg, makepkg and pacman commands the installer runs."""

from __future__ import annotations

import os
import pwd
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from yippee.exe.runner import Command
from yippee.settings.modes import TargetMode
from yippee.settings.parser import Arguments
from yippee.text.i18n import tr

if TYPE_CHECKING:
    from yippee.settings.config import Configuration
    from yippee.text.logger import Logger

SUDO_LOOP_DURATION = 241
_LOCK_POLL_SECONDS = 3

_GIT_DENY_LIST = frozenset({"GIT_WORK_TREE", "GIT_DIR"})
_PROXY_VARIABLES = ("http_proxy", "https_proxy", "ftp_proxy")


class _Runner(Protocol):
    def show(self, cmd: Command) -> None: ...

    def capture(self, cmd: Command) -> tuple[str, str]: ...


def git_filtered_env() -> dict[str, str]:
    """Return the environment for git without repository overrides and without prompts."""
    env = {key: value for key, value in os.environ.items() if key not in _GIT_DENY_LIST}
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


@dataclass
class CmdBuilder:
    """Turns configured binaries and flags into commands, and runs them."""

    git_bin: str = ""
    git_flags: list[str] = field(default_factory=list)
    gpg_bin: str = ""
    gpg_flags: list[str] = field(default_factory=list)
    makepkg_flags: list[str] = field(default_factory=list)
    makepkg_conf_path: str = ""
    makepkg_bin: str = ""
    sudo_bin: str = ""
    sudo_flags: list[str] = field(default_factory=list)
    sudo_loop_enabled: bool = False
    pacman_bin: str = ""
    pacman_config_path: str = ""
    pacman_db_path: str = ""
    keep_src: bool = False
    runner: _Runner | None = None
    log: Logger | None = None

    def build_gpg_cmd(self, *args: str) -> Command:
        return self._de_elevate(Command([self.gpg_bin, *self.gpg_flags, *args]))

    def build_git_cmd(self, directory: str, *args: str) -> Command:
        arguments = [self.git_bin, *self.git_flags]
        if directory:
            arguments += ["-C", directory]
        arguments += args
        return self._de_elevate(Command(arguments, env=git_filtered_env()))

    def add_makepkg_flag(self, flag: str) -> None:
        self.makepkg_flags.append(flag)

    def build_makepkg_cmd(self, directory: str, *args: str) -> Command:
        arguments = [self.makepkg_bin, *self.makepkg_flags]
        if self.makepkg_conf_path:
            arguments += ["--config", self.makepkg_conf_path]
        arguments += args
        return self._de_elevate(Command(arguments, directory=directory))

    def _de_elevate(self, cmd: Command) -> Command:
        """Run as the invoking user when running as root, or inside systemd-run."""
        if os.geteuid() != 0:
            return cmd

        caller = os.environ.get("SUDO_USER") or os.environ.get("DOAS_USER") or ""
        try:
            entry = pwd.getpwnam(caller)
        except KeyError:
            entry = None

        if entry is not None:
            cmd.user = entry.pw_uid
            cmd.group = entry.pw_gid
            return cmd

        wrapper = [
            "--service-type=oneshot",
            "--pipe", "--wait", "--pty", "--quiet",
            "-p", "DynamicUser=yes",
            "-p", "CacheDirectory=yippee",
            "-E", "HOME=/tmp",
        ]
        if cmd.directory:
            wrapper += ["-p", f"WorkingDirectory={cmd.directory}"]
        for name in _PROXY_VARIABLES:
            value = os.environ.get(name, "")
            if value:
                wrapper += ["-E", f"{name}={value}"]

        wrapper.append(shutil.which(cmd.args[0]) or "")
        wrapper.extend(cmd.args[1:])
        return Command(["systemd-run", *wrapper], directory=cmd.directory)

    def _build_privilege_elevator_cmd(self, arguments: list[str]) -> Command:
        if self.sudo_bin == "su":
            return Command([self.sudo_bin, "-c", " ".join(arguments)])
        return Command([self.sudo_bin, *self.sudo_flags, *arguments])

    def build_pacman_cmd(self, args: Arguments, mode: TargetMode, no_confirm: bool) -> Command:
        """Build a pacman command, elevated when the operation needs root."""
        needs_root = args.need_root(mode)

        arguments = [self.pacman_bin, *args.format_globals(), *args.format_args()]
        if no_confirm:
            arguments.append("--noconfirm")
        arguments += ["--config", self.pacman_config_path, "--", *args.targets]

        if needs_root:
            self._wait_lock(self.pacman_db_path)
            if os.geteuid() != 0:
                return self._build_privilege_elevator_cmd(arguments)

        return Command(arguments)

    def _wait_lock(self, db_path: str) -> None:
        """Block while pacman's database lock file exists."""
        lock_path = os.path.join(db_path, "db.lck")
        if not os.path.exists(lock_path):
            return

        if self.log is not None:
            self.log.warnln(tr("%s is present.", lock_path))
            self.log.warn(tr("There may be another Pacman instance running. Waiting..."))

        while True:
            time.sleep(_LOCK_POLL_SECONDS)
            if not os.path.exists(lock_path):
                if self.log is not None:
                    self.log.println()
                return

    def sudo_loop(self) -> None:
        """Refresh sudo credentials now and keep them fresh in the background."""
        self._update_sudo()
        threading.Thread(target=self._sudo_loop_background, daemon=True).start()

    def _sudo_loop_background(self) -> None:
        while True:
            self._update_sudo()
            time.sleep(SUDO_LOOP_DURATION)

    def _update_sudo(self) -> None:
        while True:
            try:
                self.show(Command([self.sudo_bin, "-v"]))
            except (OSError, subprocess.SubprocessError) as exc:
                if self.log is not None:
                    self.log.errorln(exc)
            else:
                return

    def show(self, cmd: Command) -> None:
        if self.runner is None:
            raise RuntimeError("no runner configured")
        self.runner.show(cmd)

    def capture(self, cmd: Command) -> tuple[str, str]:
        if self.runner is None:
            raise RuntimeError("no runner configured")
        return self.runner.capture(cmd)


def new_cmd_builder(cfg: Configuration, runner: _Runner, logger: Logger,
                    db_path: str) -> CmdBuilder:
    """Create a builder from the configuration."""
    return CmdBuilder(
        git_bin=cfg.git_bin,
        git_flags=cfg.git_flags.split(),
        gpg_bin=cfg.gpg_bin,
        gpg_flags=cfg.gpg_flags.split(),
        makepkg_flags=cfg.m_flags.split(),
        makepkg_conf_path=cfg.makepkg_conf,
        makepkg_bin=cfg.makepkg_bin,
        sudo_bin=cfg.sudo_bin,
        sudo_flags=cfg.sudo_flags.split(),
        sudo_loop_enabled=cfg.sudo_loop,
        pacman_bin=cfg.pacman_bin,
        pacman_config_path=cfg.pacman_conf,
        pacman_db_path=db_path,
        keep_src=cfg.keep_src,
        runner=runner,
        log=logger,
    )