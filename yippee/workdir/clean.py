"""Removes make dependencies and cleans build directories after installing."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import yippee.settings.config as settings_config
from yippee.settings.parser import Arguments
from yippee.text.color import cyan
from yippee.text.i18n import tr

if TYPE_CHECKING:
    from yippee.settings.config import Configuration
    from yippee.text.logger import Logger

_COMMAND_ERRORS = (OSError, subprocess.SubprocessError)


def remove_make(config: Configuration, cmd_builder: Any, make_deps: Iterable[str],
                cmd_args: Arguments) -> None:
    """Remove ``make_deps`` with ``pacman -Rsu``, never asking for confirmation.

    Only the global options of ``cmd_args`` are passed on. Errors from
    running pacman propagate.
    """
    remove_arguments = cmd_args.copy_global()
    remove_arguments.add_arg("R", "s", "u")
    remove_arguments.add_target(*make_deps)

    previous = settings_config.no_confirm
    settings_config.no_confirm = True
    try:
        cmd_builder.show(cmd_builder.build_pacman_cmd(
            remove_arguments, config.mode, settings_config.no_confirm))
    finally:
        settings_config.no_confirm = previous


def clean_after(logger: Logger, cmd_builder: Any, pkgbuild_dirs: Mapping[str, str]) -> None:
    """Reset each build directory and remove untracked files except built packages.

    Failures are reported through ``logger`` and do not stop the cleaning.
    """
    logger.println(tr("removing untracked AUR files from cache..."))

    total = len(pkgbuild_dirs)
    for index, directory in enumerate(pkgbuild_dirs.values(), start=1):
        logger.operation_infoln(tr("Cleaning (%d/%d): %s", index, total, cyan(directory)))

        try:
            cmd_builder.capture(cmd_builder.build_git_cmd(directory, "reset", "--hard", "HEAD"))
        except _COMMAND_ERRORS as exc:
            stderr = getattr(exc, "stderr", "") or ""
            logger.errorln(tr("error resetting %s: %s", directory, stderr))

        try:
            cmd_builder.show(cmd_builder.build_git_cmd(
                directory, "clean", "-fx", "--exclude", "*.pkg.*"))
        except _COMMAND_ERRORS as exc:
            logger.errorln(exc)