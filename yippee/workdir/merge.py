"""Fast-forwards the cloned PKGBUILD repositories."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from typing import Any

from yippee.text.i18n import tr

_COMMAND_ERRORS = (OSError, subprocess.SubprocessError)


class MergeError(Exception):
    """Resetting or merging a PKGBUILD repository failed."""


def _stderr_of(exc: BaseException) -> str:
    stderr = getattr(exc, "stderr", "")
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", "replace")
    return stderr or ""


def git_merge(cmd_builder: Any, directory: str) -> None:
    """Hard-reset ``directory`` and fast-forward it; raises MergeError on failure."""
    try:
        cmd_builder.capture(cmd_builder.build_git_cmd(directory, "reset", "--hard", "HEAD"))
    except _COMMAND_ERRORS as exc:
        raise MergeError(tr("error resetting %s: %s", directory, _stderr_of(exc))) from exc

    try:
        cmd_builder.capture(cmd_builder.build_git_cmd(directory, "merge", "--no-edit", "--ff"))
    except _COMMAND_ERRORS as exc:
        raise MergeError(tr("error merging %s: %s", directory, _stderr_of(exc))) from exc


def merge_pkgbuilds(cmd_builder: Any, pkgbuild_dirs: Mapping[str, str]) -> None:
    """Merge every directory in turn, stopping at the first failure."""
    for directory in pkgbuild_dirs.values():
        git_merge(cmd_builder, directory)