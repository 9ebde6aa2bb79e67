"""Downloads the sources that PKGBUILDs list, several directories at a time."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from yippee.text.color import cyan
from yippee.text.i18n import tr

_COMMAND_ERRORS = (OSError, subprocess.SubprocessError)


class DownloadSourceError(Exception):
    """Downloading the sources of one PKGBUILD directory failed."""

    def __init__(self, pkg_name: str, inner: BaseException, err_out: str = "") -> None:
        self.pkg_name = pkg_name
        self.inner = inner
        self.err_out = err_out
        super().__init__(
            tr("error downloading sources: %s", cyan(pkg_name))
            + " \n\t context: " + str(inner)
            + " \n\t " + err_out + "\n"
        )


def download_pkgbuild_source(cmd_builder: Any, pkgbuild_dir: str,
                             install_incompatible: bool) -> None:
    """Run makepkg to fetch and verify the sources in ``pkgbuild_dir``.

    Raises DownloadSourceError when makepkg fails.
    """
    args = ["--verifysource", "--skippgpcheck", "-f"]
    if not cmd_builder.keep_src:
        args.append("-Cc")
    if install_incompatible:
        args.append("--ignorearch")

    try:
        cmd_builder.show(cmd_builder.build_makepkg_cmd(pkgbuild_dir, *args))
    except _COMMAND_ERRORS as exc:
        raise DownloadSourceError(pkgbuild_dir, exc) from exc


def download_pkgbuild_source_fanout(cmd_builder: Any, pkgbuild_dirs: Mapping[str, str],
                                    incompatible: bool,
                                    max_concurrent_downloads: int) -> None:
    """Download the sources of every directory, each directory once.

    Uses one worker per CPU unless ``max_concurrent_downloads`` is non-zero.
    A single directory is handled directly and its DownloadSourceError is
    raised as is; otherwise failures are raised together as an ExceptionGroup.
    """
    if not pkgbuild_dirs:
        return

    if len(pkgbuild_dirs) == 1:
        (only_dir,) = pkgbuild_dirs.values()
        download_pkgbuild_source(cmd_builder, only_dir, incompatible)
        return

    workers = max_concurrent_downloads or os.cpu_count() or 1
    unique_dirs = list(dict.fromkeys(pkgbuild_dirs.values()))

    def download(directory: str) -> DownloadSourceError | None:
        try:
            download_pkgbuild_source(cmd_builder, directory, incompatible)
        except DownloadSourceError as exc:
            return DownloadSourceError(directory, exc)
        return None

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(download, unique_dirs))

    errors = [error for error in results if error is not None]
    if errors:
        raise ExceptionGroup(tr("error downloading sources"), errors)