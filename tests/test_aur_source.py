import os
import subprocess
import threading

import pytest

from yippee.exe.cmd_builder import CmdBuilder
from yippee.text.color import set_use_color
from yippee.workdir.aur_source import (
    DownloadSourceError,
    download_pkgbuild_source,
    download_pkgbuild_source_fanout,
)


@pytest.fixture(autouse=True)
def _non_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)
    set_use_color(True)


class _MakepkgBuilder:
    def __init__(self, parent, show_error=None):
        self.parent = parent
        self.show_error = show_error
        self.passes = 0
        self.commands = []
        self._lock = threading.Lock()

    @property
    def keep_src(self):
        return self.parent.keep_src

    def build_makepkg_cmd(self, directory, *args):
        cmd = self.parent.build_makepkg_cmd(directory, *args)
        with self._lock:
            self.passes += 1
            self.commands.append(cmd)
        return cmd

    def show(self, cmd):
        if self.show_error is not None:
            raise self.show_error()


def _parent(keep_src=False):
    return CmdBuilder(
        makepkg_conf_path="/etc/not.conf",
        makepkg_flags=["--nocheck"],
        makepkg_bin="makepkg",
        keep_src=keep_src,
    )


@pytest.mark.parametrize(
    "keep_src, want",
    [
        (True, "makepkg --nocheck --config /etc/not.conf --verifysource --skippgpcheck -f"),
        (False, "makepkg --nocheck --config /etc/not.conf --verifysource --skippgpcheck -f -Cc"),
    ],
)
def test_download_pkgbuild_source(keep_src, want):
    builder = _MakepkgBuilder(_parent(keep_src))
    download_pkgbuild_source(builder, os.path.join("/tmp", "yippee-bin"), False)

    assert builder.passes == 1
    command = builder.commands[0]
    assert want in str(command)
    assert command.directory == "/tmp/yippee-bin"
    if keep_src:
        assert "-Cc" not in str(command)


def test_download_pkgbuild_source_error():
    builder = _MakepkgBuilder(_parent(), show_error=lambda: subprocess.SubprocessError("<nil>"))

    with pytest.raises(DownloadSourceError) as info:
        download_pkgbuild_source(builder, os.path.join("/tmp", "yippee-bin"), False)

    assert str(info.value) == (
        "error downloading sources: \x1b[36m/tmp/yippee-bin\x1b[0m \n\t context: <nil> \n\t \n"
    )
    assert builder.passes == 1
    assert "makepkg --nocheck --config /etc/not.conf --verifysource --skippgpcheck -f -Cc" in str(
        builder.commands[0]
    )


_FIVE_DIRS = {
    "yippee": "/tmp/yippee",
    "yippee-bin": "/tmp/yippee-bin",
    "yippee-git": "/tmp/yippee-git",
    "yippee-v11": "/tmp/yippee-v11",
    "yippee-v12": "/tmp/yippee-v12",
}


@pytest.mark.parametrize("max_concurrent", [0, 3])
def test_fanout(max_concurrent):
    builder = _MakepkgBuilder(_parent())
    download_pkgbuild_source_fanout(builder, _FIVE_DIRS, True, max_concurrent)

    assert builder.passes == 5
    assert sorted(cmd.directory for cmd in builder.commands) == sorted(_FIVE_DIRS.values())
    assert all("--ignorearch" in str(cmd) for cmd in builder.commands)


def test_fanout_single_package():
    builder = _MakepkgBuilder(_parent())
    download_pkgbuild_source_fanout(builder, {"yippee": "/tmp/yippee"}, False, 0)

    assert builder.passes == 1
    assert "--ignorearch" not in str(builder.commands[0])


def test_fanout_errors():
    builder = _MakepkgBuilder(_parent(), show_error=lambda: subprocess.SubprocessError("<nil>"))

    with pytest.raises(ExceptionGroup) as info:
        download_pkgbuild_source_fanout(builder, _FIVE_DIRS, False, 0)

    assert builder.passes == 5
    assert len(info.value.exceptions) == 5
    assert all(isinstance(exc, DownloadSourceError) for exc in info.value.exceptions)
    assert sorted(exc.pkg_name for exc in info.value.exceptions) == sorted(_FIVE_DIRS.values())


def test_fanout_single_error_is_not_grouped():
    builder = _MakepkgBuilder(_parent(), show_error=lambda: OSError("missing"))

    with pytest.raises(DownloadSourceError) as info:
        download_pkgbuild_source_fanout(builder, {"yippee": "/tmp/yippee"}, False, 0)

    assert info.value.pkg_name == "/tmp/yippee"


def test_fanout_deduplicates_directories():
    builder = _MakepkgBuilder(_parent())
    download_pkgbuild_source_fanout(
        builder, {"a": "/tmp/shared", "b": "/tmp/shared"}, False, 2
    )

    assert builder.passes == 1


def test_fanout_nothing_to_do():
    builder = _MakepkgBuilder(_parent())
    download_pkgbuild_source_fanout(builder, {}, False, 0)

    assert builder.passes == 0