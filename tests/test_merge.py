import os
import subprocess

import pytest

from yippee.exe.cmd_builder import CmdBuilder
from yippee.exe.mock import MockBuilder, MockRunner
from yippee.workdir.merge import MergeError, git_merge, merge_pkgbuilds


def _failing_on(word, stderr):
    def capture(cmd):
        if word in cmd.args:
            raise subprocess.CalledProcessError(1, cmd.args, output="", stderr=stderr)
        return "", ""

    return capture


def test_git_merge_runs_reset_then_merge():
    runner = MockRunner()
    git_merge(MockBuilder(runner=runner), "/tmp/yippee")

    assert [str(call.args[0]) for call in runner.capture_calls] == [
        "git reset --hard HEAD",
        "git merge --no-edit --ff",
    ]


def test_git_merge_targets_directory(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)
    runner = MockRunner()
    builder = CmdBuilder(git_bin="git", runner=runner)

    git_merge(builder, "/tmp/yippee")

    assert len(runner.capture_calls) == 2
    for call in runner.capture_calls:
        args = call.args[0].args
        assert args[args.index("-C") + 1] == "/tmp/yippee"


def test_git_merge_reset_failure():
    runner = MockRunner(capture_fn=_failing_on("reset", "boom"))

    with pytest.raises(MergeError) as info:
        git_merge(MockBuilder(runner=runner), "/tmp/yippee")

    assert str(info.value) == "error resetting /tmp/yippee: boom"
    assert len(runner.capture_calls) == 1


def test_git_merge_merge_failure():
    runner = MockRunner(capture_fn=_failing_on("merge", "conflict"))

    with pytest.raises(MergeError) as info:
        git_merge(MockBuilder(runner=runner), "/tmp/yippee")

    assert str(info.value) == "error merging /tmp/yippee: conflict"
    assert len(runner.capture_calls) == 2


def test_merge_pkgbuilds_all_directories():
    runner = MockRunner()
    merge_pkgbuilds(MockBuilder(runner=runner), {"a": "/tmp/a", "b": "/tmp/b", "c": "/tmp/c"})

    assert len(runner.capture_calls) == 6


def test_merge_pkgbuilds_stops_at_first_failure():
    runner = MockRunner(capture_fn=_failing_on("reset", "bad"))

    with pytest.raises(MergeError):
        merge_pkgbuilds(MockBuilder(runner=runner), {"a": "/tmp/a", "b": "/tmp/b"})

    assert len(runner.capture_calls) == 1