import io

import pytest

from yippee.settings.modes import TargetMode
from yippee.settings.parser import (
    Arguments,
    Option,
    ParseError,
    has_param,
    is_arg,
    is_global,
    is_op,
)


@pytest.mark.parametrize(
    "initial, arg, want",
    [(["a", "b"], "c", ["a", "b", "c"]), ([], "c", ["c"])],
)
def test_option_add(initial, arg, want):
    option = Option(args=list(initial))
    option.add(arg)
    assert sorted(option.args) == sorted(want)


@pytest.mark.parametrize("initial", [["a", "b"], []])
def test_option_set(initial):
    option = Option(args=list(initial))
    option.set("c")
    assert option.args == ["c"]


@pytest.mark.parametrize("initial, want", [(["a", "b"], "a"), ([], "")])
def test_option_first(initial, want):
    assert Option(args=initial).first() == want


def test_make_arguments():
    args = Arguments()
    assert args.op == ""
    assert args.options == {}
    assert args.targets == []


def test_copy_global():
    options = {
        "a": Option(),
        "arch": Option(args=["x86_x64"], global_=True),
        "boo": Option(args=["a", "b"], global_=True),
    }
    cmd_args = Arguments(op="Q", options=options, targets=["a", "b"])
    got = cmd_args.copy_global()
    assert got.options != options
    assert got.targets != cmd_args.targets
    assert got.op != cmd_args.op
    assert got == Arguments(
        op="",
        options={
            "arch": Option(args=["x86_x64"], global_=True),
            "boo": Option(args=["a", "b"], global_=True),
        },
        targets=[],
    )


def test_copy():
    options = {
        "a": Option(),
        "arch": Option(args=["x86_x64"], global_=True),
        "boo": Option(args=["a", "b"], global_=True),
    }
    cmd_args = Arguments(op="Q", options=options, targets=["a", "b"])
    got = cmd_args.copy()
    assert got == cmd_args
    assert got == Arguments(
        op="Q",
        options={
            "a": Option(),
            "arch": Option(args=["x86_x64"], global_=True),
            "boo": Option(args=["a", "b"], global_=True),
        },
        targets=["a", "b"],
    )
    got.targets.append("c")
    assert cmd_args.targets == ["a", "b"]


def test_del_arg():
    args = Arguments()
    args.add_param("arch", "arg")
    args.add_param("ask", "arg")
    args.del_arg("arch", "ask")
    assert args.options == {}


@pytest.mark.parametrize(
    "op, options, want",
    [
        ("S", {}, ["-S"]),
        ("Y", {"noconfirm": Option(args=[""], global_=True)}, ["-Y"]),
        (
            "Y",
            {"overwrite": Option(args=["/tmp/a"]), "useask": Option(args=[""])},
            ["-Y", "--overwrite", "/tmp/a", "--useask"],
        ),
        (
            "Y",
            {
                "overwrite": Option(args=["/tmp/a", "/tmp/b", "/tmp/c"]),
                "needed": Option(args=[""]),
            },
            ["-Y", "--overwrite", "/tmp/a", "--overwrite", "/tmp/b",
             "--overwrite", "/tmp/c", "--needed"],
        ),
    ],
)
def test_format_args(op, options, want):
    cmd_args = Arguments(op=op, options=options, targets=["yippee", "yippee-bin"])
    assert sorted(cmd_args.format_args()) == sorted(want)


@pytest.mark.parametrize(
    "options, want",
    [
        (
            {"dbpath": Option(args=["/tmp/a", "/tmp/b"], global_=True)},
            ["--dbpath", "/tmp/a", "--dbpath", "/tmp/b"],
        ),
        ({"noconfirm": Option(args=[""], global_=True)}, ["--noconfirm"]),
        ({"overwrite": Option(args=["/tmp/a"]), "useask": Option(args=[""])}, []),
        (
            {
                "overwrite": Option(args=["/tmp/a", "/tmp/b", "/tmp/c"]),
                "needed": Option(args=[""]),
            },
            [],
        ),
    ],
)
def test_format_globals(options, want):
    cmd_args = Arguments(op="Y", options=options)
    assert sorted(cmd_args.format_globals()) == sorted(want)


def test_is_arg():
    assert is_arg("zorg") is False
    assert is_arg("dbpath") is True


def test_classifiers():
    assert is_op("S") and is_op("getpkgbuild")
    assert not is_op("refresh")
    assert is_global("noconfirm") and not is_global("needed")
    assert has_param("aururl") and not has_param("needed")


def test_parse_stdin():
    args = Arguments()
    args.parse_stdin(io.StringIO("yippee"))
    assert args.targets == ["yippee"]


def test_parse_stdin_broken_pipe():
    stream = io.StringIO("yippee")
    stream.close()
    args = Arguments()
    with pytest.raises(ParseError):
        args.parse_stdin(stream)


class _Terminal(io.StringIO):
    def isatty(self):
        return True


def test_parse_stdin_terminal_rejected():
    args = Arguments()
    with pytest.raises(ParseError):
        args.parse_stdin(_Terminal("yippee"))
    assert args.targets == []


def test_parse_short_combined():
    args = Arguments()
    args.parse(["-Syu", "yippee"])
    assert args.op == "S"
    assert args.exists_arg("y") and args.exists_arg("u")
    assert args.targets == ["yippee"]


def test_parse_short_param_inline_and_next():
    args = Arguments()
    args.parse(["-S", "-b/some/path", "-r", "/root", "pkg"])
    assert args.get_args("b") == ["/some/path"]
    assert args.get_args("r") == ["/root"]
    assert args.targets == ["pkg"]
    assert args.options["b"].global_ is True


def test_parse_long_options():
    args = Arguments()
    args.parse(["--sync", "--aururl=https://aur.example.com", "--dbpath", "/tmp/a", "--needed"])
    assert args.op == "sync"
    assert args.get_arg("aururl") == ("https://aur.example.com", False, True)
    assert args.get_args("dbpath") == ["/tmp/a"]
    assert args.exists_arg("needed")


def test_parse_comma_values():
    args = Arguments()
    args.parse(["-S", "--ignore=a,b"])
    assert args.get_args("ignore") == ["a", "b"]
    assert args.exists_double("ignore") is True


def test_parse_double_dash_makes_targets():
    args = Arguments()
    args.parse(["-S", "--", "-notanoption", "pkg"])
    assert args.targets == ["-notanoption", "pkg"]
    assert "--" not in args.format_args()


def test_parse_defaults_to_yippee_op_with_targets():
    args = Arguments()
    args.parse(["foo"])
    assert args.op == "Y"
    assert args.targets == ["foo"]


def test_parse_defaults_to_sysupgrade():
    args = Arguments()
    args.parse([])
    assert args.op == "S"
    assert args.exists_arg("y") and args.exists_arg("u")


def test_parse_invalid_option():
    with pytest.raises(ParseError, match="invalid option 'zorg'"):
        Arguments().parse(["--zorg"])


def test_parse_two_operations():
    with pytest.raises(ParseError, match="only one operation"):
        Arguments().parse(["-S", "-Q"])


def test_get_arg_missing():
    assert Arguments().get_arg("x", "y") == ("", False, False)
    assert Arguments().get_args("x") is None


def test_targets_add_and_clear():
    args = Arguments()
    args.add_target("a", "b")
    assert args.targets == ["a", "b"]
    args.clear_targets()
    assert args.targets == []


def _args(op, *options):
    args = Arguments(op=op)
    args.add_arg(*options)
    return args


@pytest.mark.parametrize(
    "args, mode, want",
    [
        (_args("S", "h"), TargetMode.ANY, False),
        (_args("D"), TargetMode.ANY, True),
        (_args("D", "k"), TargetMode.ANY, False),
        (_args("F"), TargetMode.ANY, False),
        (_args("F", "y"), TargetMode.ANY, True),
        (_args("Q"), TargetMode.ANY, False),
        (_args("Q", "k"), TargetMode.ANY, True),
        (_args("R"), TargetMode.ANY, True),
        (_args("R", "p"), TargetMode.ANY, False),
        (_args("S"), TargetMode.ANY, True),
        (_args("S", "y", "s"), TargetMode.ANY, True),
        (_args("S", "s"), TargetMode.ANY, False),
        (_args("S", "i"), TargetMode.ANY, False),
        (_args("S", "c"), TargetMode.AUR, False),
        (_args("S", "c"), TargetMode.ANY, True),
        (_args("U"), TargetMode.ANY, True),
        (_args("Y"), TargetMode.ANY, False),
    ],
)
def test_need_root(args, mode, want):
    assert args.need_root(mode) is want