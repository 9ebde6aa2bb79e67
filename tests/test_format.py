import os
import time

import pytest

from yippee.text.format import (
    format_time,
    format_time_query,
    human,
    less_runes,
    split_db_from_name,
)


@pytest.mark.parametrize(
    "first, second, want",
    [
        (None, None, False),
        ([], [], False),
        (["a"], ["b"], True),
        (["b"], ["a"], False),
        (["a", "a", "a"], ["a", "a", "a"], False),
        (["a"], ["A"], False),
        (["a", "b"], ["a"], False),
        (["a"], ["a", "b"], True),
        (["世", "2", "0"], ["世", "界", "3"], True),
    ],
)
def test_less_runes(first, second, want):
    assert less_runes(first, second) is want


def test_less_runes_accepts_strings():
    assert less_runes("abc", "abd") is True
    assert less_runes("B", "a") is False


def test_less_runes_uppercase_before_lowercase_when_equal_ignoring_case():
    assert less_runes("A", "a") is True


def test_less_runes_sorting():
    names = ["banana", "Apple", "apple", "cherry"]
    ordered = sorted(names, key=lambda s: s)  # placeholder order, replaced below
    from functools import cmp_to_key

    ordered = sorted(
        names,
        key=cmp_to_key(lambda a, b: -1 if less_runes(a, b) else (1 if less_runes(b, a) else 0)),
    )
    assert ordered == ["Apple", "apple", "banana", "cherry"]


@pytest.mark.parametrize(
    "pkg, want",
    [
        ("core/pacman", ("core", "pacman")),
        ("pacman", ("", "pacman")),
        ("a/b/c", ("a", "b/c")),
        ("", ("", "")),
    ],
)
def test_split_db_from_name(pkg, want):
    assert split_db_from_name(pkg) == want


@pytest.mark.parametrize(
    "size, want",
    [
        (0, "0.0 B"),
        (1023, "1023.0 B"),
        (1024, "1.0 KiB"),
        (1536, "1.5 KiB"),
        (1024 * 1024, "1.0 MiB"),
        (5 * 1024 ** 3, "5.0 GiB"),
    ],
)
def test_human(size, want):
    assert human(size) == want


@pytest.fixture
def utc(monkeypatch):
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_format_time_epoch(utc):
    assert format_time(0) == "1970-01-01"


def test_format_time_query_epoch(utc):
    assert format_time_query(0) == "Thu 01 Jan 1970 12:00:00 AM UTC"


def test_format_time_query_afternoon(utc):
    # 2006-01-02 15:04:05 UTC
    assert format_time_query(1136214245) == "Mon 02 Jan 2006 03:04:05 PM UTC"
    assert format_time(1136214245) == "2006-01-02"


def test_format_time_is_prefix_consistent(utc):
    stamp = 1700000000
    date = format_time(stamp)
    year, month, day = date.split("-")
    assert format_time_query(stamp).split()[1] == day
    assert format_time_query(stamp).split()[3] == year
    assert os.environ["TZ"] == "UTC"