import pytest

from patchlang.text import unlines


def test_no_lines_is_empty():
    assert unlines() == b""


def test_lines_are_newline_terminated():
    assert unlines("foo", "bar") == b"foo\nbar\n"


def test_single_empty_line():
    assert unlines("") == b"\n"


@pytest.mark.parametrize(
    "lines",
    [
        ("package foo",),
        ("foo()", "...", "bar()"),
        ("", "x", ""),
        ("héllo", "wörld"),
    ],
)
def test_round_trip_through_splitlines(lines):
    out = unlines(*lines)
    assert out.decode("utf-8").splitlines() == list(lines)
    assert out.endswith(b"\n")
    assert out.count(b"\n") == len(lines)