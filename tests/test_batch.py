import pytest

from tdswire.batch import has_prefix_fold, split

CASES = [
    (
        "use DB\ngo\nselect 1\ngo\nselect 2\n",
        ["use DB\n", "\nselect 1\n", "\nselect 2\n"],
    ),
    ("go\nuse DB go\n", ["\nuse DB go\n"]),
    (
        "select 'It''s go time'\ngo\nselect top 1 1",
        ["select 'It''s go time'\n", "\nselect top 1 1"],
    ),
    (
        "select 1 /* go */\ngo\nselect top 1 1",
        ["select 1 /* go */\n", "\nselect top 1 1"],
    ),
    (
        "select 1 -- go\ngo\nselect top 1 1",
        ["select 1 -- go\n", "\nselect top 1 1"],
    ),
    ('"0\'"', ['"0\'"']),
    ("0'", ["0'"]),
    ("--", ["--"]),
    ("GO", []),
    ("/*", ["/*"]),
    ("gO\x01\x00O550655490663051008\n", ["\n"]),
    ("select 1;\nGO  2\nselect 2;", ["select 1;\n", "select 1;\n", "\nselect 2;"]),
    ("select 'hi\\\n-hello';", ["select 'hi-hello';"]),
    ("select 'hi\\\r\n-hello';", ["select 'hi-hello';"]),
    ("select 'hi\\\r-hello';", ["select 'hi-hello';"]),
    ("select 'hi\\\n\nhello';", ["select 'hi\nhello';"]),
]


@pytest.mark.parametrize("sql, expected", CASES)
def test_split(sql, expected):
    assert split(sql, "go") == expected


@pytest.mark.parametrize(
    "s, prefix, expected",
    [
        ("h", "H", True),
        ("h", "K", False),
        ("go 5\n", "go", True),
    ],
)
def test_has_prefix_fold(s, prefix, expected):
    assert has_prefix_fold(s, prefix) is expected


def test_empty_separator_returns_whole_text():
    assert split("select 1", "") == ["select 1"]


def test_text_shorter_than_separator_returned_whole():
    assert split("g", "go") == ["g"]


def test_has_prefix_fold_shorter_string():
    assert has_prefix_fold("g", "go") is False