"""Split a SQL script into batches separated by a keyword such as ``GO``."""

from __future__ import annotations

import unicodedata
from typing import Callable, Optional

_LINE_COMMENT = "--"
_LEFT_COMMENT = "/*"
_RIGHT_COMMENT = "*/"

# Upper bound on how many times a batch may be repeated by "GO <n>".
_MAX_REPEAT = 1000
_INT64_MAX = 2**63 - 1
_LATIN1_SPACE = frozenset("\t\n\v\f\r \x85\xa0")
_NEWLINES = ("\r", "\n")


def _is_space(ch: str) -> bool:
    if ord(ch) < 0x100:
        return ch in _LATIN1_SPACE
    return ch.isspace()


def _is_number(ch: str) -> bool:
    return unicodedata.category(ch).startswith("N")


def _equal_fold(a: str, b: str) -> bool:
    if len(a) != len(b):
        return False
    return all(
        x == y or x.lower() == y.lower() or x.upper() == y.upper()
        for x, y in zip(a, b)
    )


def has_prefix_fold(s: str, prefix: str) -> bool:
    """Tell whether ``s`` starts with ``prefix``, ignoring case."""
    if len(s) < len(prefix):
        return False
    return _equal_fold(s[: len(prefix)], prefix)


_State = Callable[[], Optional["_State"]]


class _Lexer:
    def __init__(self, sql: str, separator: str) -> None:
        self.sql = sql
        self.sep = separator
        self.at = 0
        self.start = 0
        self.skip: list[int] = []
        self.batches: list[str] = []

    def run(self) -> list[str]:
        state: Optional[_State] = self.whitespace
        while state is not None:
            state = state()
        self.add_current(1)
        return self.batches

    def next(self) -> bool:
        self.at += 1
        return self.at < len(self.sql)

    def add_current(self, count: int) -> bool:
        count = min(max(count, 0), _MAX_REPEAT)
        if self.at >= len(self.sql):
            self.at = len(self.sql)
        text = self.sql[self.start : self.at]
        if self.skip:
            # Skip positions are compared with offsets inside the batch text.
            skipped = set(self.skip)
            text = "".join(ch for i, ch in enumerate(text) if i not in skipped)
            self.skip = []
        if text:
            self.batches.extend([text] * count)
        self.at += len(self.sep)
        self.start = self.at
        return self.at < len(self.sql)

    # States

    def separator(self) -> Optional[_State]:
        if self.at + len(self.sep) >= len(self.sql):
            return None
        rest = self.sql[self.at + len(self.sep) :]

        number_start = -1
        for i, ch in enumerate(rest):
            if ch in _NEWLINES:
                self.add_current(1)
                return self.whitespace
            if _is_space(ch):
                continue
            if _is_number(ch):
                number_start = i
                break
        if number_start < 0:
            return None

        number_end = number_start
        while number_end < len(rest) and _is_number(rest[number_end]):
            number_end += 1
        digits = rest[number_start:number_end]
        if not (digits.isascii() and digits.isdigit()) or int(digits) > _INT64_MAX:
            return self.text
        count = int(digits)

        for ch in rest[number_end:]:
            if ch in _NEWLINES:
                self.add_current(count)
                self.at += number_end
                self.start = self.at
                return self.whitespace
            if not _is_space(ch):
                return self.text
        return None

    def text(self) -> Optional[_State]:
        while True:
            ch = self.sql[self.at]
            if self.sql.startswith(_LINE_COMMENT, self.at):
                self.at += len(_LINE_COMMENT)
                return self.line_comment
            if self.sql.startswith(_LEFT_COMMENT, self.at):
                self.at += len(_LEFT_COMMENT)
                return self.multi_comment
            if ch == "'":
                self.at += 1
                return self.string
            if ch in _NEWLINES:
                self.at += 1
                return self.whitespace
            if not self.next():
                return None

    def whitespace(self) -> Optional[_State]:
        if self.at >= len(self.sql):
            return None
        if _is_space(self.sql[self.at]):
            self.at += 1
            return self.whitespace
        if has_prefix_fold(self.sql[self.at :], self.sep):
            return self.separator
        return self.text

    def line_comment(self) -> Optional[_State]:
        while True:
            if self.at >= len(self.sql):
                return None
            if self.sql[self.at] in _NEWLINES:
                self.at += 1
                return self.whitespace
            if not self.next():
                return None

    def multi_comment(self) -> Optional[_State]:
        while True:
            if self.sql.startswith(_RIGHT_COMMENT, self.at):
                self.at += len(_RIGHT_COMMENT)
                return self.whitespace
            if not self.next():
                return None

    def string(self) -> Optional[_State]:
        sql = self.sql
        while True:
            if self.at >= len(sql):
                return None
            ch = sql[self.at]
            ch_next = sql[self.at + 1] if self.at + 1 < len(sql) else None
            if ch == "\\" and ch_next in _NEWLINES:
                step = 2
                self.skip.extend((self.at, self.at + 1))
                if ch_next == "\r" and self.at + 2 < len(sql) and sql[self.at + 2] == "\n":
                    self.skip.append(self.at + 2)
                    step = 3
                self.at += step
            elif ch == "'" and ch_next == "'":
                self.at += 2
            elif ch == "'":
                self.at += 1
                return self.whitespace
            elif not self.next():
                return None


def split(sql: str, separator: str) -> list[str]:
    """Split ``sql`` into batches on lines holding ``separator``.

    The separator matches without regard to case and may be followed by a
    repeat count (``GO 2``). A backslash before a newline inside a string
    literal removes the newline.
    """
    if not separator or len(sql) < len(separator):
        return [sql]
    return _Lexer(sql, separator).run()