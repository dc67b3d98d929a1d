"""Positional line diff for the two-column change viewer.

Lines are paired by index, not by longest common subsequence: row ``i``
compares line ``i`` of the baseline with line ``i`` of the current text. An
insertion near the top therefore shows every following line as changed until
the two sequences happen to line up again. Keep it that way; the viewers render
exactly these rows.
"""

from __future__ import annotations

from enum import StrEnum
from itertools import zip_longest

from pydantic import BaseModel, ConfigDict


class DiffLineType(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class DiffLine(BaseModel):
    """One row of one column. Placeholders have empty content and line number 0."""

    model_config = ConfigDict(frozen=True)

    type: DiffLineType
    content: str
    line_number: int = 0

    @property
    def is_placeholder(self) -> bool:
        return self.line_number == 0

    @property
    def marker(self) -> str:
        if self.type is DiffLineType.ADDED:
            return "+ "
        if self.type is DiffLineType.REMOVED:
            return "- "
        return ""


_PLACEHOLDER = DiffLine(type=DiffLineType.UNCHANGED, content="")


class LineDiff(BaseModel):
    """Two equal-length columns: ``left`` is the baseline, ``right`` the current text."""

    model_config = ConfigDict(frozen=True)

    left: list[DiffLine]
    right: list[DiffLine]

    @property
    def has_changes(self) -> bool:
        return any(
            line.type is not DiffLineType.UNCHANGED for line in (*self.left, *self.right)
        )

    def rows(self) -> list[tuple[DiffLine, DiffLine]]:
        return list(zip(self.left, self.right, strict=True))


def _split_lines(text: str) -> list[str]:
    # Empty text has no lines, so an empty side renders as a blank column.
    return text.split("\n") if text else []


def compute_line_diff(baseline: str, current: str) -> LineDiff:
    """Compare ``baseline`` and ``current`` line by line."""
    left: list[DiffLine] = []
    right: list[DiffLine] = []
    left_number = 1
    right_number = 1

    for old, new in zip_longest(_split_lines(baseline), _split_lines(current)):
        if old is None:
            left.append(_PLACEHOLDER)
            right.append(DiffLine(type=DiffLineType.ADDED, content=new, line_number=right_number))
            right_number += 1
        elif new is None:
            left.append(DiffLine(type=DiffLineType.REMOVED, content=old, line_number=left_number))
            right.append(_PLACEHOLDER)
            left_number += 1
        elif old == new:
            left.append(DiffLine(type=DiffLineType.UNCHANGED, content=old, line_number=left_number))
            right.append(
                DiffLine(type=DiffLineType.UNCHANGED, content=new, line_number=right_number)
            )
            left_number += 1
            right_number += 1
        else:
            left.append(DiffLine(type=DiffLineType.REMOVED, content=old, line_number=left_number))
            right.append(DiffLine(type=DiffLineType.ADDED, content=new, line_number=right_number))
            left_number += 1
            right_number += 1

    return LineDiff(left=left, right=right)


def compute_inline_diff(baseline: str, current: str) -> list[DiffLine]:
    """Single-column positional diff; a changed row yields its removed line then its added line.

    Line numbers refer to the side the line comes from.
    """
    result: list[DiffLine] = []
    pairs = zip_longest(_split_lines(baseline), _split_lines(current))
    for index, (old, new) in enumerate(pairs, 1):
        if old is None:
            result.append(DiffLine(type=DiffLineType.ADDED, content=new, line_number=index))
        elif new is None:
            result.append(DiffLine(type=DiffLineType.REMOVED, content=old, line_number=index))
        elif old == new:
            result.append(DiffLine(type=DiffLineType.UNCHANGED, content=old, line_number=index))
        else:
            result.append(DiffLine(type=DiffLineType.REMOVED, content=old, line_number=index))
            result.append(DiffLine(type=DiffLineType.ADDED, content=new, line_number=index))
    return result
