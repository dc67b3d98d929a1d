"""Line-oriented diffs and field comparisons for document snapshots."""

from querino.diff.fields import FieldChange, compare_fields
from querino.diff.line_diff import (
    DiffLine,
    DiffLineType,
    LineDiff,
    compute_inline_diff,
    compute_line_diff,
)

__all__ = [
    "DiffLine",
    "DiffLineType",
    "FieldChange",
    "LineDiff",
    "compare_fields",
    "compute_inline_diff",
    "compute_line_diff",
]
