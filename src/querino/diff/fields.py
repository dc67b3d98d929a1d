"""Field-by-field comparison between a stored version and the live document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from querino.diff.line_diff import DiffLine, compute_inline_diff
from querino.models.document import EDITABLE_FIELDS


class FieldChange(BaseModel):
    name: str
    before: Any = None
    after: Any = None
    changed: bool
    lines: list[DiffLine] = Field(default_factory=list)


def _normalize_tags(value: Any) -> list[str]:
    return sorted(value or [])


def compare_fields(
    version_fields: dict[str, Any],
    current_fields: dict[str, Any],
    names: tuple[str, ...] = EDITABLE_FIELDS,
) -> list[FieldChange]:
    """Compare each editable field; tags ignore order and ``content`` carries an inline diff."""
    changes: list[FieldChange] = []
    for name in names:
        before = version_fields.get(name)
        after = current_fields.get(name)
        if name == "tags":
            changed = _normalize_tags(before) != _normalize_tags(after)
        else:
            changed = (before or "") != (after or "")

        lines: list[DiffLine] = []
        if name == "content" and changed:
            lines = compute_inline_diff(before or "", after or "")

        changes.append(
            FieldChange(name=name, before=before, after=after, changed=changed, lines=lines)
        )
    return changes
