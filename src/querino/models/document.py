"""Document model: the live, editable artefact (prompt, skill, workflow, claw)."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from querino.models.base import DocumentBase

EDITABLE_FIELDS = ("title", "description", "content", "tags")


class ArtefactKind(StrEnum):
    PROMPT = "prompt"
    SKILL = "skill"
    WORKFLOW = "workflow"
    CLAW = "claw"


class Document(DocumentBase):
    """A user-authored artefact whose editable fields are autosaved and versioned."""

    kind: ArtefactKind = ArtefactKind.PROMPT
    title: str = ""
    description: str | None = None
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    author_id: str | None = None

    def editable_fields(self) -> dict[str, Any]:
        """Return a plain-data copy of the fields the editor may change."""
        data = self.model_dump(include=set(EDITABLE_FIELDS))
        return {name: data[name] for name in EDITABLE_FIELDS}

    def apply_fields(self, fields: dict[str, Any]) -> None:
        """Overwrite editable fields from a snapshot, ignoring unknown keys."""
        for name in EDITABLE_FIELDS:
            if name in fields:
                value = fields[name]
                if name == "tags":
                    value = list(value or [])
                elif name == "content" and value is None:
                    value = ""
                setattr(self, name, value)
        self.touch()
